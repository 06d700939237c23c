"""accounts, wallets, wallet journal and phone transactions

Revision ID: 3f7a9c2d1e04
Revises: 
Create Date: 2026-10-18 09:30:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f7a9c2d1e04"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), server_default="user"),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("email", sa.String(length=100), unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_accounts_username", "accounts", ["username"], unique=True)

    op.create_table(
        "wallets",
        sa.Column("account_id", sa.String(length=36), sa.ForeignKey("accounts.id"), primary_key=True),
        sa.Column("balance_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(length=10), nullable=False, server_default="RUB"),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "phone_transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "owner_id",
            sa.String(length=36),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("provider_transaction_id", sa.String(length=64), nullable=False, unique=True),
        sa.Column("phone_number", sa.String(length=32), nullable=False),
        sa.Column("country", sa.String(length=64), nullable=False),
        sa.Column("operator", sa.String(length=64), nullable=False),
        sa.Column("service", sa.String(length=64), nullable=False),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sms_text", sa.Text()),
        sa.Column("sms_received_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_phone_transactions_owner_id", "phone_transactions", ["owner_id"])
    op.create_index("ix_phone_transactions_status", "phone_transactions", ["status"])
    op.create_index("ix_phone_transactions_created_at", "phone_transactions", ["created_at"])

    op.create_table(
        "wallet_transactions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("account_id", sa.String(length=36), sa.ForeignKey("wallets.account_id"), nullable=False),
        sa.Column(
            "phone_transaction_id",
            sa.Integer(),
            sa.ForeignKey("phone_transactions.id"),
            nullable=True,
        ),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False, server_default="RUB"),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("description", sa.String(length=255)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_wallet_transactions_account_id", "wallet_transactions", ["account_id"])
    op.create_index(
        "ix_wallet_transactions_phone_transaction_id",
        "wallet_transactions",
        ["phone_transaction_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_wallet_transactions_phone_transaction_id", table_name="wallet_transactions")
    op.drop_index("ix_wallet_transactions_account_id", table_name="wallet_transactions")
    op.drop_table("wallet_transactions")

    op.drop_index("ix_phone_transactions_created_at", table_name="phone_transactions")
    op.drop_index("ix_phone_transactions_status", table_name="phone_transactions")
    op.drop_index("ix_phone_transactions_owner_id", table_name="phone_transactions")
    op.drop_table("phone_transactions")

    op.drop_table("wallets")

    op.drop_index("ix_accounts_username", table_name="accounts")
    op.drop_table("accounts")

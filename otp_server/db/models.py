"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from otp_server.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default="user")
    is_active = Column(Boolean, default=True)
    email = Column(String(100), unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    last_login_at = Column(DateTime(timezone=True))


class Wallet(Base):
    __tablename__ = "wallets"

    account_id = Column(String(36), ForeignKey("accounts.id"), primary_key=True)
    balance_cents = Column(Integer, nullable=False, default=0)
    currency = Column(String(10), nullable=False, default="RUB")
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    account = relationship("Account")
    transactions = relationship("WalletTransaction", back_populates="wallet", cascade="all, delete-orphan")


class WalletTransaction(Base):
    __tablename__ = "wallet_transactions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    account_id = Column(String(36), ForeignKey("wallets.account_id"), nullable=False, index=True)
    phone_transaction_id = Column(Integer, ForeignKey("phone_transactions.id"), nullable=True, index=True)
    amount_cents = Column(Integer, nullable=False)
    currency = Column(String(10), nullable=False, default="RUB")
    type = Column(String(20), nullable=False)  # purchase, refund, topup
    description = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    wallet = relationship("Wallet", back_populates="transactions")
    phone_transaction = relationship("PhoneTransaction")


class PhoneTransaction(Base):
    __tablename__ = "phone_transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    provider_transaction_id = Column(String(64), unique=True, nullable=False)
    phone_number = Column(String(32), nullable=False)
    country = Column(String(64), nullable=False)
    operator = Column(String(64), nullable=False)
    service = Column(String(64), nullable=False)
    price_cents = Column(Integer, nullable=False)
    # PENDING, RECEIVED, CANCELED, FINISHED; other provider values stored verbatim
    status = Column(String(20), nullable=False, default="PENDING", index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    sms_text = Column(Text)
    sms_received_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("Account")

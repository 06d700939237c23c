"""SQLAlchemy implementation for the wallet ledger"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import desc, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from otp_server.db.models import Wallet, WalletTransaction


class SqlWalletRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_wallet(self, account_id: str) -> Wallet | None:
        stmt = (
            select(Wallet)
            .where(Wallet.account_id == account_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_wallet(self, account_id: str, currency: str, balance_cents: int) -> Wallet:
        wallet = Wallet(account_id=account_id, currency=currency, balance_cents=balance_cents)
        try:
            # savepoint so a lost creation race does not roll back the caller's work
            async with self.session.begin_nested():
                self.session.add(wallet)
        except IntegrityError:
            wallet = await self.get_wallet(account_id)
            if wallet is None:
                raise
        return wallet

    async def debit_if_sufficient(self, account_id: str, amount_cents: int) -> int | None:
        stmt = (
            update(Wallet)
            .where(Wallet.account_id == account_id, Wallet.balance_cents >= amount_cents)
            .values(balance_cents=Wallet.balance_cents - amount_cents)
            .returning(Wallet.balance_cents)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def credit(self, account_id: str, amount_cents: int) -> int | None:
        stmt = (
            update(Wallet)
            .where(Wallet.account_id == account_id)
            .values(balance_cents=Wallet.balance_cents + amount_cents)
            .returning(Wallet.balance_cents)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_entry(
        self,
        *,
        account_id: str,
        phone_transaction_id: int | None,
        amount_cents: int,
        currency: str,
        type: str,
        description: str | None,
    ) -> WalletTransaction:
        entry = WalletTransaction(
            account_id=account_id,
            phone_transaction_id=phone_transaction_id,
            amount_cents=amount_cents,
            currency=currency,
            type=type,
            description=description,
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def list_entries(self, account_id: str, limit: int, offset: int) -> Sequence[WalletTransaction]:
        stmt = (
            select(WalletTransaction)
            .where(WalletTransaction.account_id == account_id)
            .order_by(desc(WalletTransaction.created_at), desc(WalletTransaction.id))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

"""Ledger: the only place a wallet balance changes.

Debits go through a single conditional UPDATE so two concurrent purchases for
the same account can never both pass the funds check. Every balance change is
journalled in ``wallet_transactions`` within the caller's database transaction.
Amounts are stored as integer cents and surface as ``Decimal``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from otp_server.core.config import get_settings
from otp_server.db.models import Wallet as WalletModel, WalletTransaction as WalletTransactionModel

from .exceptions import InsufficientFunds
from .models import ENTRY_PURCHASE, ENTRY_REFUND, ENTRY_TOPUP, WalletEntry, WalletSnapshot, from_cents, to_cents, to_money
from .repository import WalletRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WalletService:
    repository: WalletRepository
    currency: str = "RUB"
    initial_balance: Decimal = Decimal("0")

    @classmethod
    def with_session(cls, session: AsyncSession) -> "WalletService":
        from otp_server.infrastructure.database.repositories.wallet_repository import SqlWalletRepository

        settings = get_settings()
        return cls(
            SqlWalletRepository(session),
            currency=settings.ledger.currency,
            initial_balance=to_money(settings.ledger.initial_balance),
        )

    async def ensure_wallet(self, account_id: str) -> WalletSnapshot:
        return self._to_snapshot(await self._ensure_model(account_id))

    async def get_snapshot(self, account_id: str) -> WalletSnapshot:
        """Read-only view; an account without a wallet yet reports the initial balance."""
        wallet = await self.repository.get_wallet(account_id)
        if wallet is None:
            return WalletSnapshot(account_id, self.initial_balance, self.currency, None)
        return self._to_snapshot(wallet)

    async def get_balance(self, account_id: str) -> Decimal:
        wallet = await self._ensure_model(account_id)
        return from_cents(wallet.balance_cents)

    async def debit(
        self,
        account_id: str,
        amount: Decimal,
        *,
        phone_transaction_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> WalletSnapshot:
        amount = self._positive(amount)
        await self._ensure_model(account_id)
        balance = await self.repository.debit_if_sufficient(account_id, to_cents(amount))
        if balance is None:
            current = await self.get_balance(account_id)
            raise InsufficientFunds(account_id, amount, current)
        await self.repository.add_entry(
            account_id=account_id,
            phone_transaction_id=phone_transaction_id,
            amount_cents=-to_cents(amount),
            currency=self.currency,
            type=ENTRY_PURCHASE,
            description=description or "Number purchase",
        )
        logger.info("Debited %s from account %s, balance now %s", amount, account_id, from_cents(balance))
        return await self.ensure_wallet(account_id)

    async def credit(
        self,
        account_id: str,
        amount: Decimal,
        *,
        type: str = ENTRY_REFUND,
        phone_transaction_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> WalletSnapshot:
        amount = self._positive(amount)
        await self._ensure_model(account_id)
        balance = await self.repository.credit(account_id, to_cents(amount))
        await self.repository.add_entry(
            account_id=account_id,
            phone_transaction_id=phone_transaction_id,
            amount_cents=to_cents(amount),
            currency=self.currency,
            type=type,
            description=description or "Number refund",
        )
        logger.info("Credited %s (%s) to account %s, balance now %s", amount, type, account_id, from_cents(balance))
        return await self.ensure_wallet(account_id)

    async def topup(self, account_id: str, amount: Decimal, description: Optional[str] = None) -> WalletSnapshot:
        return await self.credit(
            account_id,
            amount,
            type=ENTRY_TOPUP,
            description=description or "Manual top-up",
        )

    async def list_entries(self, account_id: str, limit: int = 20, offset: int = 0) -> list[WalletEntry]:
        rows = await self.repository.list_entries(account_id, limit, offset)
        return [self._to_entry(row) for row in rows]

    async def _ensure_model(self, account_id: str) -> WalletModel:
        wallet = await self.repository.get_wallet(account_id)
        if wallet is None:
            wallet = await self.repository.create_wallet(account_id, self.currency, to_cents(self.initial_balance))
        return wallet

    @staticmethod
    def _positive(amount: Decimal) -> Decimal:
        amount = to_money(amount)
        if amount <= 0:
            raise ValueError(f"amount must be positive, got {amount}")
        return amount

    @staticmethod
    def _to_snapshot(model: WalletModel) -> WalletSnapshot:
        return WalletSnapshot(
            account_id=model.account_id,
            balance=from_cents(model.balance_cents),
            currency=model.currency,
            updated_at=model.updated_at,
        )

    @staticmethod
    def _to_entry(model: WalletTransactionModel) -> WalletEntry:
        return WalletEntry(
            id=model.id,
            account_id=model.account_id,
            phone_transaction_id=model.phone_transaction_id,
            amount=from_cents(model.amount_cents),
            currency=model.currency,
            type=model.type,
            description=model.description,
            created_at=model.created_at,
        )

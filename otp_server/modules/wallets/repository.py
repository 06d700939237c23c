"""Repository protocol for wallet operations."""

from __future__ import annotations

from typing import Protocol, Sequence

from otp_server.db.models import Wallet as WalletModel, WalletTransaction as WalletTransactionModel


class WalletRepository(Protocol):
    async def get_wallet(self, account_id: str) -> WalletModel | None:
        ...

    async def create_wallet(self, account_id: str, currency: str, balance_cents: int) -> WalletModel:
        ...

    async def debit_if_sufficient(self, account_id: str, amount_cents: int) -> int | None:
        ...

    async def credit(self, account_id: str, amount_cents: int) -> int | None:
        ...

    async def add_entry(
        self,
        *,
        account_id: str,
        phone_transaction_id: int | None,
        amount_cents: int,
        currency: str,
        type: str,
        description: str | None,
    ) -> WalletTransactionModel:
        ...

    async def list_entries(self, account_id: str, limit: int, offset: int) -> Sequence[WalletTransactionModel]:
        ...

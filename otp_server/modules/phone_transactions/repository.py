"""Repository protocol for the transaction store."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from otp_server.db.models import PhoneTransaction as PhoneTransactionModel

from .models import NewPhoneTransaction


class PhoneTransactionRepository(Protocol):
    async def create(self, record: NewPhoneTransaction) -> PhoneTransactionModel:
        ...

    async def get(self, transaction_id: int) -> PhoneTransactionModel | None:
        ...

    async def update_fields(
        self,
        transaction_id: int,
        values: dict[str, Any],
        *,
        only_non_terminal: bool = False,
    ) -> PhoneTransactionModel | None:
        ...

    async def list_owned(
        self,
        owner_id: str,
        limit: int,
        offset: int,
        statuses: Sequence[str] | None = None,
    ) -> Sequence[PhoneTransactionModel]:
        ...

    async def count_owned(self, owner_id: str, statuses: Sequence[str] | None = None) -> int:
        ...

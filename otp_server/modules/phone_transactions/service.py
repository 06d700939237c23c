"""Transaction store: durable record of each rental."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from otp_server.db.models import PhoneTransaction as PhoneTransactionModel
from otp_server.modules.wallets.models import from_cents

from .exceptions import InvalidTransition, TransactionForbidden, TransactionNotFound
from .models import (
    ACTIVE_STATUSES,
    NewPhoneTransaction,
    PhoneTransaction,
    PhoneTransactionPage,
    as_utc,
)
from .repository import PhoneTransactionRepository

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = frozenset({"status", "sms_text", "sms_received_at"})


@dataclass(slots=True)
class PhoneTransactionService:
    repository: PhoneTransactionRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "PhoneTransactionService":
        from otp_server.infrastructure.database.repositories.phone_transaction_repository import (
            SqlPhoneTransactionRepository,
        )

        return cls(SqlPhoneTransactionRepository(session))

    async def create(self, record: NewPhoneTransaction) -> PhoneTransaction:
        model = await self.repository.create(record)
        logger.info(
            "Stored transaction %s (provider id %s) for account %s",
            model.id,
            record.provider_transaction_id,
            record.owner_id,
        )
        return self._to_domain(model)

    async def get(self, transaction_id: int) -> PhoneTransaction | None:
        model = await self.repository.get(transaction_id)
        return self._to_domain(model) if model else None

    async def find_owned_by(self, owner_id: str, transaction_id: int) -> PhoneTransaction:
        model = await self.repository.get(transaction_id)
        if model is None:
            raise TransactionNotFound(transaction_id)
        if model.owner_id != owner_id:
            raise TransactionForbidden(transaction_id)
        return self._to_domain(model)

    async def update(
        self,
        transaction_id: int,
        fields: dict[str, Any],
        *,
        only_non_terminal: bool = False,
    ) -> PhoneTransaction | None:
        """Partial merge of the mutable fields.

        With ``only_non_terminal`` the write is a compare-and-set that only applies while the
        stored status is not CANCELED or FINISHED; ``None`` is returned when that guard fails.
        """
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"immutable or unknown fields: {sorted(unknown)}")
        model = await self.repository.update_fields(
            transaction_id, fields, only_non_terminal=only_non_terminal
        )
        return self._to_domain(model) if model else None

    async def transition(self, transaction: PhoneTransaction, target: str) -> PhoneTransaction:
        """Move a non-terminal transaction to ``target`` exactly once."""
        updated = await self.update(
            transaction.id,
            {"status": target},
            only_non_terminal=True,
        )
        if updated is None:
            current = await self.get(transaction.id)
            raise InvalidTransition(transaction.id, current.status if current else None, target)
        return updated

    async def list_history(self, owner_id: str, limit: int = 10, offset: int = 0) -> PhoneTransactionPage:
        rows = await self.repository.list_owned(owner_id, limit, offset)
        total = await self.repository.count_owned(owner_id)
        return PhoneTransactionPage(
            items=[self._to_domain(row) for row in rows],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def list_active(self, owner_id: str, limit: int = 50) -> list[PhoneTransaction]:
        rows = await self.repository.list_owned(owner_id, limit, 0, statuses=ACTIVE_STATUSES)
        return [self._to_domain(row) for row in rows]

    @staticmethod
    def _to_domain(model: PhoneTransactionModel) -> PhoneTransaction:
        return PhoneTransaction(
            id=model.id,
            owner_id=model.owner_id,
            provider_transaction_id=model.provider_transaction_id,
            phone_number=model.phone_number,
            country=model.country,
            operator=model.operator,
            service=model.service,
            price=from_cents(model.price_cents),
            status=model.status,
            expires_at=as_utc(model.expires_at),
            sms_text=model.sms_text,
            sms_received_at=as_utc(model.sms_received_at),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )

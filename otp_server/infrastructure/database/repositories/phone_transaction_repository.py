"""SQLAlchemy implementation for the transaction store"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Sequence

from sqlalchemy import desc, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from otp_server.db.models import PhoneTransaction
from otp_server.modules.phone_transactions.exceptions import DuplicateProviderId
from otp_server.modules.phone_transactions.models import TERMINAL_STATUSES, NewPhoneTransaction
from otp_server.modules.wallets.models import to_cents


class SqlPhoneTransactionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, record: NewPhoneTransaction) -> PhoneTransaction:
        values = asdict(record)
        values["price_cents"] = to_cents(values.pop("price"))
        model = PhoneTransaction(**values)
        try:
            async with self.session.begin_nested():
                self.session.add(model)
        except IntegrityError as exc:
            raise DuplicateProviderId(record.provider_transaction_id) from exc
        await self.session.refresh(model)
        return model

    async def get(self, transaction_id: int) -> PhoneTransaction | None:
        stmt = (
            select(PhoneTransaction)
            .where(PhoneTransaction.id == transaction_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def update_fields(
        self,
        transaction_id: int,
        values: dict[str, Any],
        *,
        only_non_terminal: bool = False,
    ) -> PhoneTransaction | None:
        stmt = update(PhoneTransaction).where(PhoneTransaction.id == transaction_id)
        if only_non_terminal:
            stmt = stmt.where(PhoneTransaction.status.not_in(sorted(TERMINAL_STATUSES)))
        stmt = (
            stmt.values(**values)
            .returning(PhoneTransaction.id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.scalar_one_or_none() is None:
            return None
        return await self.get(transaction_id)

    async def list_owned(
        self,
        owner_id: str,
        limit: int,
        offset: int,
        statuses: Sequence[str] | None = None,
    ) -> Sequence[PhoneTransaction]:
        stmt = select(PhoneTransaction).where(PhoneTransaction.owner_id == owner_id)
        if statuses:
            stmt = stmt.where(PhoneTransaction.status.in_(list(statuses)))
        stmt = (
            stmt.order_by(desc(PhoneTransaction.created_at), desc(PhoneTransaction.id))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_owned(self, owner_id: str, statuses: Sequence[str] | None = None) -> int:
        stmt = select(func.count()).select_from(PhoneTransaction).where(PhoneTransaction.owner_id == owner_id)
        if statuses:
            stmt = stmt.where(PhoneTransaction.status.in_(list(statuses)))
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

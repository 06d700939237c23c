"""Accounts table access"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from otp_server.db.models import Account as AccountRow
from otp_server.modules.accounts.exceptions import AccountAlreadyExistsError
from otp_server.modules.accounts.models import ROLE_USER, Account


def _to_account(row: AccountRow) -> Account:
    return Account(
        id=row.id,
        username=row.username,
        role=row.role or ROLE_USER,
        is_active=bool(row.is_active),
        password_hash=row.password_hash,
        email=row.email,
        created_at=row.created_at,
        updated_at=row.updated_at,
        last_login_at=row.last_login_at,
    )


class SqlAccountRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _first(self, *criteria) -> Account | None:
        result = await self.session.execute(select(AccountRow).where(*criteria))
        row = result.scalars().first()
        return _to_account(row) if row is not None else None

    async def get_by_id(self, account_id: str) -> Account | None:
        return await self._first(AccountRow.id == account_id)

    async def get_by_username(self, username: str) -> Account | None:
        return await self._first(AccountRow.username == username)

    async def list_accounts(self, limit: int, offset: int) -> Sequence[Account]:
        stmt = select(AccountRow).order_by(AccountRow.created_at.desc(), AccountRow.username).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return [_to_account(row) for row in result.scalars()]

    async def add(self, *, username: str, password_hash: str, role: str, email: str | None, is_active: bool) -> Account:
        row = AccountRow(
            username=username,
            password_hash=password_hash,
            role=role,
            email=email,
            is_active=is_active,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(row)
        except IntegrityError as exc:
            raise AccountAlreadyExistsError(username) from exc
        await self.session.refresh(row)
        return _to_account(row)

    async def touch_login(self, account_id: str, at: datetime) -> None:
        await self.session.execute(
            update(AccountRow).where(AccountRow.id == account_id).values(last_login_at=at)
        )

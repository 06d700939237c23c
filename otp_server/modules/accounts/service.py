"""Registration, credential checks and lookups."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from otp_server.core.crypto import hash_password, verify_password

from .exceptions import AccountAlreadyExistsError, AccountNotFoundError
from .models import Account, AccountCreateInput
from .repository import AccountRepository

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, repository: AccountRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "AccountService":
        from otp_server.infrastructure.database.repositories.account_repository import SqlAccountRepository

        return cls(SqlAccountRepository(session))

    async def get_by_id(self, account_id: str) -> Account | None:
        return await self._repository.get_by_id(account_id)

    async def require(self, account_id: str) -> Account:
        account = await self._repository.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    async def get_by_username(self, username: str) -> Account | None:
        return await self._repository.get_by_username(username.strip())

    async def list_accounts(self, limit: int = 50, offset: int = 0) -> Sequence[Account]:
        return await self._repository.list_accounts(limit, offset)

    async def authenticate(self, username: str, password: str) -> Account | None:
        """None for unknown users, disabled accounts and wrong passwords alike."""
        account = await self._repository.get_by_username(username.strip())
        if account is None or not account.is_active:
            return None
        if not verify_password(password, account.password_hash):
            logger.info("Rejected login for %s", account.username)
            return None
        return account

    async def create_account(self, payload: AccountCreateInput) -> Account:
        if await self._repository.get_by_username(payload.username) is not None:
            raise AccountAlreadyExistsError(payload.username)

        account = await self._repository.add(
            username=payload.username,
            password_hash=hash_password(payload.password),
            role=payload.role,
            email=payload.email,
            is_active=payload.is_active,
        )
        logger.info("Registered %s account %s (%s)", account.role, account.username, account.id)
        return account

    async def set_last_login(self, account_id: str) -> None:
        await self._repository.touch_login(account_id, datetime.now(timezone.utc))

"""Storage contract for accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .models import Account


class AccountRepository(Protocol):
    async def get_by_id(self, account_id: str) -> Account | None: ...

    async def get_by_username(self, username: str) -> Account | None: ...

    async def list_accounts(self, limit: int, offset: int) -> Sequence[Account]: ...

    async def add(self, *, username: str, password_hash: str, role: str, email: str | None, is_active: bool) -> Account:
        """Raises ``AccountAlreadyExistsError`` when username or email is taken."""
        ...

    async def touch_login(self, account_id: str, at: datetime) -> None: ...

"""Account records as seen by the rest of the application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLE_SUPER_ADMIN = "super_admin"

ADMIN_ROLES = frozenset({ROLE_ADMIN, ROLE_SUPER_ADMIN})
ROLES = ADMIN_ROLES | {ROLE_USER}


@dataclass(slots=True)
class Account:
    """The acting user passed explicitly into every lifecycle operation."""

    id: str
    username: str
    role: str
    is_active: bool
    password_hash: str = field(repr=False)
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


@dataclass(slots=True)
class AccountCreateInput:
    username: str
    password: str = field(repr=False)
    role: str = ROLE_USER
    email: Optional[str] = None
    is_active: bool = True

    def __post_init__(self) -> None:
        self.username = self.username.strip()
        if self.role not in ROLES:
            raise ValueError(f"unknown role: {self.role}")
        if self.email is not None:
            self.email = self.email.strip().lower() or None

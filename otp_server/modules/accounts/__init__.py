"""Accounts: the users renting numbers, and the administrators funding them."""

from .exceptions import AccountAlreadyExistsError, AccountError, AccountNotFoundError
from .models import ADMIN_ROLES, ROLE_ADMIN, ROLE_SUPER_ADMIN, ROLE_USER, Account, AccountCreateInput
from .service import AccountService

__all__ = [
    "ADMIN_ROLES",
    "ROLE_ADMIN",
    "ROLE_SUPER_ADMIN",
    "ROLE_USER",
    "Account",
    "AccountAlreadyExistsError",
    "AccountCreateInput",
    "AccountError",
    "AccountNotFoundError",
    "AccountService",
]

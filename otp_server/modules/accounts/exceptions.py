"""Errors raised by account registration and lookup."""


class AccountError(Exception):
    """Base class for account errors."""


class AccountAlreadyExistsError(AccountError):
    """Username or email is already registered."""


class AccountNotFoundError(AccountError):
    def __init__(self, account_id: str) -> None:
        super().__init__(f"account {account_id} does not exist")
        self.account_id = account_id

"""SQLAlchemy-backed repository implementations."""

from .account_repository import SqlAccountRepository
from .phone_transaction_repository import SqlPhoneTransactionRepository
from .wallet_repository import SqlWalletRepository

__all__ = [
    "SqlAccountRepository",
    "SqlPhoneTransactionRepository",
    "SqlWalletRepository",
]

"""Transaction store exports"""

from .exceptions import (
    DuplicateProviderId,
    InvalidTransition,
    PhoneTransactionError,
    TransactionAccessError,
    TransactionForbidden,
    TransactionNotFound,
)
from .models import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    NewPhoneTransaction,
    PhoneTransaction,
    PhoneTransactionPage,
    TransactionStatus,
    is_terminal,
)
from .service import PhoneTransactionService

__all__ = [
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "DuplicateProviderId",
    "InvalidTransition",
    "NewPhoneTransaction",
    "PhoneTransaction",
    "PhoneTransactionError",
    "PhoneTransactionPage",
    "PhoneTransactionService",
    "TransactionAccessError",
    "TransactionForbidden",
    "TransactionNotFound",
    "TransactionStatus",
    "is_terminal",
]

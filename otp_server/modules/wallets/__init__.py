"""Wallet (ledger) exports"""

from .exceptions import InsufficientFunds, WalletError
from .models import WalletEntry, WalletSnapshot, to_money
from .service import WalletService

__all__ = [
    "InsufficientFunds",
    "WalletError",
    "WalletEntry",
    "WalletSnapshot",
    "WalletService",
    "to_money",
]

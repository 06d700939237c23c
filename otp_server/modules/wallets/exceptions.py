"""Ledger errors."""

from __future__ import annotations

from decimal import Decimal


class WalletError(Exception):
    """Base class for wallet errors."""


class InsufficientFunds(WalletError):
    """Raised when a debit would take the balance below zero. Nothing is mutated."""

    def __init__(self, account_id: str, amount: Decimal, balance: Decimal) -> None:
        super().__init__(f"balance {balance} is lower than {amount} for account {account_id}")
        self.account_id = account_id
        self.amount = amount
        self.balance = balance

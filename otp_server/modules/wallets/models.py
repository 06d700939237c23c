"""Domain models for wallet operations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

CENT = Decimal("0.01")

ENTRY_PURCHASE = "purchase"
ENTRY_REFUND = "refund"
ENTRY_TOPUP = "topup"


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Normalise an amount to two decimal places."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Union[Decimal, int, float, str]) -> int:
    """Convert an amount to the integer cents stored in the database."""
    return int(to_money(value) / CENT)


def from_cents(cents: int) -> Decimal:
    return to_money(Decimal(cents or 0) * CENT)


@dataclass(slots=True)
class WalletSnapshot:
    account_id: str
    balance: Decimal
    currency: str
    updated_at: Optional[datetime]


@dataclass(slots=True)
class WalletEntry:
    id: str
    account_id: str
    phone_transaction_id: Optional[int]
    amount: Decimal
    currency: str
    type: str
    description: Optional[str]
    created_at: datetime

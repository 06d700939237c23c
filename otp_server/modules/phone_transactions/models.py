"""Domain models for rented phone numbers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionStatus(str, Enum):
    """Statuses the lifecycle knows about.

    Stored values are plain strings; anything else the provider reports is kept verbatim.
    """

    PENDING = "PENDING"
    RECEIVED = "RECEIVED"
    CANCELED = "CANCELED"
    FINISHED = "FINISHED"


TERMINAL_STATUSES = frozenset({TransactionStatus.CANCELED.value, TransactionStatus.FINISHED.value})
ACTIVE_STATUSES = (TransactionStatus.PENDING.value, TransactionStatus.RECEIVED.value)


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


@dataclass(slots=True)
class NewPhoneTransaction:
    owner_id: str
    provider_transaction_id: str
    phone_number: str
    country: str
    operator: str
    service: str
    price: Decimal
    status: str
    expires_at: datetime


@dataclass(slots=True)
class PhoneTransaction:
    id: int
    owner_id: str
    provider_transaction_id: str
    phone_number: str
    country: str
    operator: str
    service: str
    price: Decimal
    status: str
    expires_at: datetime
    sms_text: Optional[str] = None
    sms_received_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    @property
    def has_sms(self) -> bool:
        return bool(self.sms_text)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now > as_utc(self.expires_at)

    def seconds_left(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.now(timezone.utc)
        return max(0, int((as_utc(self.expires_at) - now).total_seconds()))


@dataclass(slots=True)
class PhoneTransactionPage:
    items: list[PhoneTransaction]
    total: int
    limit: int
    offset: int

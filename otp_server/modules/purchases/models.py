"""Outcome types returned by the purchase lifecycle."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from otp_server.modules.phone_transactions.models import PhoneTransaction

PURCHASE_FAILED = "Failed to purchase number. Please check your balance or try again."
CHECK_FAILED = "Could not refresh the transaction status."
CANCEL_FAILED = "Failed to cancel the transaction."
FINISH_FAILED = "Failed to finish the transaction."
NOT_AVAILABLE = "Transaction not available."


class FailureKind(str, Enum):
    INSUFFICIENT_FUNDS = "insufficient_funds"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    PROVIDER_DATA_INVALID = "provider_data_invalid"
    PROVIDER_REFUSED = "provider_refused"
    INVALID_TRANSITION = "invalid_transition"
    DUPLICATE_PROVIDER_ID = "duplicate_provider_id"
    NOT_AVAILABLE = "not_available"


@dataclass(slots=True)
class LifecycleResult:
    ok: bool
    transaction: Optional[PhoneTransaction] = None
    error: Optional[FailureKind] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, transaction: PhoneTransaction) -> "LifecycleResult":
        return cls(ok=True, transaction=transaction)

    @classmethod
    def failure(
        cls,
        error: FailureKind,
        message: str,
        transaction: Optional[PhoneTransaction] = None,
    ) -> "LifecycleResult":
        return cls(ok=False, transaction=transaction, error=error, message=message)

    @property
    def has_sms(self) -> bool:
        return self.transaction is not None and self.transaction.has_sms

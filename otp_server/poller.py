"""Client-side SMS poller.

Calls the check-sms operation at a fixed interval until an SMS shows up, the
transaction is closed, or the rental expires. Nothing is scheduled on the server;
the caller owns the loop.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

import httpx

from otp_server.modules.phone_transactions.models import as_utc
from otp_server.schemas import CheckSmsResponse, PhoneTransactionResponse

logger = logging.getLogger(__name__)

Fetch = Callable[[], Awaitable[dict[str, Any]]]
Sleep = Callable[[float], Awaitable[Any]]
Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PollOutcome(str, Enum):
    RECEIVED = "received"
    EXPIRED = "expired"
    CLOSED = "closed"


@dataclass(slots=True)
class PollResult:
    outcome: PollOutcome
    transaction: Optional[PhoneTransactionResponse]
    attempts: int

    @property
    def sms_text(self) -> Optional[str]:
        return self.transaction.sms_text if self.transaction else None


class SmsPoller:
    def __init__(
        self,
        fetch: Fetch,
        interval: float = 5.0,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = _utcnow,
        expires_at: Optional[datetime] = None,
        max_attempts: Optional[int] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._fetch = fetch
        self._interval = interval
        self._sleep = sleep
        self._clock = clock
        self._expires_at = as_utc(expires_at)
        self._max_attempts = max_attempts

    async def run(self) -> PollResult:
        attempts = 0
        last: Optional[PhoneTransactionResponse] = None
        while True:
            attempts += 1
            try:
                payload = CheckSmsResponse.model_validate(await self._fetch())
            except httpx.HTTPError as exc:
                logger.warning("SMS check attempt %s failed: %s", attempts, exc)
            else:
                last = payload.transaction
                self._expires_at = as_utc(last.expires_at)
                if payload.has_sms:
                    return PollResult(PollOutcome.RECEIVED, last, attempts)
                if last.is_terminal:
                    return PollResult(PollOutcome.CLOSED, last, attempts)
                if not payload.refreshed:
                    logger.info("Provider refresh failed on attempt %s: %s", attempts, payload.message)

            if self._expires_at is not None and self._clock() > self._expires_at:
                return PollResult(PollOutcome.EXPIRED, last, attempts)
            if self._max_attempts is not None and attempts >= self._max_attempts:
                raise TimeoutError(f"no answer after {attempts} attempts")
            await self._sleep(self._interval)

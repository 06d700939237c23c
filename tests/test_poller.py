from datetime import datetime, timedelta, timezone

import httpx
import pytest

from otp_server.poller import PollOutcome, SmsPoller

START = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _payload(status="PENDING", sms_text=None, expires_at=START + timedelta(minutes=20), refreshed=True):
    return {
        "transaction": {
            "id": 7,
            "provider_transaction_id": "1000",
            "phone_number": "+79001234567",
            "country": "russia",
            "operator": "mts",
            "service": "telegram",
            "price": "6.50",
            "status": status,
            "expires_at": expires_at.isoformat(),
            "sms_text": sms_text,
            "is_terminal": status in {"CANCELED", "FINISHED"},
            "expired": False,
            "seconds_left": 1200,
        },
        "has_sms": sms_text is not None,
        "refreshed": refreshed,
        "message": None if refreshed else "Could not refresh the transaction status.",
    }


class Script:
    """Replays payloads and advances a fake clock on every sleep."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.now = START
        self.sleeps = []

    async def fetch(self):
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += timedelta(seconds=seconds)

    def clock(self):
        return self.now

    def poller(self, **kwargs) -> SmsPoller:
        return SmsPoller(self.fetch, interval=5, sleep=self.sleep, clock=self.clock, **kwargs)


async def test_stops_when_sms_arrives():
    script = Script(_payload(), _payload(), _payload(status="RECEIVED", sms_text="Code 12345"))

    result = await script.poller().run()

    assert result.outcome is PollOutcome.RECEIVED
    assert result.sms_text == "Code 12345"
    assert result.attempts == 3
    assert script.sleeps == [5, 5]


async def test_stops_when_transaction_is_closed():
    script = Script(_payload(), _payload(status="CANCELED"))

    result = await script.poller().run()

    assert result.outcome is PollOutcome.CLOSED
    assert result.transaction.status == "CANCELED"
    assert script.sleeps == [5]


async def test_stops_after_expiry():
    expires = START + timedelta(seconds=12)
    script = Script(*[_payload(expires_at=expires) for _ in range(5)])

    result = await script.poller().run()

    assert result.outcome is PollOutcome.EXPIRED
    assert result.attempts == 4
    assert script.sleeps == [5, 5, 5]


async def test_keeps_polling_through_failed_refreshes():
    script = Script(
        _payload(refreshed=False),
        httpx.ConnectError("connection refused"),
        _payload(status="RECEIVED", sms_text="Code 12345"),
    )

    result = await script.poller().run()

    assert result.outcome is PollOutcome.RECEIVED
    assert result.attempts == 3


async def test_naive_expiry_is_read_as_utc():
    expires = (START + timedelta(seconds=3)).replace(tzinfo=None)
    script = Script(_payload(expires_at=expires), _payload(expires_at=expires))

    result = await script.poller().run()

    assert result.outcome is PollOutcome.EXPIRED
    assert result.attempts == 2


async def test_gives_up_when_nothing_ever_answers():
    script = Script(*[httpx.ConnectError("down") for _ in range(3)])

    with pytest.raises(TimeoutError):
        await script.poller(max_attempts=3).run()


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        SmsPoller(lambda: None, interval=0)

from __future__ import annotations

import asyncio
import pathlib
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from otp_server.infrastructure.database.session import enable_sqlite_savepoints, init_db
from otp_server.infrastructure.provider import FiveSimClient
from otp_server.modules.accounts import AccountCreateInput, AccountService
from otp_server.modules.purchases import PurchaseService
from otp_server.modules.wallets import WalletService

PROVIDER_URL = "https://5sim.test/v1"
PROVIDER_KEY = "test-key"


def _iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class FakeFiveSim:
    """In-memory stand-in for the 5sim API, served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.orders: dict[int, dict[str, Any]] = {}
        self.next_id = 1000
        self.price: Any = 6.5
        self.phone = "+79001234567"
        self.countries: dict[str, Any] = {
            "russia": {"iso": {"7": 1}, "text_en": "Russia"},
            "england": {"text_en": "England"},
        }
        self.cancel_status = "CANCELED"
        self.finish_status = "FINISHED"
        self.fail: dict[str, httpx.Response] = {}
        # path prefix -> seconds to wait before answering
        self.delays: dict[str, float] = {}
        self.calls: list[str] = []
        self.auth_headers: list[Optional[str]] = []

    def add_sms(
        self,
        order_id: int,
        text: str,
        code: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> None:
        order = self.orders[order_id]
        received = created_at or datetime.now(timezone.utc)
        if order["sms"] is None:
            order["sms"] = []
        order["sms"].append(
            {
                "created_at": _iso(received),
                "date": _iso(received),
                "sender": "Telegram",
                "text": text,
                "code": code,
            }
        )
        order["status"] = "RECEIVED"

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/v1")
        self.calls.append(path)
        for prefix, seconds in self.delays.items():
            if path.startswith(prefix):
                await asyncio.sleep(seconds)
        parts = path.strip("/").split("/")
        if parts[0] == "user":
            self.auth_headers.append(request.headers.get("Authorization"))
            if request.headers.get("Authorization") != f"Bearer {PROVIDER_KEY}":
                return httpx.Response(401, text="Unauthorized")

        for prefix, response in self.fail.items():
            if path.startswith(prefix):
                return response

        if parts[:2] == ["guest", "countries"]:
            return httpx.Response(200, json=self.countries)
        if parts[:2] == ["guest", "products"]:
            return httpx.Response(
                200,
                json={
                    "telegram": {"Category": "activation", "Qty": 120, "Price": 6.5},
                    "whatsapp": {"Category": "activation", "Qty": 0, "Price": 12},
                },
            )
        if parts[:2] == ["guest", "prices"]:
            country = request.url.params["country"]
            product = request.url.params["product"]
            return httpx.Response(
                200,
                json={country: {product: {"mts": {"cost": 6.5, "count": 10, "rate": 97.5}}}},
            )
        if parts[:3] == ["user", "buy", "activation"]:
            country, operator, product = parts[3:6]
            return httpx.Response(200, json=self._buy(country, operator, product))
        if parts[:2] in (["user", "check"], ["user", "cancel"], ["user", "finish"]):
            order = self.orders.get(int(parts[2]))
            if order is None:
                return httpx.Response(404, text="order not found")
            if parts[1] == "cancel":
                order["status"] = self.cancel_status
            elif parts[1] == "finish":
                order["status"] = self.finish_status
            return httpx.Response(200, json=order)
        return httpx.Response(404, text="not found")

    def _buy(self, country: str, operator: str, product: str) -> dict[str, Any]:
        order_id = self.next_id
        self.next_id += 1
        now = datetime.now(timezone.utc)
        order = {
            "id": order_id,
            "phone": self.phone,
            "operator": operator if operator != "any" else "mts",
            "product": product,
            "price": self.price,
            "status": "PENDING",
            "expires": _iso(now + timedelta(minutes=20)),
            "sms": None,
            "created_at": _iso(now),
            "forwarding": False,
            "forwarding_number": "",
            "country": country,
        }
        self.orders[order_id] = order
        return order


@pytest.fixture
def fake_provider() -> FakeFiveSim:
    return FakeFiveSim()


@pytest.fixture
async def provider(fake_provider: FakeFiveSim):
    client = FiveSimClient(PROVIDER_URL, PROVIDER_KEY, transport=httpx.MockTransport(fake_provider.handler))
    yield client
    await client.aclose()


@pytest.fixture
async def engine(tmp_path: pathlib.Path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'otp.db'}",
        connect_args={"timeout": 30},
    )
    enable_sqlite_savepoints(engine)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


async def create_account(session, username: str, role: str = "user", balance: Decimal | None = None):
    account = await AccountService.with_session(session).create_account(
        AccountCreateInput(username=username, password="secret123", role=role)
    )
    if balance:
        await WalletService.with_session(session).topup(account.id, balance, "seed")
    await session.commit()
    return account


@pytest.fixture
async def alice(session):
    return await create_account(session, "alice", balance=Decimal("10.00"))


@pytest.fixture
async def bob(session):
    return await create_account(session, "bob", balance=Decimal("10.00"))


@pytest.fixture
def wallets(session) -> WalletService:
    return WalletService.with_session(session)


@pytest.fixture
def purchases(session, provider) -> PurchaseService:
    return PurchaseService.with_session(session, provider)


@pytest.fixture
def make_account(session):
    async def _make(username: str, role: str = "user", balance: Decimal | None = None):
        return await create_account(session, username, role=role, balance=balance)

    return _make

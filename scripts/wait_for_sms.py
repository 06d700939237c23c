#!/usr/bin/env python3
"""
Log in to the OTP server, optionally rent a number, and wait for its SMS.

Examples:
    python scripts/wait_for_sms.py --username demo --password demo123 \
        --buy russia any telegram

    python scripts/wait_for_sms.py --username demo --password demo123 --transaction 42
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

import httpx

from otp_server.poller import PollOutcome, SmsPoller


async def login(client: httpx.AsyncClient, username: str, password: str) -> str:
    print(f"[api] login {client.base_url}")
    resp = await client.post("/api/auth/login", json={"username": username, "password": password})
    if resp.status_code != 200:
        raise SystemExit(f"login failed: {resp.status_code} {resp.text}")
    token = resp.json().get("access_token")
    if not token:
        raise SystemExit("login response missing access_token")
    return token


async def buy(client: httpx.AsyncClient, country: str, operator: str, product: str) -> dict[str, Any]:
    print(f"[api] buying {product} in {country} ({operator})")
    resp = await client.post(
        "/api/otp/purchase",
        json={"country": country, "operator": operator, "product": product},
    )
    if resp.status_code != 201:
        raise SystemExit(f"purchase failed: {resp.status_code} {resp.text}")
    return resp.json()


async def wait(args: argparse.Namespace) -> int:
    async with httpx.AsyncClient(base_url=args.server, timeout=30) as client:
        token = await login(client, args.username, args.password)
        client.headers["Authorization"] = f"Bearer {token}"

        if args.buy:
            transaction = await buy(client, *args.buy)
            transaction_id = transaction["id"]
            print(f"[api] rented {transaction['phone_number']} (transaction {transaction_id})")
        else:
            transaction_id = args.transaction

        async def fetch() -> dict[str, Any]:
            resp = await client.post(f"/api/otp/check-sms/{transaction_id}")
            resp.raise_for_status()
            return resp.json()

        poller = SmsPoller(fetch, interval=args.interval)
        result = await poller.run()

        if result.outcome is PollOutcome.RECEIVED:
            print(f"[done] sms: {result.sms_text}")
        else:
            print(f"[done] no sms ({result.outcome.value}) after {result.attempts} checks")
        if result.transaction is not None:
            print(json.dumps(result.transaction.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0 if result.outcome is PollOutcome.RECEIVED else 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Wait for the SMS of a rented number")
    parser.add_argument("--server", default="http://127.0.0.1:8000", help="OTP server base URL")
    parser.add_argument("--username", default="demo", help="Login username")
    parser.add_argument("--password", default="demo123", help="Login password")
    parser.add_argument("--interval", type=float, default=5.0, help="Seconds between checks")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--transaction", type=int, help="Existing transaction id")
    target.add_argument(
        "--buy",
        nargs=3,
        metavar=("COUNTRY", "OPERATOR", "PRODUCT"),
        help="Rent a new number first",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(wait(args)))


if __name__ == "__main__":
    main()

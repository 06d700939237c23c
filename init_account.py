"""
Create the demo customer account with a starting balance.
"""
import asyncio
from decimal import Decimal

from otp_server.core.config import get_settings
from otp_server.core.logging import configure_logging
from otp_server.infrastructure.database.session import get_session, init_db
from otp_server.modules.accounts import AccountCreateInput, AccountService
from otp_server.modules.wallets import WalletService

DEMO_USERNAME = "demo"
DEMO_PASSWORD = "demo123"
DEMO_BALANCE = Decimal("100.00")


async def create_default_account():
    """Create the demo account and top up its wallet."""
    configure_logging(get_settings())
    await init_db()

    async for db in get_session():
        service = AccountService.with_session(db)

        existing = await service.get_by_username(DEMO_USERNAME)
        if existing:
            print("Demo account already exists")
            return

        account = await service.create_account(
            AccountCreateInput(
                username=DEMO_USERNAME,
                password=DEMO_PASSWORD,
                role="user",
                email=None,
                is_active=True,
            )
        )
        snapshot = await WalletService.with_session(db).topup(account.id, DEMO_BALANCE, "Demo starting balance")
        await db.commit()

        print(f"Demo account created: {DEMO_USERNAME} / {DEMO_PASSWORD} ({snapshot.balance} {snapshot.currency})")


if __name__ == "__main__":
    asyncio.run(create_default_account())

"""
Create the default administrator account used for the first login.
"""
import asyncio

from sqlalchemy import select

from otp_server.core.config import get_settings
from otp_server.core.logging import configure_logging
from otp_server.db.models import Account
from otp_server.infrastructure.database.session import get_session, init_db
from otp_server.modules.accounts import AccountCreateInput, AccountService


async def create_default_admin():
    """Create the admin account unless one already exists."""
    configure_logging(get_settings())
    await init_db()

    async for db in get_session():
        stmt = select(Account).where(Account.role.in_(["admin", "super_admin"]))
        result = await db.execute(stmt)
        existing_admin = result.scalars().first()

        if existing_admin:
            print("Administrator account already exists, nothing to do")
            return

        service = AccountService.with_session(db)

        await service.create_account(
            AccountCreateInput(
                username="admin",
                password="admin123",
                role="super_admin",
                email="admin@example.com",
                is_active=True,
            )
        )
        await db.commit()

        print("=" * 50)
        print("Default administrator created")
        print("=" * 50)
        print("username: admin")
        print("password: admin123")
        print("=" * 50)
        print("Change the password after the first login!")
        print("=" * 50)


if __name__ == "__main__":
    asyncio.run(create_default_admin())

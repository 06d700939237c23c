from decimal import Decimal

import pytest

from otp_server.modules.wallets import InsufficientFunds, WalletService


async def test_new_wallet_starts_at_initial_balance(make_account, wallets):
    account = await make_account("carol")

    snapshot = await wallets.ensure_wallet(account.id)

    assert snapshot.balance == Decimal("0.00")
    assert snapshot.currency == "RUB"


async def test_get_snapshot_does_not_create_wallet(make_account, wallets):
    account = await make_account("carol")

    snapshot = await wallets.get_snapshot(account.id)

    assert snapshot.balance == Decimal("0.00")
    assert await wallets.repository.get_wallet(account.id) is None


async def test_debit_credit_and_journal(alice, wallets):
    await wallets.debit(alice.id, Decimal("6.50"), description="telegram +7900")
    assert await wallets.get_balance(alice.id) == Decimal("3.50")

    await wallets.credit(alice.id, Decimal("6.50"), description="refund")
    assert await wallets.get_balance(alice.id) == Decimal("10.00")

    entries = await wallets.list_entries(alice.id)
    assert sorted((entry.type, entry.amount) for entry in entries) == [
        ("purchase", Decimal("-6.50")),
        ("refund", Decimal("6.50")),
        ("topup", Decimal("10.00")),
    ]


async def test_debit_of_exact_remaining_balance_succeeds(alice, wallets):
    await wallets.debit(alice.id, Decimal("9.30"))
    assert await wallets.get_balance(alice.id) == Decimal("0.70")

    snapshot = await wallets.debit(alice.id, Decimal("0.70"))

    assert snapshot.balance == Decimal("0.00")
    stored = await wallets.repository.get_wallet(alice.id)
    assert stored.balance_cents == 0


async def test_debit_rejects_overdraft_and_leaves_balance(alice, wallets):
    with pytest.raises(InsufficientFunds) as excinfo:
        await wallets.debit(alice.id, Decimal("10.01"))

    assert excinfo.value.balance == Decimal("10.00")
    assert excinfo.value.amount == Decimal("10.01")
    assert await wallets.get_balance(alice.id) == Decimal("10.00")
    assert [entry.type for entry in await wallets.list_entries(alice.id)] == ["topup"]


async def test_debit_of_whole_balance_is_allowed(alice, wallets):
    snapshot = await wallets.debit(alice.id, Decimal("10.00"))
    assert snapshot.balance == Decimal("0.00")


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1.00")])
async def test_non_positive_amounts_are_rejected(alice, wallets, amount):
    with pytest.raises(ValueError):
        await wallets.debit(alice.id, amount)
    with pytest.raises(ValueError):
        await wallets.credit(alice.id, amount)


async def test_amounts_are_rounded_to_cents(alice, wallets):
    await wallets.debit(alice.id, 0.1)
    await wallets.debit(alice.id, 0.2)
    assert await wallets.get_balance(alice.id) == Decimal("9.70")


async def test_debit_checks_stored_balance_not_a_stale_read(alice, session_factory):
    async with session_factory() as first:
        stale = WalletService.with_session(first)
        assert await stale.get_balance(alice.id) == Decimal("10.00")
        await first.commit()

        async with session_factory() as second:
            await WalletService.with_session(second).debit(alice.id, Decimal("6.00"))
            await second.commit()

        with pytest.raises(InsufficientFunds) as excinfo:
            await stale.debit(alice.id, Decimal("6.00"))
        assert excinfo.value.balance == Decimal("4.00")

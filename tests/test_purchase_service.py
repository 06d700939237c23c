from decimal import Decimal

import httpx

from otp_server.modules.phone_transactions import PhoneTransactionService
from otp_server.modules.purchases import FailureKind

PURCHASE_FAILED = "Failed to purchase number. Please check your balance or try again."


async def _buy(purchases, account):
    result = await purchases.purchase(account, "russia", "any", "telegram")
    assert result.ok, result.message
    return result.transaction


async def test_purchase_debits_price_and_stores_pending(alice, purchases, wallets, fake_provider):
    result = await purchases.purchase(alice, "russia", "any", "telegram")

    assert result.ok
    transaction = result.transaction
    assert transaction.status == "PENDING"
    assert transaction.owner_id == alice.id
    assert transaction.provider_transaction_id == "1000"
    assert transaction.phone_number == fake_provider.phone
    assert transaction.price == Decimal("6.50")
    assert await wallets.get_balance(alice.id) == Decimal("3.50")

    entries = await wallets.list_entries(alice.id)
    purchase_entry = next(entry for entry in entries if entry.type == "purchase")
    assert purchase_entry.amount == Decimal("-6.50")
    assert purchase_entry.phone_transaction_id == transaction.id


async def test_insufficient_funds_releases_the_number(make_account, purchases, wallets, fake_provider, session):
    poor = await make_account("poor", balance=Decimal("5.00"))

    result = await purchases.purchase(poor, "russia", "any", "telegram")

    assert not result.ok
    assert result.error is FailureKind.INSUFFICIENT_FUNDS
    assert result.message == PURCHASE_FAILED
    assert result.transaction is None
    assert await wallets.get_balance(poor.id) == Decimal("5.00")
    assert (await PhoneTransactionService.with_session(session).list_history(poor.id)).total == 0
    assert "/user/cancel/1000" in fake_provider.calls
    assert fake_provider.orders[1000]["status"] == "CANCELED"


async def test_free_number_needs_no_balance(make_account, purchases, wallets, fake_provider):
    broke = await make_account("broke")
    fake_provider.price = 0

    result = await purchases.purchase(broke, "russia", "any", "telegram")

    assert result.ok
    assert result.transaction.price == Decimal("0.00")
    assert await wallets.get_balance(broke.id) == Decimal("0.00")


async def test_last_cents_of_balance_can_be_spent(alice, purchases, wallets, fake_provider):
    fake_provider.price = 9.3
    first = await purchases.purchase(alice, "russia", "any", "telegram")
    fake_provider.price = 0.7
    second = await purchases.purchase(alice, "russia", "any", "telegram")

    assert first.ok and second.ok, second.message
    assert second.transaction.price == Decimal("0.70")
    assert await wallets.get_balance(alice.id) == Decimal("0.00")


async def test_provider_outage_on_purchase_touches_nothing(alice, purchases, wallets, fake_provider, session):
    fake_provider.fail["/user/buy"] = httpx.Response(502, text="bad gateway")

    result = await purchases.purchase(alice, "russia", "any", "telegram")

    assert result.error is FailureKind.PROVIDER_UNAVAILABLE
    assert result.message == PURCHASE_FAILED
    assert await wallets.get_balance(alice.id) == Decimal("10.00")
    assert (await PhoneTransactionService.with_session(session).list_history(alice.id)).total == 0


async def test_provider_refusal_text_is_data_invalid(alice, purchases, fake_provider):
    fake_provider.fail["/user/buy"] = httpx.Response(200, text="no free phones")

    result = await purchases.purchase(alice, "russia", "any", "telegram")

    assert result.error is FailureKind.PROVIDER_DATA_INVALID


async def test_duplicate_provider_order_is_rejected(alice, bob, purchases, wallets, fake_provider):
    await _buy(purchases, alice)
    fake_provider.next_id = 1000

    result = await purchases.purchase(bob, "russia", "any", "telegram")

    assert result.error is FailureKind.DUPLICATE_PROVIDER_ID
    assert await wallets.get_balance(bob.id) == Decimal("10.00")
    assert fake_provider.calls[-1] == "/user/cancel/1000"


async def test_check_picks_up_sms(alice, purchases, fake_provider):
    transaction = await _buy(purchases, alice)
    fake_provider.add_sms(1000, "Your code: 12345")

    result = await purchases.check_sms(alice, transaction.id)

    assert result.ok
    assert result.has_sms
    assert result.transaction.status == "RECEIVED"
    assert result.transaction.sms_text == "Your code: 12345"
    assert result.transaction.sms_received_at is not None


async def test_check_is_idempotent(alice, purchases, fake_provider):
    transaction = await _buy(purchases, alice)
    fake_provider.add_sms(1000, "Your code: 12345")

    first = await purchases.verify(alice, transaction.id)
    second = await purchases.verify(alice, transaction.id)

    assert first.transaction.status == second.transaction.status == "RECEIVED"
    assert first.transaction.sms_text == second.transaction.sms_text


async def test_latest_sms_wins(alice, purchases, fake_provider):
    transaction = await _buy(purchases, alice)
    fake_provider.add_sms(1000, "Your code: 11111")
    await purchases.check_sms(alice, transaction.id)
    fake_provider.add_sms(1000, "Your code: 22222")

    result = await purchases.check_sms(alice, transaction.id)

    assert result.transaction.sms_text == "Your code: 22222"


async def test_check_without_sms_keeps_pending(alice, purchases):
    transaction = await _buy(purchases, alice)

    result = await purchases.check_sms(alice, transaction.id)

    assert result.ok
    assert not result.has_sms
    assert result.transaction.status == "PENDING"


async def test_check_copies_unknown_provider_status(alice, purchases, fake_provider):
    transaction = await _buy(purchases, alice)
    fake_provider.orders[1000]["status"] = "TIMEOUT"

    result = await purchases.check_sms(alice, transaction.id)

    assert result.transaction.status == "TIMEOUT"
    assert not result.transaction.is_terminal


async def test_check_never_sets_terminal_status(alice, purchases, wallets, fake_provider):
    transaction = await _buy(purchases, alice)
    fake_provider.orders[1000]["status"] = "CANCELED"

    result = await purchases.check_sms(alice, transaction.id)

    assert result.transaction.status == "PENDING"
    assert await wallets.get_balance(alice.id) == Decimal("3.50")


async def test_check_failure_returns_stored_snapshot(alice, purchases, fake_provider):
    transaction = await _buy(purchases, alice)
    fake_provider.fail["/user/check"] = httpx.Response(500, text="oops")

    result = await purchases.check_sms(alice, transaction.id)

    assert not result.ok
    assert result.error is FailureKind.PROVIDER_UNAVAILABLE
    assert result.transaction.id == transaction.id
    assert result.transaction.status == "PENDING"


async def test_check_of_closed_transaction_skips_provider(alice, purchases, fake_provider):
    transaction = await _buy(purchases, alice)
    await purchases.finish(alice, transaction.id)
    calls = len(fake_provider.calls)

    result = await purchases.check_sms(alice, transaction.id)

    assert result.ok
    assert result.transaction.status == "FINISHED"
    assert len(fake_provider.calls) == calls


async def test_cancel_refunds_once(alice, purchases, wallets):
    transaction = await _buy(purchases, alice)

    result = await purchases.cancel(alice, transaction.id)

    assert result.ok
    assert result.transaction.status == "CANCELED"
    assert await wallets.get_balance(alice.id) == Decimal("10.00")

    again = await purchases.cancel(alice, transaction.id)

    assert again.error is FailureKind.INVALID_TRANSITION
    assert again.message == "Failed to cancel the transaction."
    assert await wallets.get_balance(alice.id) == Decimal("10.00")
    refunds = [entry for entry in await wallets.list_entries(alice.id) if entry.type == "refund"]
    assert len(refunds) == 1
    assert refunds[0].phone_transaction_id == transaction.id


async def test_cancel_after_sms_is_allowed_when_provider_confirms(alice, purchases, wallets, fake_provider):
    transaction = await _buy(purchases, alice)
    fake_provider.add_sms(1000, "Your code: 12345")
    await purchases.check_sms(alice, transaction.id)

    result = await purchases.cancel(alice, transaction.id)

    assert result.ok
    assert result.transaction.status == "CANCELED"
    assert await wallets.get_balance(alice.id) == Decimal("10.00")


async def test_cancel_refused_by_provider_changes_nothing(alice, purchases, wallets, fake_provider):
    transaction = await _buy(purchases, alice)
    fake_provider.cancel_status = "RECEIVED"

    result = await purchases.cancel(alice, transaction.id)

    assert result.error is FailureKind.PROVIDER_REFUSED
    assert result.transaction.status == "PENDING"
    assert await wallets.get_balance(alice.id) == Decimal("3.50")


async def test_cancel_provider_outage_changes_nothing(alice, purchases, wallets, fake_provider):
    transaction = await _buy(purchases, alice)
    fake_provider.fail["/user/cancel"] = httpx.Response(503, text="down")

    result = await purchases.cancel(alice, transaction.id)

    assert result.error is FailureKind.PROVIDER_UNAVAILABLE
    assert await wallets.get_balance(alice.id) == Decimal("3.50")


async def test_finish_closes_without_refund(alice, purchases, wallets, fake_provider):
    transaction = await _buy(purchases, alice)
    fake_provider.add_sms(1000, "Your code: 12345")
    await purchases.check_sms(alice, transaction.id)

    result = await purchases.finish(alice, transaction.id)

    assert result.ok
    assert result.transaction.status == "FINISHED"
    assert await wallets.get_balance(alice.id) == Decimal("3.50")

    cancel = await purchases.cancel(alice, transaction.id)
    assert cancel.error is FailureKind.INVALID_TRANSITION
    assert await wallets.get_balance(alice.id) == Decimal("3.50")


async def test_finish_refused_by_provider(alice, purchases, fake_provider):
    transaction = await _buy(purchases, alice)
    fake_provider.finish_status = "PENDING"

    result = await purchases.finish(alice, transaction.id)

    assert result.error is FailureKind.PROVIDER_REFUSED
    assert result.message == "Failed to finish the transaction."


async def test_foreign_and_unknown_transactions_look_the_same(alice, bob, purchases, fake_provider):
    transaction = await _buy(purchases, alice)
    calls = len(fake_provider.calls)

    results = [
        await purchases.verify(bob, transaction.id),
        await purchases.cancel(bob, transaction.id),
        await purchases.finish(bob, transaction.id),
        await purchases.verify(bob, transaction.id + 100),
    ]

    for result in results:
        assert result.error is FailureKind.NOT_AVAILABLE
        assert result.message == "Transaction not available."
        assert result.transaction is None
    assert len(fake_provider.calls) == calls


async def test_history_and_active(alice, purchases):
    first = await _buy(purchases, alice)
    second = await _buy(purchases, alice)
    await purchases.cancel(alice, first.id)

    page = await purchases.history(alice)
    active = await purchases.active(alice)

    assert [item.id for item in page.items] == [second.id, first.id]
    assert page.total == 2
    assert [item.id for item in active] == [second.id]


async def test_scenarios_chain(make_account, purchases, wallets, fake_provider):
    account = await make_account("dave", balance=Decimal("10.00"))

    bought = await purchases.purchase(account, "russia", "any", "telegram")
    assert await wallets.get_balance(account.id) == Decimal("3.50")

    denied = await purchases.purchase(account, "russia", "any", "telegram")
    assert denied.error is FailureKind.INSUFFICIENT_FUNDS
    assert await wallets.get_balance(account.id) == Decimal("3.50")

    fake_provider.add_sms(int(bought.transaction.provider_transaction_id), "Your code: 12345")
    checked = await purchases.check_sms(account, bought.transaction.id)
    assert checked.transaction.sms_text == "Your code: 12345"

    canceled = await purchases.cancel(account, bought.transaction.id)
    assert canceled.ok
    assert await wallets.get_balance(account.id) == Decimal("10.00")

"""Purchase lifecycle: buy, poll, cancel with refund, finish.

Every operation takes the acting account explicitly, makes one provider call
(plus a compensating cancel when a purchase cannot be paid for) and reports the
outcome as a ``LifecycleResult`` instead of letting provider or ledger errors
escape. Balance changes and the matching transaction writes share one savepoint.
The session is committed before every provider call, so no database lock is
held while waiting on the network; the write that follows starts a fresh
transaction whose first statement is the guarded write.

State machine::

    PENDING -> RECEIVED -> FINISHED
    PENDING -> CANCELED
    (RECEIVED -> CANCELED and PENDING -> FINISHED when the provider confirms)

CANCELED and FINISHED are terminal and only reachable through ``cancel`` and
``finish``, which is what keeps the refund attached to the status change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from otp_server.infrastructure.provider import (
    FiveSimClient,
    ProviderDataInvalid,
    ProviderError,
    ProviderOrder,
)
from otp_server.modules.accounts import Account
from otp_server.modules.phone_transactions import (
    DuplicateProviderId,
    InvalidTransition,
    NewPhoneTransaction,
    PhoneTransaction,
    PhoneTransactionPage,
    PhoneTransactionService,
    TransactionAccessError,
    TransactionStatus,
    is_terminal,
)
from otp_server.modules.wallets import InsufficientFunds, WalletService, to_money

from .models import (
    CANCEL_FAILED,
    CHECK_FAILED,
    FINISH_FAILED,
    NOT_AVAILABLE,
    PURCHASE_FAILED,
    FailureKind,
    LifecycleResult,
)

logger = logging.getLogger(__name__)


def _provider_failure(exc: ProviderError) -> FailureKind:
    if isinstance(exc, ProviderDataInvalid):
        return FailureKind.PROVIDER_DATA_INVALID
    return FailureKind.PROVIDER_UNAVAILABLE


@dataclass(slots=True)
class PurchaseService:
    session: AsyncSession
    provider: FiveSimClient
    transactions: PhoneTransactionService
    wallets: WalletService

    @classmethod
    def with_session(cls, session: AsyncSession, provider: FiveSimClient) -> "PurchaseService":
        return cls(
            session=session,
            provider=provider,
            transactions=PhoneTransactionService.with_session(session),
            wallets=WalletService.with_session(session),
        )

    async def purchase(self, account: Account, country: str, operator: str, product: str) -> LifecycleResult:
        await self._end_read()
        try:
            order = await self.provider.buy(country, operator, product)
        except ProviderError as exc:
            logger.error("Buying %s/%s/%s for %s failed: %s", country, operator, product, account.id, exc)
            return LifecycleResult.failure(_provider_failure(exc), PURCHASE_FAILED)

        record = self._record_from_order(account, order)
        try:
            async with self.session.begin_nested():
                transaction = await self.transactions.create(record)
                if transaction.price > 0:
                    await self.wallets.debit(
                        account.id,
                        transaction.price,
                        phone_transaction_id=transaction.id,
                        description=f"{transaction.service} {transaction.phone_number}",
                    )
        except InsufficientFunds as exc:
            logger.warning(
                "Account %s cannot pay %s for provider order %s (balance %s)",
                account.id,
                exc.amount,
                order.id,
                exc.balance,
            )
            await self._end_read()
            await self._release_order(order.id)
            return LifecycleResult.failure(FailureKind.INSUFFICIENT_FUNDS, PURCHASE_FAILED)
        except DuplicateProviderId:
            logger.error("Provider order %s is already stored; purchase for %s rejected", order.id, account.id)
            await self._end_read()
            await self._release_order(order.id)
            return LifecycleResult.failure(FailureKind.DUPLICATE_PROVIDER_ID, PURCHASE_FAILED)

        logger.info(
            "Account %s bought %s (%s) for %s, transaction %s",
            account.id,
            transaction.phone_number,
            transaction.service,
            transaction.price,
            transaction.id,
        )
        return LifecycleResult.success(transaction)

    async def get_owned(self, account: Account, transaction_id: int) -> PhoneTransaction:
        """Raises ``TransactionAccessError`` for unknown ids and foreign transactions alike."""
        return await self.transactions.find_owned_by(account.id, transaction_id)

    async def verify(self, account: Account, transaction_id: int) -> LifecycleResult:
        try:
            transaction = await self.get_owned(account, transaction_id)
        except TransactionAccessError:
            return LifecycleResult.failure(FailureKind.NOT_AVAILABLE, NOT_AVAILABLE)
        return await self.check_status(transaction)

    check_sms = verify

    async def check_status(self, transaction: PhoneTransaction) -> LifecycleResult:
        """Refresh status and SMS from the provider.

        The newest SMS always wins and forces RECEIVED. A failed refresh still carries
        the stored snapshot so pollers can keep going.
        """
        if transaction.is_terminal:
            return LifecycleResult.success(transaction)

        await self._end_read()
        try:
            order = await self.provider.check(transaction.provider_transaction_id)
        except ProviderError as exc:
            logger.error("Status check for transaction %s failed: %s", transaction.id, exc)
            return LifecycleResult.failure(_provider_failure(exc), CHECK_FAILED, transaction=transaction)

        fields = self._fields_from_check(transaction, order)
        if not fields:
            return LifecycleResult.success(transaction)

        updated = await self.transactions.update(transaction.id, fields, only_non_terminal=True)
        if updated is None:
            # a cancel or finish got there first
            updated = await self.transactions.get(transaction.id)
        return LifecycleResult.success(updated or transaction)

    async def cancel(self, account: Account, transaction_id: int) -> LifecycleResult:
        try:
            transaction = await self.get_owned(account, transaction_id)
        except TransactionAccessError:
            return LifecycleResult.failure(FailureKind.NOT_AVAILABLE, NOT_AVAILABLE)
        if transaction.is_terminal:
            return LifecycleResult.failure(FailureKind.INVALID_TRANSITION, CANCEL_FAILED, transaction=transaction)

        await self._end_read()
        try:
            answer = await self.provider.cancel(transaction.provider_transaction_id)
        except ProviderError as exc:
            logger.error("Cancel of transaction %s failed: %s", transaction.id, exc)
            return LifecycleResult.failure(_provider_failure(exc), CANCEL_FAILED, transaction=transaction)

        if answer.status != TransactionStatus.CANCELED.value:
            logger.warning("Provider answered %s to cancel of transaction %s", answer.status, transaction.id)
            return LifecycleResult.failure(FailureKind.PROVIDER_REFUSED, CANCEL_FAILED, transaction=transaction)

        try:
            async with self.session.begin_nested():
                updated = await self.transactions.transition(transaction, TransactionStatus.CANCELED.value)
                if transaction.price > 0:
                    await self.wallets.credit(
                        transaction.owner_id,
                        transaction.price,
                        phone_transaction_id=transaction.id,
                        description=f"Refund {transaction.service} {transaction.phone_number}",
                    )
        except InvalidTransition as exc:
            logger.warning("Cancel of transaction %s lost the race: %s", transaction.id, exc)
            return LifecycleResult.failure(FailureKind.INVALID_TRANSITION, CANCEL_FAILED, transaction=transaction)

        logger.info("Transaction %s canceled, %s refunded to %s", transaction.id, transaction.price, account.id)
        return LifecycleResult.success(updated)

    async def finish(self, account: Account, transaction_id: int) -> LifecycleResult:
        try:
            transaction = await self.get_owned(account, transaction_id)
        except TransactionAccessError:
            return LifecycleResult.failure(FailureKind.NOT_AVAILABLE, NOT_AVAILABLE)
        if transaction.is_terminal:
            return LifecycleResult.failure(FailureKind.INVALID_TRANSITION, FINISH_FAILED, transaction=transaction)

        await self._end_read()
        try:
            answer = await self.provider.finish(transaction.provider_transaction_id)
        except ProviderError as exc:
            logger.error("Finish of transaction %s failed: %s", transaction.id, exc)
            return LifecycleResult.failure(_provider_failure(exc), FINISH_FAILED, transaction=transaction)

        if answer.status != TransactionStatus.FINISHED.value:
            logger.warning("Provider answered %s to finish of transaction %s", answer.status, transaction.id)
            return LifecycleResult.failure(FailureKind.PROVIDER_REFUSED, FINISH_FAILED, transaction=transaction)

        try:
            updated = await self.transactions.transition(transaction, TransactionStatus.FINISHED.value)
        except InvalidTransition as exc:
            logger.warning("Finish of transaction %s lost the race: %s", transaction.id, exc)
            return LifecycleResult.failure(FailureKind.INVALID_TRANSITION, FINISH_FAILED, transaction=transaction)

        logger.info("Transaction %s finished", transaction.id)
        return LifecycleResult.success(updated)

    async def history(self, account: Account, limit: int = 10, offset: int = 0) -> PhoneTransactionPage:
        return await self.transactions.list_history(account.id, limit, offset)

    async def active(self, account: Account) -> list[PhoneTransaction]:
        return await self.transactions.list_active(account.id)

    async def _end_read(self) -> None:
        if self.session.in_transaction():
            await self.session.commit()

    async def _release_order(self, provider_id: str) -> None:
        """Compensating cancel for a bought order that was not stored."""
        try:
            answer = await self.provider.cancel(provider_id)
        except ProviderError as exc:
            logger.error("Compensating cancel of provider order %s failed: %s", provider_id, exc)
            return
        if answer.status != TransactionStatus.CANCELED.value:
            logger.warning("Compensating cancel of provider order %s answered %s", provider_id, answer.status)
        else:
            logger.info("Provider order %s released", provider_id)

    @staticmethod
    def _record_from_order(account: Account, order: ProviderOrder) -> NewPhoneTransaction:
        return NewPhoneTransaction(
            owner_id=account.id,
            provider_transaction_id=order.id,
            phone_number=order.phone,
            country=order.country,
            operator=order.operator,
            service=order.product,
            price=to_money(order.price),
            status=TransactionStatus.PENDING.value,
            expires_at=order.expires,
        )

    @staticmethod
    def _fields_from_check(transaction: PhoneTransaction, order: ProviderOrder) -> dict[str, Any]:
        sms = order.last_sms
        if sms is not None:
            return {
                "status": TransactionStatus.RECEIVED.value,
                "sms_text": sms.text,
                "sms_received_at": sms.created_at,
            }
        if is_terminal(order.status):
            logger.warning(
                "Provider reports %s for transaction %s; local status stays %s",
                order.status,
                transaction.id,
                transaction.status,
            )
            return {}
        if transaction.has_sms or order.status == transaction.status:
            return {}
        return {"status": order.status}

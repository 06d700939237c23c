"""Transaction store errors."""


class PhoneTransactionError(Exception):
    """Base class for phone transaction errors."""


class DuplicateProviderId(PhoneTransactionError):
    """A transaction with this provider id is already stored."""


class TransactionAccessError(PhoneTransactionError):
    """Caller may not see the transaction. Subclasses say why; callers should not."""


class TransactionNotFound(TransactionAccessError):
    pass


class TransactionForbidden(TransactionAccessError):
    pass


class InvalidTransition(PhoneTransactionError):
    """The stored status no longer allows the requested change."""

    def __init__(self, transaction_id: int, current: str | None, target: str) -> None:
        super().__init__(f"transaction {transaction_id}: cannot move from {current} to {target}")
        self.transaction_id = transaction_id
        self.current = current
        self.target = target

from typing import Optional


class TransactionError(Exception):
    """
    Raised when a transaction cannot be applied to the ledger.
    Every subclass is an expected, recoverable outcome of processing
    an untrusted upstream stream: the ledger is left as it was.
    """

    default_message = "transaction rejected"

    def __init__(self, transaction, message: Optional[str] = None):
        self.transaction = transaction
        self.message = message or self.default_message
        super().__init__(f"{self.message}: {transaction!r}")


class Malformed(TransactionError):
    default_message = "transaction contains invalid data"


class DuplicateTransactionID(TransactionError):
    default_message = "transaction id has already been processed"


class InsufficientFunds(TransactionError):
    default_message = "insufficient available funds"


class TransactionNotFound(TransactionError):
    default_message = "referenced transaction not found"


class NotDisputed(TransactionError):
    default_message = "referenced transaction is not under dispute"


class AlreadyDisputed(TransactionError):
    default_message = "referenced transaction is already under dispute"


class Indisputable(TransactionError):
    default_message = "only deposits and withdrawals can be disputed"


class AccountLocked(TransactionError):
    default_message = "account is locked"


class Unauthorized(TransactionError):
    default_message = "referenced transaction belongs to another client"


class RowParseError(ValueError):
    """Raised by the CSV reader for rows that cannot be turned into a Transaction."""

    def __init__(self, row, reason: str):
        self.row = row
        self.reason = reason
        super().__init__(f"Failed to parse row {row}: {reason}")

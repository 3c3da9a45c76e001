from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional

from errors import Malformed


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def is_stored(self) -> bool:
        """Deposits and withdrawals are kept for later disputes; the rest only reference them."""
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None
    disputed: bool = False

    def require_amount(self) -> Decimal:
        if self.amount is None:
            raise Malformed(self, "amount is required")
        return self.amount

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def add_held(self, amount: Decimal) -> None:
        # Withdrawn funds already left available, only the hold grows.
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount

    def lock(self) -> None:
        self.locked = True


@dataclass
class ProcessingStats:
    """Counters for tracking processing statistics."""

    processed: int = 0
    failed: int = 0
    skipped: int = 0
    failures_by_error: Counter = field(default_factory=Counter)

    def record_success(self) -> None:
        self.processed += 1

    def record_failure(self, error: Exception) -> None:
        self.failed += 1
        self.failures_by_error[type(error).__name__] += 1

    def record_skipped(self) -> None:
        self.skipped += 1

    def summary(self) -> str:
        line = f"Processed: {self.processed}, Failed: {self.failed}, Skipped: {self.skipped}"
        if self.failures_by_error:
            details = ", ".join(f"{name}={count}" for name, count in sorted(self.failures_by_error.items()))
            line += f" ({details})"
        return line

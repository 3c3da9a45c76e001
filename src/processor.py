import dataclasses
import logging

from errors import (
    AccountLocked,
    AlreadyDisputed,
    DuplicateTransactionID,
    Indisputable,
    InsufficientFunds,
    NotDisputed,
    TransactionNotFound,
    Unauthorized,
)
from ledger import Ledger
from models import Transaction, TransactionType, ClientAccount

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to a ledger, one at a time, in input order.
    Every precondition is checked before anything is mutated, so a rejected
    transaction leaves balances, dispute flags and the transaction history
    exactly as they were. The only side effect of a failure is the lazy
    creation of the client's account.
    """

    def __init__(self, ledger: Ledger):
        self._ledger = ledger

    def process_transaction(self, transaction: Transaction) -> None:
        """
        Apply a single transaction.

        Raises:
            TransactionError: one of its subclasses when the transaction is rejected.
        """
        if transaction.transaction_type.is_stored and self._ledger.has_transaction(transaction.transaction_id):
            raise DuplicateTransactionID(transaction)

        account = self._ledger.get_or_create_account(transaction.client_id)

        if account.locked:
            raise AccountLocked(transaction)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                self._handle_chargeback(account, transaction)

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> None:
        amount = transaction.require_amount()
        account.credit(amount)
        self._store(transaction)

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> None:
        amount = transaction.require_amount()
        if amount > account.available:
            raise InsufficientFunds(transaction, f"cannot withdraw {amount} with {account.available} available")
        account.debit(amount)
        self._store(transaction)

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> None:
        original = self._get_referenced_transaction(transaction)
        amount = original.require_amount()

        if original.disputed:
            raise AlreadyDisputed(transaction)

        original.disputed = True
        if original.transaction_type == TransactionType.DEPOSIT:
            account.hold(amount)
        else:
            account.add_held(amount)
        logger.info(f"Dispute for tx {original.transaction_id}: holding {amount} for client {account.client_id}")

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> None:
        original = self._get_referenced_transaction(transaction)
        amount = original.require_amount()

        if not original.disputed:
            raise NotDisputed(transaction)

        original.disputed = False
        account.release_hold(amount)

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> None:
        original = self._get_referenced_transaction(transaction)
        amount = original.require_amount()

        if not original.disputed:
            raise NotDisputed(transaction)

        original.disputed = False
        account.remove_held(amount)
        account.lock()
        logger.info(f"Chargeback for tx {original.transaction_id}: client {account.client_id} locked")

    def _get_referenced_transaction(self, transaction: Transaction) -> Transaction:
        original = self._ledger.get_transaction(transaction.transaction_id)

        if original is None:
            raise TransactionNotFound(transaction)

        if original.client_id != transaction.client_id:
            raise Unauthorized(
                transaction,
                f"tx {original.transaction_id} belongs to client {original.client_id}, not {transaction.client_id}",
            )

        # Unreachable through _store, which only sees deposits and withdrawals.
        if not original.transaction_type.is_stored:
            raise Indisputable(transaction)

        return original

    def _store(self, transaction: Transaction) -> None:
        # Store a private copy so the caller's record cannot alias ledger state.
        self._ledger.store_transaction(dataclasses.replace(transaction, disputed=False))


def apply(transaction: Transaction, ledger: Ledger) -> None:
    """Apply one transaction to ``ledger``, raising TransactionError if it is rejected."""
    TransactionProcessor(ledger).process_transaction(transaction)

import csv
import logging
import sys
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator

from errors import RowParseError, TransactionError
from ledger import Ledger
from models import Transaction, TransactionType, ClientAccount, ProcessingStats
from processor import TransactionProcessor

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1


class PaymentsEngine:
    """
    Reads transactions from CSV and applies them to a single ledger, sequentially.
    Rejected records are logged and skipped unless halt_on_error is set, in which
    case the first rejection is re-raised and processing stops.
    """

    def __init__(self, halt_on_error: bool = False):
        self._halt_on_error = halt_on_error
        self._ledger = Ledger()
        self._processor = TransactionProcessor(self._ledger)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Starting processing of {filepath}")

        # Undecodable bytes become U+FFFD and fail parsing on their own row.
        with open(filepath, "r", newline="", encoding="utf-8", errors="replace") as f:
            try:
                accounts = self.process_transactions(self._read_transactions(f))
            finally:
                # Print final processing report to stderr, also when halted
                print(self._stats.summary(), file=sys.stderr)

        logger.info("Processing complete")
        return accounts

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply transactions in order and return final account states."""
        for transaction in transactions:
            try:
                self._processor.process_transaction(transaction)
            except TransactionError as e:
                self._stats.record_failure(e)
                if self._halt_on_error:
                    raise
                logger.warning(f"Rejected {e.transaction}: {e.message}")
            else:
                self._stats.record_success()

        return self._ledger.get_all_accounts()

    def _read_transactions(self, lines: Iterable[str]) -> Iterator[Transaction]:
        """Yield parsed transactions, skipping rows that cannot be parsed."""
        reader = csv.DictReader(lines, skipinitialspace=True)
        while True:
            try:
                transaction = parse_csv_row(next(reader))
            except StopIteration:
                return
            except csv.Error as e:
                self._reject_row(RowParseError(f"at line {reader.line_num}", f"csv.Error: {e}"))
            except RowParseError as e:
                self._reject_row(e)
            else:
                yield transaction

    def _reject_row(self, error: RowParseError) -> None:
        if self._halt_on_error:
            self._stats.record_failure(error)
            raise error
        self._stats.record_skipped()
        logger.warning(str(error))


def parse_csv_row(row: Dict[str, str]) -> Transaction:
    """Parse CSV row into Transaction."""
    try:
        normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}

        transaction_type = TransactionType(normalized["type"].lower())
        client_id = int(normalized["client"])
        transaction_id = int(normalized["tx"])

        amount = None
        amount_str = normalized.get("amount", "")
        if amount_str:
            amount = Decimal(amount_str)
    except (KeyError, ValueError, InvalidOperation) as e:
        raise RowParseError(row, f"{type(e).__name__}: {e}") from e

    if not 0 <= client_id <= MAX_CLIENT_ID:
        raise RowParseError(row, f"client id {client_id} out of range")
    if not 0 <= transaction_id <= MAX_TRANSACTION_ID:
        raise RowParseError(row, f"tx id {transaction_id} out of range")
    if amount is not None and not amount.is_finite():
        raise RowParseError(row, f"amount {amount} is not a finite number")

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )

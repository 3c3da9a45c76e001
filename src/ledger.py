from typing import Dict, Optional

from models import Transaction, ClientAccount


class Ledger:
    """
    Owns client accounts and the deposit/withdrawal history used for dispute lookups.
    Holds no policy of its own; TransactionProcessor is the only caller that mutates it.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, Transaction] = {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def has_transaction(self, transaction_id: int) -> bool:
        return transaction_id in self._transactions

    def store_transaction(self, transaction: Transaction) -> None:
        """Store transaction for future dispute lookups."""
        if transaction.transaction_id in self._transactions:
            raise KeyError(f"transaction {transaction.transaction_id} is already stored")
        self._transactions[transaction.transaction_id] = transaction

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)

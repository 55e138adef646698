from typing import Dict, Iterator, List, Optional

from models import Transaction, StoredTransaction, ClientAccount


class TransactionStore:
    """
    Stores every deposit and withdrawal seen so far, keyed by transaction id,
    so dispute, resolve and chargeback rows can find the original amount.
    Records are never deleted.
    """

    def __init__(self):
        self._transactions: Dict[int, StoredTransaction] = {}

    def record(self, transaction: Transaction) -> StoredTransaction:
        """Store a deposit or withdrawal. A repeated id overwrites the earlier record."""
        if not transaction.transaction_type.carries_amount:
            raise ValueError(f"Only deposits and withdrawals are stored, got {transaction!r}")
        stored = StoredTransaction(transaction)
        self._transactions[transaction.transaction_id] = stored
        return stored

    def lookup(self, transaction_id: int) -> Optional[StoredTransaction]:
        """Return the mutable stored record, or None if the id was never seen."""
        return self._transactions.get(transaction_id)

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._transactions

    def __len__(self) -> int:
        return len(self._transactions)


class AccountLedger:
    """Client accounts, created lazily the first time a client id is referenced."""

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}

    def get_or_create(self, client_id: int) -> ClientAccount:
        account = self._accounts.get(client_id)
        if account is None:
            account = ClientAccount(client_id=client_id)
            self._accounts[client_id] = account
        return account

    def get(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def snapshot(self) -> List[ClientAccount]:
        """All accounts in ascending client id order."""
        return [self._accounts[client_id] for client_id in sorted(self._accounts)]

    def __iter__(self) -> Iterator[ClientAccount]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._accounts)

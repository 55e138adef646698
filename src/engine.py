import logging
from typing import Iterable, Optional

from config import Settings
from errors import SourceUnavailableError
from models import Transaction, ProcessingStats
from processor import TransactionProcessor
from reader import read_transactions
from state import AccountLedger, TransactionStore

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Replays a transaction log against the ledger in a single sequential pass.
    The engine owns its ledger and transaction store for the whole run.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._ledger = AccountLedger()
        self._store = TransactionStore()
        self._processor = TransactionProcessor(self._ledger, self._store, settings)
        self._stats = ProcessingStats()

    @property
    def ledger(self) -> AccountLedger:
        return self._ledger

    @property
    def store(self) -> TransactionStore:
        return self._store

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> AccountLedger:
        """Process CSV file and return the final ledger."""
        try:
            f = open(filepath, "r", encoding="utf-8-sig", newline="")
        except OSError as e:
            raise SourceUnavailableError(filepath, e.strerror or str(e)) from e

        with f:
            try:
                return self.process(read_transactions(f))
            except UnicodeDecodeError as e:
                raise SourceUnavailableError(filepath, f"not a text file ({e.reason})") from e
            except OSError as e:
                raise SourceUnavailableError(filepath, e.strerror or str(e)) from e

    def process(self, transactions: Iterable[Transaction]) -> AccountLedger:
        """
        Consume transactions exactly once, in order. Errors raised by the
        source propagate and abort the run; business no-ops are only counted.
        """
        logger.info("Starting transaction replay")

        for transaction in transactions:
            result = self._processor.process_transaction(transaction)
            self._stats.record(result)

        logger.info(str(self._stats))
        return self._ledger

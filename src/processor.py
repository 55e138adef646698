import logging
from typing import Optional, Tuple

from config import Settings
from models import Transaction, TransactionType, ClientAccount, StoredTransaction, ProcessingResult
from state import AccountLedger, TransactionStore

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to the ledger, one row at a time.
    Returns a ProcessingResult describing the business outcome. Outcomes other
    than APPLIED are no-ops: the row leaves every balance untouched.
    """

    def __init__(self, ledger: AccountLedger, store: TransactionStore, settings: Optional[Settings] = None):
        self._ledger = ledger
        self._store = store
        self._settings = settings or Settings()

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        account = self._ledger.get_or_create(transaction.client_id)

        if account.locked and self._settings.freeze_locked_accounts:
            logger.debug(f"{transaction!r}: account {account.client_id} is locked, ignoring")
            return ProcessingResult.ACCOUNT_LOCKED

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(transaction)

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        account.credit(transaction.amount)
        self._store.record(transaction)
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        debited = account.debit(transaction.amount)
        # Stored even when it bounces so a later dispute can still reference it
        self._store.record(transaction)
        if debited:
            return ProcessingResult.APPLIED
        logger.debug(f"Withdrawal tx {transaction.transaction_id}: insufficient funds ({account.available} < {transaction.amount})")
        return ProcessingResult.INSUFFICIENT_FUNDS

    def _referenced(
        self, transaction: Transaction
    ) -> Tuple[Optional[StoredTransaction], Optional[ClientAccount], Optional[ProcessingResult]]:
        """
        Find the record a dispute, resolve or chargeback points at and the
        account whose funds it moves, or the reason to ignore the row.
        """
        original = self._store.lookup(transaction.transaction_id)

        if original is None:
            logger.debug(f"{transaction!r}: no deposit or withdrawal with this id, ignoring")
            return None, None, ProcessingResult.UNKNOWN_TRANSACTION

        if self._settings.dispute_target == "row_client":
            target_id = transaction.client_id
        else:
            target_id = original.client_id

        if original.client_id != transaction.client_id:
            if self._settings.require_matching_client:
                logger.warning(f"{transaction!r}: client mismatch (tx belongs to client {original.client_id}), ignoring")
                return None, None, ProcessingResult.CLIENT_MISMATCH
            logger.info(f"{transaction!r}: tx belongs to client {original.client_id}, applying to client {target_id}")

        account = self._ledger.get_or_create(target_id)
        if account.locked and self._settings.freeze_locked_accounts:
            return None, None, ProcessingResult.ACCOUNT_LOCKED

        return original, account, None

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        original, account, skipped = self._referenced(transaction)
        if skipped is not None:
            return skipped

        if original.disputed and not self._settings.allow_repeat_dispute:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: already disputed, ignoring")
            return ProcessingResult.ALREADY_DISPUTED

        account.hold(original.amount)
        original.disputed = True
        return ProcessingResult.APPLIED

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        original, account, skipped = self._referenced(transaction)
        if skipped is not None:
            return skipped

        result = ProcessingResult.NOT_DISPUTED
        if original.disputed:
            account.release_hold(original.amount)
            result = ProcessingResult.APPLIED
        original.disputed = False
        return result

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        original, account, skipped = self._referenced(transaction)
        if skipped is not None:
            return skipped

        result = ProcessingResult.NOT_DISPUTED
        if original.disputed:
            account.charge_back(original.amount)
            logger.info(f"Chargeback for tx {transaction.transaction_id}: account {account.client_id} locked")
            result = ProcessingResult.APPLIED
        original.disputed = False
        return result

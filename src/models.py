from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Context, Decimal, DivisionByZero, Inexact, InvalidOperation, Overflow, localcontext
from enum import Enum
from typing import Dict, Optional

from errors import BalanceOverflowError, MalformedRecordError


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        """Deposits and withdrawals move money; the dispute family only references them."""
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ProcessingResult(Enum):
    APPLIED = "applied"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    NOT_DISPUTED = "not_disputed"
    ALREADY_DISPUTED = "already_disputed"
    CLIENT_MISMATCH = "client_mismatch"
    ACCOUNT_LOCKED = "account_locked"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __post_init__(self):
        if self.transaction_type.carries_amount and self.amount is None:
            raise MalformedRecordError(
                f"{self.transaction_type.value} tx {self.transaction_id} is missing an amount"
            )

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class StoredTransaction:
    """A deposit or withdrawal kept for later dispute lookups."""

    transaction: Transaction
    disputed: bool = False

    @property
    def client_id(self) -> int:
        return self.transaction.client_id

    @property
    def amount(self) -> Decimal:
        return self.transaction.amount


# Balances are exact: a result that would need rounding raises Inexact instead
BALANCE_CONTEXT = Context(prec=40, traps=[InvalidOperation, DivisionByZero, Overflow, Inexact])


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @contextmanager
    def _exact(self):
        try:
            with localcontext(BALANCE_CONTEXT):
                yield
        except (Inexact, Overflow) as e:
            raise BalanceOverflowError(self.client_id) from e

    @property
    def total(self) -> Decimal:
        with self._exact():
            return self.available + self.held

    # Each operation computes every new balance before assigning any, so a
    # BalanceOverflowError leaves the account untouched.

    def credit(self, amount: Decimal) -> None:
        with self._exact():
            available = self.available + amount
        self.available = available

    def debit(self, amount: Decimal) -> bool:
        """Withdraw if funds suffice. Returns False and leaves the account untouched otherwise."""
        if self.available < amount:
            return False
        with self._exact():
            available = self.available - amount
        self.available = available
        return True

    def hold(self, amount: Decimal) -> None:
        # available may go negative when the disputed funds were already spent
        with self._exact():
            available, held = self.available - amount, self.held + amount
        self.available, self.held = available, held

    def release_hold(self, amount: Decimal) -> None:
        with self._exact():
            available, held = self.available + amount, self.held - amount
        self.available, self.held = available, held

    def charge_back(self, amount: Decimal) -> None:
        with self._exact():
            held = self.held - amount
        self.held = held
        self.locked = True


class ProcessingStats:
    """Counters of processed rows per outcome."""

    def __init__(self):
        self._outcomes: Counter = Counter()

    def record(self, result: ProcessingResult) -> None:
        self._outcomes[result] += 1

    @property
    def processed(self) -> int:
        return sum(self._outcomes.values())

    @property
    def applied(self) -> int:
        return self._outcomes[ProcessingResult.APPLIED]

    @property
    def ignored(self) -> int:
        return self.processed - self.applied

    def count(self, result: ProcessingResult) -> int:
        return self._outcomes[result]

    def as_dict(self) -> Dict[str, int]:
        return {result.value: self._outcomes[result] for result in ProcessingResult}

    def __str__(self) -> str:
        ignored = ", ".join(
            f"{result.value}={count}"
            for result, count in sorted(self._outcomes.items(), key=lambda item: item[0].value)
            if result != ProcessingResult.APPLIED
        )
        summary = f"Processed: {self.processed}, Applied: {self.applied}, Ignored: {self.ignored}"
        return f"{summary} ({ignored})" if ignored else summary

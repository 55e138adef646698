import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, Optional, TextIO

from errors import MalformedRecordError
from models import Transaction, TransactionType

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")
MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1
AMOUNT_DECIMAL_PLACES = 4
# Exclusive bound on the magnitude of a single amount
MAX_AMOUNT = Decimal(10) ** 20


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """
    Lazily parse CSV rows from stream into Transactions.
    Raises MalformedRecordError on the first row that cannot be parsed, so no
    later row is ever applied after a bad one.
    """
    reader = csv.DictReader(stream)
    try:
        fieldnames = reader.fieldnames
    except csv.Error as e:
        raise MalformedRecordError(f"unreadable header: {e}", line_number=1) from e
    if fieldnames is None:
        return

    columns = [name.strip().lower() for name in fieldnames]
    missing = [name for name in REQUIRED_COLUMNS if name not in columns]
    if missing:
        raise MalformedRecordError(f"header is missing column(s) {', '.join(missing)}", line_number=1)
    reader.fieldnames = columns

    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            raise MalformedRecordError(str(e), line_number=reader.line_num) from e
        yield parse_row(row, line_number=reader.line_num)


def parse_row(row: Dict[Optional[str], object], line_number: Optional[int] = None) -> Transaction:
    """Parse one CSV row (as produced by csv.DictReader) into a Transaction."""
    if row.get(None):
        raise MalformedRecordError(f"unexpected extra fields {row[None]}", line_number)

    normalized = {k: (v or "").strip() for k, v in row.items() if k is not None}

    type_token = normalized.get("type", "").lower()
    try:
        transaction_type = TransactionType(type_token)
    except ValueError:
        raise MalformedRecordError(f"unknown transaction type {type_token!r}", line_number) from None

    client_id = _parse_id(normalized.get("client", ""), "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_id(normalized.get("tx", ""), "tx", MAX_TRANSACTION_ID, line_number)

    amount = None
    if transaction_type.carries_amount:
        amount = _parse_amount(normalized.get("amount", ""), line_number)
    elif normalized.get("amount"):
        logger.debug(f"line {line_number}: ignoring amount on {type_token} row")

    try:
        return Transaction(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )
    except MalformedRecordError as e:
        raise MalformedRecordError(str(e), line_number) from e


def _parse_id(value: str, column: str, maximum: int, line_number: Optional[int]) -> int:
    if not value.isdigit():
        raise MalformedRecordError(f"{column} must be an unsigned integer, got {value!r}", line_number)
    try:
        parsed = int(value)
    except ValueError:
        raise MalformedRecordError(f"{column} must be an unsigned integer, got {value!r}", line_number) from None
    if parsed > maximum:
        raise MalformedRecordError(f"{column} {parsed} is out of range (max {maximum})", line_number)
    return parsed


def _parse_amount(value: str, line_number: Optional[int]) -> Decimal:
    if not value:
        raise MalformedRecordError("amount is required", line_number)
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise MalformedRecordError(f"amount {value!r} is not a decimal", line_number) from None
    if not amount.is_finite():
        raise MalformedRecordError(f"amount {value!r} is not a finite decimal", line_number)
    if amount.copy_abs() >= MAX_AMOUNT:
        raise MalformedRecordError(f"amount {value!r} is out of range (must be below {MAX_AMOUNT})", line_number)
    if _decimal_places(amount) > AMOUNT_DECIMAL_PLACES:
        raise MalformedRecordError(
            f"amount {value!r} has more than {AMOUNT_DECIMAL_PLACES} decimal places", line_number
        )
    return amount


def _decimal_places(amount: Decimal) -> int:
    """Significant fractional digits, ignoring trailing zeros. Exact for any input length."""
    if not amount:
        return 0
    _, digits, exponent = amount.as_tuple()
    significant = "".join(map(str, digits)).rstrip("0")
    return max(0, -(exponent + len(digits) - len(significant)))

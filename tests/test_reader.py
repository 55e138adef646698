import sys
import os
import io
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from errors import MalformedRecordError
from models import Transaction, TransactionType
from reader import read_transactions


def read(*lines):
    return list(read_transactions(io.StringIO("\n".join(lines))))


class TestReadTransactions:
    def test_parses_all_types(self):
        transactions = read(
            "type, client, tx, amount",
            "deposit, 1, 1, 1.0",
            "withdrawal, 1, 2, 0.5",
            "dispute, 1, 1,",
            "resolve, 1, 1,",
            "chargeback, 1, 1,",
        )

        assert transactions == [
            Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("1.0")),
            Transaction(TransactionType.WITHDRAWAL, 1, 2, Decimal("0.5")),
            Transaction(TransactionType.DISPUTE, 1, 1),
            Transaction(TransactionType.RESOLVE, 1, 1),
            Transaction(TransactionType.CHARGEBACK, 1, 1),
        ]

    def test_without_spaces_and_missing_trailing_column(self):
        transactions = read(
            "type,client,tx,amount",
            "deposit,2,5,3",
            "dispute,2,5",
        )

        assert transactions == [
            Transaction(TransactionType.DEPOSIT, 2, 5, Decimal("3")),
            Transaction(TransactionType.DISPUTE, 2, 5),
        ]

    def test_amount_on_dispute_row_is_ignored(self):
        assert read("type,client,tx,amount", "dispute,1,1,9.9") == [Transaction(TransactionType.DISPUTE, 1, 1)]

    def test_blank_lines_skipped(self):
        assert len(read("type,client,tx,amount", "", "deposit,1,1,1", "")) == 1

    def test_empty_input(self):
        assert read("") == []

    def test_is_lazy(self):
        transactions = read_transactions(io.StringIO("type,client,tx,amount\ndeposit,1,1,1\nbogus,1,2,\n"))

        assert next(transactions) == Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("1"))
        with pytest.raises(MalformedRecordError):
            next(transactions)

    def test_keeps_four_decimal_places_exactly(self):
        [transaction] = read("type,client,tx,amount", "deposit,1,1,1.2345")
        assert transaction.amount == Decimal("1.2345")

    def test_negative_amount_is_signed_decimal(self):
        [transaction] = read("type,client,tx,amount", "deposit,1,1,-2.5")
        assert transaction.amount == Decimal("-2.5")

    def test_trailing_zeros_beyond_four_places_accepted(self):
        [transaction] = read("type,client,tx,amount", "deposit,1,1,1.23450000")
        assert transaction.amount == Decimal("1.2345")

    def test_largest_amount_accepted(self):
        [transaction] = read("type,client,tx,amount", "withdrawal,1,1,99999999999999999999.9999")
        assert transaction.amount == Decimal("99999999999999999999.9999")

    def test_limits(self):
        [transaction] = read("type,client,tx,amount", "deposit,65535,4294967295,1")
        assert transaction.client_id == 65535
        assert transaction.transaction_id == 4294967295


class TestMalformedRecords:
    @pytest.mark.parametrize("row, message", [
        ("transfer,1,1,1.0", "unknown transaction type"),
        ("deposit,1,1,", "amount is required"),
        ("withdrawal,1,1", "amount is required"),
        ("deposit,1,1,abc", "not a decimal"),
        ("deposit,1,1,NaN", "not a finite decimal"),
        ("deposit,1,1,1.23456", "more than 4 decimal places"),
        ("deposit,1,1,1.0000000000000000000000000000001", "more than 4 decimal places"),
        ("deposit,1,1,100000000000000000000", "out of range"),
        ("withdrawal,1,1,-100000000000000000000.5", "out of range"),
        ("deposit,-1,1,1.0", "client must be an unsigned integer"),
        ("deposit,65536,1,1.0", "client 65536 is out of range"),
        ("deposit,1,4294967296,1.0", "tx 4294967296 is out of range"),
        ("deposit,1,x,1.0", "tx must be an unsigned integer"),
        ("deposit,1,1,1.0,extra", "unexpected extra fields"),
    ])
    def test_rejected(self, row, message):
        with pytest.raises(MalformedRecordError, match=message) as excinfo:
            read("type,client,tx,amount", "deposit,1,1,1.0", row)
        assert excinfo.value.line_number == 3
        assert str(excinfo.value).startswith("line 3: ")

    def test_missing_header_column(self):
        with pytest.raises(MalformedRecordError, match="missing column"):
            read("type,client,amount", "deposit,1,1.0")

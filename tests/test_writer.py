import sys
import os
import io
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import ClientAccount
from writer import format_decimal, write_accounts


@pytest.mark.parametrize("value, expected", [
    (Decimal("1.5000"), "1.5"),
    (Decimal("0"), "0"),
    (Decimal("0.0000"), "0"),
    (Decimal("100"), "100"),
    (Decimal("100.0"), "100"),
    (Decimal("-8"), "-8"),
    (Decimal("0.0001"), "0.0001"),
    (Decimal("1000099999999999999999999.0001"), "1000099999999999999999999.0001"),
    (Decimal("1000099999999999999999999.0000"), "1000099999999999999999999"),
])
def test_format_decimal(value, expected):
    assert format_decimal(value) == expected


def test_write_accounts():
    out = io.StringIO()
    write_accounts([
        ClientAccount(client_id=1, available=Decimal("1.5"), held=Decimal("0")),
        ClientAccount(client_id=2, available=Decimal("0"), held=Decimal("2.25"), locked=True),
    ], out)

    assert out.getvalue() == (
        "client,available,held,total,locked\n"
        "1,1.5,0,1.5,false\n"
        "2,0,2.25,2.25,true\n"
    )


def test_write_no_accounts():
    out = io.StringIO()
    write_accounts([], out)
    assert out.getvalue() == "client,available,held,total,locked\n"

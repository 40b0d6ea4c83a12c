from decimal import Decimal

import pytest

from prep_pricing.engine.money import format_currency, format_money, round_money, to_decimal


def test_format_keeps_two_decimals():
    assert format_money("0.1") == "0.10"
    assert format_money(3) == "3.00"
    assert format_currency(Decimal("1250")) == "$1,250.00"


def test_round_half_up():
    assert round_money("2.345") == Decimal("2.35")
    assert round_money("2.344") == Decimal("2.34")


def test_to_decimal_inputs():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("$1,200.50") == Decimal("1200.50")
    assert to_decimal("") == Decimal("0")
    assert to_decimal(None) == Decimal("0")


@pytest.mark.parametrize("value", ["abc", True, float("nan"), "inf"])
def test_to_decimal_rejects(value):
    with pytest.raises(ValueError):
        to_decimal(value)

from decimal import Decimal

import pytest

from core.numbers import floor_int, money, round_half_up, to_decimal


@pytest.mark.parametrize("value, places, expected", [
    ("2.5", 0, "3"),
    ("3.5", 0, "4"),
    ("-2.5", 0, "-3"),
    ("0.51725", 4, "0.5173"),
    ("133.335", 2, "133.34"),
])
def test_round_half_up(value, places, expected):
    assert round_half_up(Decimal(value), places) == Decimal(expected)


def test_to_decimal_goes_through_str():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(None) == Decimal("0")
    assert to_decimal(None, default="1") == Decimal("1")


def test_floor_int():
    assert floor_int(Decimal("3.8")) == 3
    assert floor_int(Decimal("-0.2")) == -1


def test_money_has_two_places():
    assert str(money(5)) == "5.00"

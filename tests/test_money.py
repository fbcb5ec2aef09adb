from decimal import Decimal

import pytest

from services.errors import ValidationError
from services.money import (
    CENTS,
    QUANTITY_PLACES,
    exact,
    exact_cents,
    format_money,
    non_negative,
    quantize_money,
    to_decimal,
)


def test_to_decimal_accepts_strings_ints_and_decimals():
    assert to_decimal("12.50") == Decimal("12.50")
    assert to_decimal(7) == Decimal("7")
    assert to_decimal(Decimal("0.08")) == Decimal("0.08")
    assert to_decimal(" 3 ") == Decimal("3")


@pytest.mark.parametrize("value", [0.1, 1.0, True])
def test_to_decimal_rejects_floats_and_bools(value):
    with pytest.raises(ValidationError):
        to_decimal(value, "amount")


@pytest.mark.parametrize("value", ["abc", "", "NaN", "Infinity"])
def test_to_decimal_rejects_non_numbers(value):
    with pytest.raises(ValidationError):
        to_decimal(value, "amount")


def test_quantize_money_rounds_half_up():
    assert quantize_money(Decimal("2.345")) == Decimal("2.35")
    assert quantize_money(Decimal("2.344")) == Decimal("2.34")
    assert quantize_money(Decimal("0.005")) == Decimal("0.01")


def test_non_negative():
    assert non_negative(None, "x") is None
    assert non_negative("0", "x") == Decimal("0")
    with pytest.raises(ValidationError, match="cannot be negative"):
        non_negative("-0.01", "material_cost")


def test_exact_never_rounds_silently():
    assert exact_cents("10.5", "amount") == Decimal("10.50")
    assert exact("2.25", QUANTITY_PLACES, "labor_hours") == Decimal("2.2500")
    with pytest.raises(ValidationError, match="2 decimal places"):
        exact_cents("10.005", "amount")
    with pytest.raises(ValidationError, match="4 decimal places"):
        exact("1.00001", QUANTITY_PLACES, "labor_hours")


def test_exact_cents_keeps_stored_precision():
    assert exact_cents(Decimal("186.3"), "amount").as_tuple().exponent == CENTS.as_tuple().exponent


def test_format_money():
    assert format_money(Decimal("1234")) == "$1,234.00"
    assert format_money(Decimal("0.5")) == "$0.50"

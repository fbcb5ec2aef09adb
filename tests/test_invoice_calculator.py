from decimal import Decimal

import pytest

from services.errors import ValidationError
from services.invoice_calculator import compute_totals, normalize_inputs


def test_labor_materials_and_tax():
    totals = compute_totals("3", "85", "120", "0.08")

    assert totals.labor_amount == Decimal("255.00")
    assert totals.subtotal == Decimal("375.00")
    assert totals.tax_amount == Decimal("30.00")
    assert totals.total_amount == Decimal("405.00")


def test_labor_is_zero_unless_hours_and_rate_are_both_given():
    assert compute_totals("3", None, "50", "0").labor_amount == Decimal("0.00")
    assert compute_totals(None, "85", "50", "0").labor_amount == Decimal("0.00")
    assert compute_totals(None, None, None, "0").total_amount == Decimal("0.00")


def test_tax_is_rounded_half_up_to_cents():
    # 123.45 * 0.0825 = 10.184625
    totals = compute_totals(None, None, "123.45", "0.0825")
    assert totals.tax_amount == Decimal("10.18")
    assert totals.total_amount == Decimal("133.63")

    # 10.10 * 0.05 = 0.505
    assert compute_totals(None, None, "10.10", "0.05").tax_amount == Decimal("0.51")


def test_fractional_hours_are_rounded_once_at_labor_amount():
    # 1.3333 h * 75.00 = 99.9975
    totals = compute_totals("1.3333", "75", "0", "0")
    assert totals.labor_amount == Decimal("100.00")
    assert totals.subtotal == Decimal("100.00")


@pytest.mark.parametrize(
    "inputs",
    [
        ("3", "85", "120", "0.08"),
        ("0.25", "99.99", "0.01", "0.0725"),
        ("12.5", "64", "1999.99", "0.08875"),
        (None, None, "0", "0"),
    ],
)
def test_total_is_subtotal_plus_tax_exactly(inputs):
    first = compute_totals(*inputs)
    second = compute_totals(*inputs)

    assert first == second
    assert first.total_amount == first.subtotal + first.tax_amount
    assert first.tax_amount == first.tax_amount.quantize(Decimal("0.01"))


def test_arguments_are_not_mutated():
    hours = Decimal("2")
    compute_totals(hours, Decimal("50"), Decimal("10"), Decimal("0.1"))
    assert hours == Decimal("2")


@pytest.mark.parametrize(
    "inputs",
    [
        ("-1", "85", "0", "0"),
        ("1", "-85", "0", "0"),
        ("1", "85", "-0.01", "0"),
        ("1", "85", "0", "-0.08"),
        ("1", "85", "0.001", "0"),
        ("1", "85", "0", "0.0000001"),
        (1.5, "85", "0", "0"),
    ],
)
def test_invalid_inputs_are_rejected(inputs):
    with pytest.raises(ValidationError):
        compute_totals(*inputs)


def test_normalize_inputs_defaults():
    inputs = normalize_inputs(None, None, None, None)
    assert inputs.labor_hours is None
    assert inputs.hourly_rate is None
    assert inputs.material_cost == Decimal("0.00")
    assert inputs.tax_rate == Decimal("0")

# services/invoice_calculator.py
"""
Invoice Calculator - derives an invoice's monetary fields from its inputs.

Pure functions only: no session, no clock, no mutation of arguments.
Recalculation always recomputes every derived field from the inputs, so
repeated edits never accumulate rounding drift.
"""
from decimal import Decimal
from typing import NamedTuple, Optional

from .money import (
     MoneyInput, QUANTITY_PLACES, RATE_PLACES, ZERO, exact, exact_cents, non_negative, quantize_money,
)


class InvoiceTotals(NamedTuple):
     labor_amount: Decimal
     subtotal: Decimal
     tax_amount: Decimal
     total_amount: Decimal


class InvoiceInputs(NamedTuple):
     """Validated calculator inputs, normalized to their stored precision."""
     labor_hours: Optional[Decimal]
     hourly_rate: Optional[Decimal]
     material_cost: Decimal
     tax_rate: Decimal


def normalize_inputs(
     labor_hours: Optional[MoneyInput],
     hourly_rate: Optional[MoneyInput],
     material_cost: Optional[MoneyInput],
     tax_rate: MoneyInput,
) -> InvoiceInputs:
     """
     Validate raw inputs.

     Raises:
          ValidationError: on negative, non-numeric or float inputs, or on more
          fraction digits than the stored column keeps.
     """
     hours = non_negative(labor_hours, "labor_hours")
     rate = non_negative(hourly_rate, "hourly_rate")
     material = non_negative(material_cost, "material_cost")
     tax = non_negative(tax_rate, "tax_rate")
     return InvoiceInputs(
          labor_hours=exact(hours, QUANTITY_PLACES, "labor_hours") if hours is not None else None,
          hourly_rate=exact(rate, QUANTITY_PLACES, "hourly_rate") if rate is not None else None,
          material_cost=exact_cents(material, "material_cost") if material is not None else ZERO,
          tax_rate=exact(tax if tax is not None else 0, RATE_PLACES, "tax_rate"),
     )


def compute_totals(
     labor_hours: Optional[MoneyInput],
     hourly_rate: Optional[MoneyInput],
     material_cost: Optional[MoneyInput],
     tax_rate: MoneyInput,
) -> InvoiceTotals:
     """
     Compute labor amount, subtotal, tax and total.

     labor_amount is hours * rate when both are present, else 0. The product
     is kept exact and rounded to cents only when it becomes labor_amount.
     tax_amount = round(subtotal * tax_rate, 2) and total = subtotal + tax.

     Example:
          compute_totals("3", "85", "120", "0.08") gives labor 255.00,
          subtotal 375.00, tax 30.00 and total 405.00.
     """
     inputs = normalize_inputs(labor_hours, hourly_rate, material_cost, tax_rate)

     if inputs.labor_hours is not None and inputs.hourly_rate is not None:
          labor_amount = quantize_money(inputs.labor_hours * inputs.hourly_rate)
     else:
          labor_amount = ZERO

     subtotal = labor_amount + inputs.material_cost
     tax_amount = quantize_money(subtotal * inputs.tax_rate)
     return InvoiceTotals(
          labor_amount=labor_amount,
          subtotal=subtotal,
          tax_amount=tax_amount,
          total_amount=subtotal + tax_amount,
     )

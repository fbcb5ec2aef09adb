# services/money.py
"""
Fixed-point money helpers.

All currency values are decimal.Decimal. Stored monetary fields carry two
fraction digits and are rounded half-up at the moment they are stored. Labor
hours and hourly rates keep four, tax rates six. Binary floats are refused
outright.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from .errors import ValidationError

CENTS = Decimal("0.01")
QUANTITY_PLACES = Decimal("0.0001")  # labor hours, hourly rate
RATE_PLACES = Decimal("0.000001")  # tax rates, 0.08875 = 8.875%
ZERO = Decimal("0.00")

MoneyInput = Union[Decimal, int, str]


def to_decimal(value: MoneyInput, field: str = "value") -> Decimal:
     """Convert an int/str/Decimal to a finite Decimal. Floats are rejected."""
     if isinstance(value, bool) or isinstance(value, float):
          raise ValidationError(f"{field} must be a decimal string or integer, not {type(value).__name__}")
     try:
          result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
     except (InvalidOperation, ValueError):
          raise ValidationError(f"{field} is not a valid decimal: {value!r}")
     if not result.is_finite():
          raise ValidationError(f"{field} must be a finite number")
     return result


def quantize_money(value: Decimal) -> Decimal:
     """Round half-up to cents. Used when a value becomes a stored field."""
     return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def non_negative(value: Optional[MoneyInput], field: str) -> Optional[Decimal]:
     """Decimal >= 0, or None when the value is absent."""
     if value is None:
          return None
     result = to_decimal(value, field)
     if result < 0:
          raise ValidationError(f"{field} cannot be negative")
     return result


def exact(value: MoneyInput, places: Decimal, field: str) -> Decimal:
     """
     Decimal with no more fraction digits than places, returned quantized to it.

     Values entered by people are never rounded silently; a 10.005 payment
     is an input error, not 10.01.
     """
     result = to_decimal(value, field)
     if result != result.quantize(places):
          digits = -places.as_tuple().exponent
          raise ValidationError(f"{field} cannot have more than {digits} decimal places")
     return result.quantize(places)


def exact_cents(value: MoneyInput, field: str) -> Decimal:
     return exact(value, CENTS, field)


def format_money(value: Decimal) -> str:
     return f"${quantize_money(value):,.2f}"

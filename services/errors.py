# services/errors.py
"""
Domain errors raised by the billing services.

main.py maps each class to an HTTP response once; services and routers
raise them and never translate them locally.
"""
from decimal import Decimal
from typing import Optional


class InvoiceError(Exception):
     """Base class for billing errors that reach the caller."""

     error_code = "invoice_error"

     def __init__(self, detail: str):
          super().__init__(detail)
          self.detail = detail


class ValidationError(InvoiceError):
     """Malformed or out-of-range input. Nothing has been applied."""

     error_code = "validation_error"


class NotFoundError(InvoiceError):
     """Id does not resolve inside the caller's account."""

     error_code = "not_found"


class StateConflictError(InvoiceError):
     """Operation is not allowed in the invoice's current state."""

     error_code = "state_conflict"

     def __init__(self, detail: str, current_status: Optional[str] = None):
          super().__init__(detail)
          self.current_status = current_status


class OverpaymentError(InvoiceError):
     """Payment would push paid_amount above total_amount."""

     error_code = "overpayment"

     def __init__(self, detail: str, remaining_balance: Decimal):
          super().__init__(detail)
          self.remaining_balance = remaining_balance


class DependencyFailure(Exception):
     """
     A side effect (PDF, email) failed after the state change committed.

     Never propagated to the caller; collected into response warnings.
     """

     def __init__(self, dependency: str, detail: str):
          super().__init__(f"{dependency}: {detail}")
          self.dependency = dependency
          self.detail = detail

     def as_warning(self) -> str:
          return f"{self.dependency} failed: {self.detail}"

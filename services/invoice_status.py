# services/invoice_status.py
"""
Invoice status state machine.

Stored states: draft, sent, viewed, accepted, paid.
- draft -> sent                 explicit send (financials frozen afterwards)
- sent -> viewed                explicit mark-viewed
- sent/viewed -> accepted       explicit accept
- any non-paid -> paid          derived when paid_amount == total_amount
- sent/viewed/accepted -> overdue
                                derived on read only, never stored

paid is terminal.
"""
from datetime import date
from typing import Optional

from models.invoice import Invoice, InvoiceStatus
from .errors import StateConflictError


TRANSITIONS = {
     InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT, InvoiceStatus.PAID}),
     InvoiceStatus.SENT: frozenset({InvoiceStatus.VIEWED, InvoiceStatus.ACCEPTED, InvoiceStatus.PAID}),
     InvoiceStatus.VIEWED: frozenset({InvoiceStatus.ACCEPTED, InvoiceStatus.PAID}),
     InvoiceStatus.ACCEPTED: frozenset({InvoiceStatus.PAID}),
     InvoiceStatus.PAID: frozenset(),  # TERMINAL
}

# States whose effective status flips to overdue once the due date passes
OVERDUE_ELIGIBLE = frozenset({InvoiceStatus.SENT, InvoiceStatus.VIEWED, InvoiceStatus.ACCEPTED})


def can_transition(current: InvoiceStatus, target: InvoiceStatus) -> bool:
     return target in TRANSITIONS.get(current, frozenset())


def ensure_transition(invoice: Invoice, target: InvoiceStatus) -> None:
     """
     Raises:
          StateConflictError: if the stored status cannot move to target.
     """
     if not can_transition(invoice.status, target):
          raise StateConflictError(
               f"Invoice {invoice.invoice_number} cannot move from "
               f"'{invoice.status.value}' to '{target.value}'",
               current_status=invoice.status.value,
          )


def ensure_editable(invoice: Invoice) -> None:
     """Financial inputs can only change while the invoice is a draft."""
     if invoice.status != InvoiceStatus.DRAFT:
          raise StateConflictError(
               f"Invoice {invoice.invoice_number} is '{invoice.status.value}'; "
               "financial fields are frozen once an invoice is sent",
               current_status=invoice.status.value,
          )


def is_overdue(invoice: Invoice, today: Optional[date] = None) -> bool:
     today = today or date.today()
     return (
          invoice.status in OVERDUE_ELIGIBLE
          and invoice.due_date < today
          and invoice.paid_amount < invoice.total_amount
     )


def effective_status(invoice: Invoice, today: Optional[date] = None) -> InvoiceStatus:
     """The status callers see: the stored one, or overdue when it applies."""
     if is_overdue(invoice, today):
          return InvoiceStatus.OVERDUE
     return invoice.status


def apply_paid_if_settled(invoice: Invoice) -> bool:
     """
     Derived paid transition. Returns True when the invoice just became paid.

     A zero-total invoice is never settled by this rule; it has no payment
     that could trigger it.
     """
     if invoice.status == InvoiceStatus.PAID:
          return False
     if invoice.paid_amount > 0 and invoice.paid_amount == invoice.total_amount:
          ensure_transition(invoice, InvoiceStatus.PAID)
          invoice.status = InvoiceStatus.PAID
          return True
     return False

# services/invoice_delivery.py
"""
Invoice delivery - PDF rendering and email dispatch after a send.

Runs after the send transaction has committed. Failures are logged and
returned as warnings; they never undo the state change.
"""
from typing import Callable, List, Optional, Tuple

import structlog
from sqlalchemy.orm import Session

from models import Account, Customer, Invoice
from utils.email import send_invoice_email
from .errors import DependencyFailure
from .pdf_service import render_invoice_pdf

logger = structlog.get_logger(__name__)

PdfRenderer = Callable[..., bytes]
EmailSender = Callable[..., None]


class InvoiceDispatcher:
     """Renders an invoice PDF and emails it to the customer."""

     def __init__(
          self,
          renderer: PdfRenderer = render_invoice_pdf,
          mailer: EmailSender = send_invoice_email,
     ):
          self.renderer = renderer
          self.mailer = mailer

     @staticmethod
     def _parties(db: Session, invoice: Invoice) -> Tuple[Optional[Customer], Optional[Account]]:
          customer = db.query(Customer).filter(Customer.id == invoice.customer_id).first()
          account = db.query(Account).filter(Account.id == invoice.account_id).first()
          return customer, account

     def render(self, db: Session, invoice: Invoice) -> bytes:
          customer, account = self._parties(db, invoice)
          return self.renderer(
               invoice,
               customer=customer,
               business_name=account.business_name if account else "",
          )

     def dispatch(self, db: Session, invoice: Invoice) -> List[str]:
          """
          Render the PDF and email it. Returns warnings, empty when both succeeded.

          A PDF failure still sends the email, without the attachment.
          """
          failures: List[DependencyFailure] = []

          pdf_bytes: Optional[bytes] = None
          try:
               pdf_bytes = self.render(db, invoice)
          except Exception as e:
               failures.append(DependencyFailure("pdf_renderer", str(e)))

          customer, account = self._parties(db, invoice)
          if customer is None or not customer.email:
               failures.append(DependencyFailure("email_dispatcher", "customer has no email address"))
          else:
               try:
                    self.mailer(
                         customer.email,
                         customer.full_name,
                         invoice.invoice_number,
                         invoice.total_amount,
                         pdf_bytes=pdf_bytes,
                         business_name=account.business_name if account else None,
                    )
               except Exception as e:
                    failures.append(DependencyFailure("email_dispatcher", str(e)))

          for failure in failures:
               logger.warning(
                    "invoice_delivery_failed",
                    invoice_id=invoice.id,
                    dependency=failure.dependency,
                    error=failure.detail,
               )
          if not failures:
               logger.info("invoice_delivered", invoice_id=invoice.id, recipient=customer.email)
          return [failure.as_warning() for failure in failures]


def get_invoice_dispatcher() -> InvoiceDispatcher:
     """FastAPI dependency; tests override it with fakes."""
     return InvoiceDispatcher()

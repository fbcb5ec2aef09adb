# models/payment.py
"""
Payment model - immutable receipt recorded against an invoice.

Each record stores a SHA-256 hash of (invoice_id + account_id + amount +
payment_date + created_at + previous hash) and the hash of the invoice's previous payment,
forming a per-invoice chain. Records are append-only; updates and deletes are
refused at the application layer.
"""
from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Text, ForeignKey, event
from .base import Base, utcnow


class ImmutablePaymentError(RuntimeError):
     """Raised when code tries to modify or delete a stored payment."""


class Payment(Base):
     """
     Payment ledger entry. Created only by services.payment_ledger.
     Chain is formed via transaction_hash -> next payment's previous_hash.
     """

     id = Column(Integer, primary_key=True, autoincrement=True)
     invoice_id = Column(
          Integer,
          ForeignKey("invoices.id", ondelete="RESTRICT"),  # Prevent delete if payments exist
          nullable=False,
          index=True
     )
     account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
     customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)

     amount = Column(Numeric(12, 2), nullable=False)
     method = Column(String(50), nullable=False, default="other")  # cash, check, card, ach, other
     payment_date = Column(Date, nullable=False)
     reference_number = Column(String(100), nullable=True)
     notes = Column(Text, nullable=True)

     transaction_hash = Column(String(64), nullable=False, unique=True, index=True)  # SHA-256 hex length
     previous_hash = Column(String(64), nullable=False)  # "0" for the invoice's first payment
     created_at = Column(DateTime, default=utcnow, nullable=False)

     def __repr__(self):
          return f"<Payment(id={self.id}, invoice_id={self.invoice_id}, amount={self.amount}, hash={self.transaction_hash[:16]}...)>"


@event.listens_for(Payment, "before_update")
def _refuse_payment_update(mapper, connection, target):
     raise ImmutablePaymentError(f"Payment {target.id} is immutable; record a correcting entry instead")


@event.listens_for(Payment, "before_delete")
def _refuse_payment_delete(mapper, connection, target):
     raise ImmutablePaymentError(f"Payment {target.id} cannot be deleted")

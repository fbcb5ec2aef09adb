# models/invoice.py
import enum
from decimal import Decimal

from sqlalchemy import (
     Column, Integer, String, Numeric, Date, DateTime, Text, ForeignKey, Enum, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin


class InvoiceStatus(str, enum.Enum):
     """Invoice lifecycle states. OVERDUE is only ever derived, never stored."""
     DRAFT = "draft"
     SENT = "sent"
     VIEWED = "viewed"
     ACCEPTED = "accepted"
     PAID = "paid"
     OVERDUE = "overdue"


class Invoice(TimestampMixin, Base):
     """
     Invoice model - billing document for one job of one customer.

     Monetary columns are derived by services.invoice_calculator and only
     change through services.invoice_service. paid_amount moves only through
     the payment ledger.
     """
     __table_args__ = (
          UniqueConstraint("account_id", "invoice_number", name="uq_invoices_account_number"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)

     # Owning account and referenced records (ids only)
     account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
     job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
     customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)

     invoice_number = Column(String(32), nullable=False)
     invoice_date = Column(Date, nullable=False)
     due_date = Column(Date, nullable=False, index=True)

     # Inputs
     labor_hours = Column(Numeric(10, 4), nullable=True)
     hourly_rate = Column(Numeric(12, 4), nullable=True)
     material_cost = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     tax_rate = Column(Numeric(8, 6), nullable=False, default=Decimal("0"))  # fraction, 0.08 = 8%

     # Derived amounts
     labor_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     subtotal = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     tax_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     total_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     paid_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))

     status = Column(
          Enum(
               InvoiceStatus,
               name="invoice_status",
               create_constraint=True,
               values_callable=lambda statuses: [s.value for s in statuses],
          ),
          default=InvoiceStatus.DRAFT,
          nullable=False,
          index=True
     )
     sent_date = Column(DateTime, nullable=True)
     viewed_date = Column(DateTime, nullable=True)
     payment_date = Column(Date, nullable=True)

     notes = Column(Text, nullable=True)

     # Optimistic concurrency guard, bumped on every UPDATE
     version_id = Column(Integer, nullable=False)

     # Payments are owned by the invoice and only ever appended
     payments = relationship("Payment", order_by="Payment.id", lazy="selectin")

     __mapper_args__ = {"version_id_col": version_id}

     def __repr__(self):
          return (
               f"<Invoice(id={self.id}, number='{self.invoice_number}', "
               f"total={self.total_amount}, paid={self.paid_amount}, status='{self.status.value}')>"
          )

     @property
     def balance_due(self) -> Decimal:
          return self.total_amount - self.paid_amount

# models/account.py
from sqlalchemy import Column, Integer, String, Numeric, Text
from .base import Base, TimestampMixin


class Account(TimestampMixin, Base):
     """
     Account model - the business that owns customers, jobs and invoices.

     Only the fields the billing core reads are mapped here. Every invoice
     query is scoped by account id.
     """

     id = Column(Integer, primary_key=True, autoincrement=True)
     owner_id = Column(Integer, nullable=False, unique=True, index=True)  # users.id of the owner
     business_name = Column(String(255), nullable=False)

     # Billing defaults
     default_tax_rate = Column(Numeric(8, 6), nullable=False, default=0)  # fraction, 0.08 = 8%
     default_invoice_notes = Column(Text, nullable=True)
     payment_terms_days = Column(Integer, nullable=False, default=30)

     def __repr__(self):
          return f"<Account(id={self.id}, business_name='{self.business_name}')>"

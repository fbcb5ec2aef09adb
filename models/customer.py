# models/customer.py
from sqlalchemy import Column, Integer, String, ForeignKey
from .base import Base, TimestampMixin


class Customer(TimestampMixin, Base):
     """
     Customer model - a client of an account.
     Referenced by invoices through customer_id only.
     """

     id = Column(Integer, primary_key=True, autoincrement=True)
     account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)

     first_name = Column(String(100), nullable=False)
     last_name = Column(String(100), nullable=False)
     email = Column(String(255), nullable=True)

     @property
     def full_name(self) -> str:
          return f"{self.first_name} {self.last_name}".strip()

     def __repr__(self):
          return f"<Customer(id={self.id}, name='{self.full_name}')>"

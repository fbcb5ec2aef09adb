# models/job.py
from sqlalchemy import Column, Integer, String, ForeignKey
from .base import Base, TimestampMixin


class Job(TimestampMixin, Base):
     """
     Job model - a unit of field work performed for a customer.
     Read-only from the billing core's point of view.
     """

     id = Column(Integer, primary_key=True, autoincrement=True)
     account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
     customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)

     title = Column(String(255), nullable=False)
     status = Column(String(50), default="lead", nullable=False)  # lead, quoted, accepted, in_progress, completed, invoiced, paid

     def __repr__(self):
          return f"<Job(id={self.id}, title='{self.title}', status='{self.status}')>"

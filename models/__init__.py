# models/__init__.py
from .base import Base
from .account import Account
from .customer import Customer
from .job import Job
from .invoice import Invoice, InvoiceStatus
from .payment import Payment, ImmutablePaymentError

__all__ = [
     "Base",
     "Account",
     "Customer",
     "Job",
     "Invoice",
     "InvoiceStatus",
     "Payment",
     "ImmutablePaymentError",
]

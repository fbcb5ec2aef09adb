# services/__init__.py
from .errors import (
     InvoiceError,
     ValidationError,
     NotFoundError,
     StateConflictError,
     OverpaymentError,
     DependencyFailure,
)
from .invoice_calculator import InvoiceTotals, compute_totals
from .invoice_service import InvoiceService
from .payment_ledger import (
     compute_transaction_hash,
     get_previous_hash,
     record_payment,
     verify_ledger,
     GENESIS_HASH,
)

__all__ = [
     "InvoiceError",
     "ValidationError",
     "NotFoundError",
     "StateConflictError",
     "OverpaymentError",
     "DependencyFailure",
     "InvoiceTotals",
     "compute_totals",
     "InvoiceService",
     "compute_transaction_hash",
     "get_previous_hash",
     "record_payment",
     "verify_ledger",
     "GENESIS_HASH",
]

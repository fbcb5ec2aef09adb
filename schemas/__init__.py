from .invoice import (
     InvoiceStatusEnum,
     InvoiceCreate,
     InvoiceRecalculate,
     InvoiceDueDateUpdate,
     InvoiceResponse,
     InvoiceListResponse,
     InvoiceSummaryResponse,
     LedgerVerificationResponse,
)
from .payment import (
     PaymentCreate,
     PaymentResponse,
     PaymentRecordedResponse,
     PaymentListResponse,
)

__all__ = [
     "InvoiceStatusEnum",
     "InvoiceCreate",
     "InvoiceRecalculate",
     "InvoiceDueDateUpdate",
     "InvoiceResponse",
     "InvoiceListResponse",
     "InvoiceSummaryResponse",
     "LedgerVerificationResponse",
     "PaymentCreate",
     "PaymentResponse",
     "PaymentRecordedResponse",
     "PaymentListResponse",
]

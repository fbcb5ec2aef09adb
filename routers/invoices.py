# routers/invoices.py
"""
Invoice API routes.

Every route is scoped to the caller's account (dependencies.get_account_id).
Invoices of other accounts answer 404, never 403, so their existence does
not leak. Domain errors raised by the services are mapped to HTTP responses
in main.py.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_account_id
from models import Invoice, InvoiceStatus
from services.invoice_delivery import InvoiceDispatcher, get_invoice_dispatcher
from services.invoice_service import InvoiceService
from services.invoice_status import effective_status
from services.payment_ledger import verify_ledger
from schemas.invoice import (
     InvoiceCreate,
     InvoiceRecalculate,
     InvoiceDueDateUpdate,
     InvoiceResponse,
     InvoiceListResponse,
     InvoiceStatusEnum,
     InvoiceSummaryResponse,
     LedgerVerificationResponse,
)
from schemas.payment import (
     PaymentCreate,
     PaymentListResponse,
     PaymentRecordedResponse,
     PaymentResponse,
)

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.post(
     "",
     response_model=InvoiceResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create a new invoice"
)
def create_invoice(
     invoice_data: InvoiceCreate,
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id)
):
     """
     Create a draft invoice for a job.

     - **job_id** / **customer_id**: must belong to the caller's account, and the job to the customer
     - **labor_hours** / **hourly_rate**: labor is billed only when both are given
     - **material_cost**: defaults to 0
     - **tax_rate**: fraction (0.08 = 8%), defaults to the account rate
     - **due_date**: defaults to invoice date + payment terms
     """
     invoice = InvoiceService.create_invoice(
          db,
          account_id=account_id,
          job_id=invoice_data.job_id,
          customer_id=invoice_data.customer_id,
          due_date=invoice_data.due_date,
          labor_hours=invoice_data.labor_hours,
          hourly_rate=invoice_data.hourly_rate,
          material_cost=invoice_data.material_cost,
          tax_rate=invoice_data.tax_rate,
          notes=invoice_data.notes,
          invoice_date=invoice_data.invoice_date,
     )
     return _build_invoice_response(invoice)


@router.get(
     "",
     response_model=InvoiceListResponse,
     summary="List invoices with filters"
)
def list_invoices(
     status: Optional[InvoiceStatusEnum] = Query(None, description="Filter by effective status"),
     customer_id: Optional[int] = Query(None, description="Filter by customer ID"),
     job_id: Optional[int] = Query(None, description="Filter by job ID"),
     page: int = Query(1, ge=1, description="Page number"),
     page_size: int = Query(50, ge=1, le=100, description="Items per page"),
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id)
):
     """
     Retrieve a paginated list of the account's invoices, newest first.

     Filtering by **overdue** returns sent/viewed/accepted invoices past their
     due date with a balance; filtering by **sent** excludes those.
     """
     invoices, total = InvoiceService.list_invoices(
          db,
          account_id,
          status=InvoiceStatus(status.value) if status else None,
          customer_id=customer_id,
          job_id=job_id,
          page=page,
          page_size=page_size,
     )
     return InvoiceListResponse(
          invoices=[_build_invoice_response(inv) for inv in invoices],
          total=total,
          page=page,
          page_size=page_size
     )


@router.get(
     "/summary",
     response_model=InvoiceSummaryResponse,
     summary="Get the account's billing summary"
)
def get_invoice_summary(
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id)
):
     """
     Totals invoiced/collected/outstanding, counts per effective status,
     collection rate and average payment.
     """
     return InvoiceSummaryResponse(**InvoiceService.summarize(db, account_id))


@router.get(
     "/{invoice_id}",
     response_model=InvoiceResponse,
     summary="Get invoice by ID"
)
def get_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id)
):
     invoice = InvoiceService.get_invoice(db, account_id, invoice_id)
     return _build_invoice_response(invoice)


@router.put(
     "/{invoice_id}/recalculate",
     response_model=InvoiceResponse,
     summary="Recalculate a draft invoice"
)
def recalculate_invoice(
     invoice_id: int,
     invoice_data: InvoiceRecalculate,
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id)
):
     """
     Re-run the totals with new labor/material/tax inputs.
     Only drafts can be recalculated; sent invoices answer 409.
     """
     invoice = InvoiceService.recalculate(
          db,
          account_id,
          invoice_id,
          labor_hours=invoice_data.labor_hours,
          hourly_rate=invoice_data.hourly_rate,
          material_cost=invoice_data.material_cost,
          tax_rate=invoice_data.tax_rate,
     )
     return _build_invoice_response(invoice)


@router.put(
     "/{invoice_id}/due-date",
     response_model=InvoiceResponse,
     summary="Change the due date"
)
def update_due_date(
     invoice_id: int,
     body: InvoiceDueDateUpdate,
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id)
):
     """Extending the due date lifts an overdue status."""
     invoice = InvoiceService.update_due_date(db, account_id, invoice_id, body.due_date)
     return _build_invoice_response(invoice)


@router.post(
     "/{invoice_id}/send",
     response_model=InvoiceResponse,
     summary="Send invoice"
)
def send_invoice(
     invoice_id: int,
     allow_zero_total: bool = Query(False, description="Confirm sending an invoice whose total is zero"),
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id),
     dispatcher: InvoiceDispatcher = Depends(get_invoice_dispatcher)
):
     """
     Move a draft to **sent**, then render the PDF and email the customer.

     PDF/email failures do not undo the send; they come back in **warnings**.
     """
     invoice = InvoiceService.send(db, account_id, invoice_id, allow_zero_total=allow_zero_total)
     warnings = dispatcher.dispatch(db, invoice)
     return _build_invoice_response(invoice, warnings=warnings)


@router.post(
     "/{invoice_id}/mark-viewed",
     response_model=InvoiceResponse,
     summary="Mark invoice as viewed"
)
def mark_invoice_viewed(
     invoice_id: int,
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id)
):
     invoice = InvoiceService.mark_viewed(db, account_id, invoice_id)
     return _build_invoice_response(invoice)


@router.post(
     "/{invoice_id}/accept",
     response_model=InvoiceResponse,
     summary="Mark invoice as accepted"
)
def accept_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id)
):
     invoice = InvoiceService.accept(db, account_id, invoice_id)
     return _build_invoice_response(invoice)


@router.post(
     "/{invoice_id}/payment",
     response_model=PaymentRecordedResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Record a payment"
)
def record_payment(
     invoice_id: int,
     body: PaymentCreate,
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id)
):
     """
     Append a payment to the invoice's ledger.

     A payment larger than the balance due is rejected with 409
     **overpayment** (the response carries **remaining_balance**); it is
     never reduced to fit. Paying the balance in full marks the invoice paid.
     """
     invoice, payment = InvoiceService.record_payment(
          db,
          account_id,
          invoice_id,
          amount=body.amount,
          method=body.method,
          payment_date=body.payment_date,
          reference_number=body.reference_number,
          notes=body.notes,
     )
     return PaymentRecordedResponse(
          invoice=_build_invoice_response(invoice),
          payment=PaymentResponse.model_validate(payment),
     )


@router.get(
     "/{invoice_id}/payments",
     response_model=PaymentListResponse,
     summary="List an invoice's payments"
)
def list_invoice_payments(
     invoice_id: int,
     page: int = Query(1, ge=1, description="Page number"),
     page_size: int = Query(50, ge=1, le=100, description="Items per page"),
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id)
):
     payments, total = InvoiceService.list_payments(
          db, account_id, invoice_id=invoice_id, page=page, page_size=page_size
     )
     return PaymentListResponse(
          payments=[PaymentResponse.model_validate(p) for p in payments],
          total=total,
          page=page,
          page_size=page_size,
     )


@router.get(
     "/{invoice_id}/pdf",
     summary="Download invoice PDF"
)
def get_invoice_pdf(
     invoice_id: int,
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id),
     dispatcher: InvoiceDispatcher = Depends(get_invoice_dispatcher)
):
     invoice = InvoiceService.get_invoice(db, account_id, invoice_id)
     pdf_bytes = dispatcher.render(db, invoice)
     return Response(
          content=pdf_bytes,
          media_type="application/pdf",
          headers={"Content-Disposition": f'attachment; filename="invoice_{invoice.invoice_number}.pdf"'},
     )


@router.post(
     "/{invoice_id}/email",
     response_model=InvoiceResponse,
     summary="Email an already sent invoice again"
)
def email_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id),
     dispatcher: InvoiceDispatcher = Depends(get_invoice_dispatcher)
):
     """
     Re-deliver the invoice to the customer without changing its state.
     Drafts must be sent first (409).
     """
     invoice = InvoiceService.get_invoice(db, account_id, invoice_id)
     InvoiceService.ensure_sent(invoice)
     warnings = dispatcher.dispatch(db, invoice)
     return _build_invoice_response(invoice, warnings=warnings)


@router.get(
     "/{invoice_id}/ledger/verify",
     response_model=LedgerVerificationResponse,
     summary="Verify an invoice's payment ledger"
)
def verify_invoice_ledger(
     invoice_id: int,
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id)
):
     """
     Recompute every payment hash, check the previous_hash chain and check
     that the payments add up to paid_amount.
     """
     invoice = InvoiceService.get_invoice(db, account_id, invoice_id)
     verified, message, checked = verify_ledger(invoice)
     return LedgerVerificationResponse(
          invoice_id=invoice.id,
          verified=verified,
          message=message,
          payments_checked=checked,
     )


@router.delete(
     "/{invoice_id}",
     status_code=status.HTTP_204_NO_CONTENT,
     summary="Delete invoice"
)
def delete_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id)
):
     """
     Delete an invoice by ID.

     Invoices with payments cannot be deleted (409).
     """
     InvoiceService.delete_invoice(db, account_id, invoice_id)
     return Response(status_code=status.HTTP_204_NO_CONTENT)


def _build_invoice_response(
     invoice: Invoice,
     warnings: Optional[list] = None,
     today: Optional[date] = None
) -> InvoiceResponse:
     """
     Helper function to build InvoiceResponse with derived fields.
     """
     return InvoiceResponse(
          id=invoice.id,
          account_id=invoice.account_id,
          job_id=invoice.job_id,
          customer_id=invoice.customer_id,
          invoice_number=invoice.invoice_number,
          invoice_date=invoice.invoice_date,
          due_date=invoice.due_date,
          labor_hours=invoice.labor_hours,
          hourly_rate=invoice.hourly_rate,
          labor_amount=invoice.labor_amount,
          material_cost=invoice.material_cost,
          subtotal=invoice.subtotal,
          tax_rate=invoice.tax_rate,
          tax_amount=invoice.tax_amount,
          total_amount=invoice.total_amount,
          paid_amount=invoice.paid_amount,
          balance_due=invoice.balance_due,
          status=invoice.status.value,
          effective_status=effective_status(invoice, today).value,
          sent_date=invoice.sent_date,
          viewed_date=invoice.viewed_date,
          payment_date=invoice.payment_date,
          notes=invoice.notes,
          created_at=invoice.created_at,
          updated_at=invoice.updated_at,
          warnings=warnings or [],
     )

# routers/payments.py
"""
Payment lookup API.

Payments are recorded through POST /api/invoices/{id}/payment and are
immutable afterwards; this router only reads them.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_account_id
from services.invoice_service import InvoiceService
from schemas.payment import PaymentListResponse, PaymentResponse

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.get(
     "",
     response_model=PaymentListResponse,
     summary="List the account's payments"
)
def list_payments(
     invoice_id: Optional[int] = Query(None, description="Only payments of this invoice"),
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
     "/{payment_id}",
     response_model=PaymentResponse,
     summary="Get payment by ID"
)
def get_payment(
     payment_id: int,
     db: Session = Depends(get_session),
     account_id: int = Depends(get_account_id)
):
     return PaymentResponse.model_validate(InvoiceService.get_payment(db, account_id, payment_id))

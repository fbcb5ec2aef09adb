"""
Pydantic schemas for payment recording and lookup.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from .invoice import InvoiceResponse


class PaymentCreate(BaseModel):
     """Request body for POST /api/invoices/{id}/payment."""

     amount: Decimal = Field(..., description="Amount received; must be positive and cannot exceed the balance due")
     method: Optional[str] = Field(None, max_length=50, description="cash, check, card, ach, other")
     payment_date: Optional[date] = Field(None, description="Defaults to today")
     reference_number: Optional[str] = Field(None, max_length=100, description="Check number, card auth code, ...")
     notes: Optional[str] = Field(None, max_length=2000)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "amount": "300.00",
                    "method": "check",
                    "payment_date": "2026-10-19",
                    "reference_number": "CHK-1042",
               }
          }
     )


class PaymentResponse(BaseModel):
     """A recorded payment."""

     id: int
     invoice_id: int
     account_id: int
     customer_id: int
     amount: Decimal
     method: str
     payment_date: date
     reference_number: Optional[str] = None
     notes: Optional[str] = None
     transaction_hash: str = Field(..., description="Ledger hash for client verification")
     previous_hash: str
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class PaymentRecordedResponse(BaseModel):
     """Response for POST /api/invoices/{id}/payment."""

     invoice: InvoiceResponse
     payment: PaymentResponse


class PaymentListResponse(BaseModel):
     payments: List[PaymentResponse]
     total: int
     page: int = 1
     page_size: int = 50

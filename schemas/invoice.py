"""
Pydantic schemas for Invoice API request/response validation.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum


class InvoiceStatusEnum(str, Enum):
     """Invoice status options as callers see them (overdue is derived)."""
     DRAFT = "draft"
     SENT = "sent"
     VIEWED = "viewed"
     ACCEPTED = "accepted"
     PAID = "paid"
     OVERDUE = "overdue"


class InvoiceCreate(BaseModel):
     """Schema for creating a new invoice."""
     job_id: int = Field(..., gt=0, description="Job being billed (must belong to the customer)")
     customer_id: int = Field(..., gt=0, description="Customer being billed")
     invoice_date: Optional[date] = Field(None, description="Defaults to today")
     due_date: Optional[date] = Field(None, description="Defaults to invoice date + account payment terms")
     labor_hours: Optional[Decimal] = Field(None, description="Hours worked")
     hourly_rate: Optional[Decimal] = Field(None, description="Rate per hour")
     material_cost: Optional[Decimal] = Field(None, description="Materials total")
     tax_rate: Optional[Decimal] = Field(None, description="Fraction, 0.08 = 8%; defaults to the account rate")
     notes: Optional[str] = Field(None, max_length=4000)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "job_id": 1,
                    "customer_id": 1,
                    "due_date": "2026-11-18",
                    "labor_hours": "3",
                    "hourly_rate": "85.00",
                    "material_cost": "120.00",
                    "tax_rate": "0.08",
                    "notes": "Replaced kitchen faucet"
               }
          }
     )


class InvoiceRecalculate(BaseModel):
     """
     Schema for recalculating a draft invoice.

     Omitted (or null) fields keep their stored value, so labor that has been
     set cannot be removed again; send labor_hours "0" to bill no labor.
     Amounts are range-checked by the service (400), like payment amounts.
     """
     labor_hours: Optional[Decimal] = None
     hourly_rate: Optional[Decimal] = None
     material_cost: Optional[Decimal] = None
     tax_rate: Optional[Decimal] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "labor_hours": "4.5"
               }
          }
     )


class InvoiceDueDateUpdate(BaseModel):
     """Schema for moving an invoice's due date."""
     due_date: date


class InvoiceResponse(BaseModel):
     """Schema for invoice response."""
     id: int
     account_id: int
     job_id: int
     customer_id: int
     invoice_number: str
     invoice_date: date
     due_date: date
     labor_hours: Optional[Decimal] = None
     hourly_rate: Optional[Decimal] = None
     labor_amount: Decimal
     material_cost: Decimal
     subtotal: Decimal
     tax_rate: Decimal
     tax_amount: Decimal
     total_amount: Decimal
     paid_amount: Decimal
     balance_due: Decimal
     status: InvoiceStatusEnum = Field(..., description="Stored status")
     effective_status: InvoiceStatusEnum = Field(..., description="Stored status, or overdue when past due")
     sent_date: Optional[datetime] = None
     viewed_date: Optional[datetime] = None
     payment_date: Optional[date] = None
     notes: Optional[str] = None
     created_at: datetime
     updated_at: datetime

     # Non-fatal side-effect failures (PDF/email) of the triggering call
     warnings: List[str] = Field(default_factory=list)

     model_config = ConfigDict(
          from_attributes=True,
          json_schema_extra={
               "example": {
                    "id": 1,
                    "account_id": 1,
                    "job_id": 1,
                    "customer_id": 1,
                    "invoice_number": "INV-20261019-0001",
                    "invoice_date": "2026-10-19",
                    "due_date": "2026-11-18",
                    "labor_hours": "3.0000",
                    "hourly_rate": "85.0000",
                    "labor_amount": "255.00",
                    "material_cost": "120.00",
                    "subtotal": "375.00",
                    "tax_rate": "0.080000",
                    "tax_amount": "30.00",
                    "total_amount": "405.00",
                    "paid_amount": "0.00",
                    "balance_due": "405.00",
                    "status": "draft",
                    "effective_status": "draft",
                    "created_at": "2026-10-19T10:30:00",
                    "updated_at": "2026-10-19T10:30:00",
                    "warnings": []
               }
          }
     )


class InvoiceListResponse(BaseModel):
     """Schema for paginated invoice list response."""
     invoices: List[InvoiceResponse]
     total: int
     page: int = 1
     page_size: int = 50

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "invoices": [],
                    "total": 0,
                    "page": 1,
                    "page_size": 50
               }
          }
     )


class InvoiceSummaryResponse(BaseModel):
     """Account-level billing summary."""
     account_id: int
     total_invoices: int
     total_invoiced: Decimal
     total_collected: Decimal
     total_outstanding: Decimal
     draft_invoices: int
     paid_invoices: int
     unpaid_invoices: int
     overdue_invoices: int
     collection_rate: Decimal = Field(..., description="Percent of invoiced amount collected")
     total_payments: int
     average_payment: Decimal


class LedgerVerificationResponse(BaseModel):
     invoice_id: int
     verified: bool
     message: str
     payments_checked: int

# services/payment_ledger.py
"""
Payment Ledger Service - append-only payment records per invoice.

When a payment is recorded:
1. Validate amount and the remaining balance (never cap an over-payment)
2. Compute SHA-256 hash from invoice_id + account_id + amount + payment_date + created_at + previous hash
3. Store the record with a reference to the invoice's previous payment hash (chain)
4. Update the invoice's paid_amount / payment_date and apply the derived paid status

The caller holds the invoice row lock and owns the transaction, so the
payment row and the invoice update become visible together or not at all.

Verification: recompute hashes, check the chain and check that the payments
add up to the invoice's paid_amount.
"""
import hashlib
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple

import structlog
from sqlalchemy.orm import Session

from models import Invoice, InvoiceStatus, Payment
from models.base import utcnow
from .errors import OverpaymentError, StateConflictError, ValidationError
from .money import MoneyInput, exact_cents, format_money
from .invoice_status import apply_paid_if_settled

logger = structlog.get_logger(__name__)

# First payment of an invoice: no previous record
GENESIS_HASH = "0"

DEFAULT_METHOD = "other"


def _normalize_amount(amount: Decimal) -> str:
     """Normalize amount to canonical string for hashing (2 decimal places)."""
     return f"{Decimal(amount):.2f}"


def compute_transaction_hash(
     invoice_id: int,
     account_id: int,
     amount: Decimal,
     payment_date: date,
     created_at: datetime,
     previous_hash: str = GENESIS_HASH
) -> str:
     """
     Compute SHA-256 hash for a payment record.

     Input string: invoice_id|account_id|amount|payment_date|created_at|previous_hash.
     Returns 64-char hex string.
     """
     payload = "|".join([
          str(invoice_id),
          str(account_id),
          _normalize_amount(amount),
          payment_date.isoformat(),
          created_at.replace(microsecond=0).isoformat(),
          previous_hash,
     ])
     return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def get_previous_hash(invoice: Invoice) -> str:
     """Hash of the invoice's latest payment, or GENESIS_HASH if it has none."""
     if not invoice.payments:
          return GENESIS_HASH
     return invoice.payments[-1].transaction_hash


def _normalize_method(method: Optional[str]) -> str:
     if method is None or not method.strip():
          return DEFAULT_METHOD
     normalized = method.strip().lower()
     if len(normalized) > 50:
          raise ValidationError("method cannot be longer than 50 characters")
     return normalized


def record_payment(
     db: Session,
     invoice: Invoice,
     amount: MoneyInput,
     method: Optional[str] = None,
     payment_date: Optional[date] = None,
     reference_number: Optional[str] = None,
     notes: Optional[str] = None,
) -> Payment:
     """
     Append an immutable payment to the invoice and apply it.

     The invoice must already be loaded under lock by the caller.

     Raises:
          ValidationError: amount is not a positive cent amount.
          StateConflictError: invoice is already paid.
          OverpaymentError: paid_amount + amount would exceed total_amount.
     """
     if invoice.status == InvoiceStatus.PAID:
          raise StateConflictError(
               f"Invoice {invoice.invoice_number} is already paid",
               current_status=invoice.status.value,
          )

     amount = exact_cents(amount, "amount")
     if amount <= 0:
          raise ValidationError("Payment amount must be greater than zero")

     remaining = invoice.total_amount - invoice.paid_amount
     if amount > remaining:
          raise OverpaymentError(
               f"Payment of {format_money(amount)} exceeds the remaining balance "
               f"of {format_money(remaining)} on invoice {invoice.invoice_number}",
               remaining_balance=remaining,
          )

     payment_date = payment_date or date.today()
     created_at = utcnow().replace(microsecond=0)
     previous_hash = get_previous_hash(invoice)

     payment = Payment(
          invoice_id=invoice.id,
          account_id=invoice.account_id,
          customer_id=invoice.customer_id,
          amount=amount,
          method=_normalize_method(method),
          payment_date=payment_date,
          reference_number=reference_number,
          notes=notes,
          transaction_hash=compute_transaction_hash(
               invoice.id, invoice.account_id, amount, payment_date, created_at, previous_hash
          ),
          previous_hash=previous_hash,
          created_at=created_at,
     )
     db.add(payment)
     invoice.payments.append(payment)

     invoice.paid_amount = invoice.paid_amount + amount
     if invoice.payment_date is None or payment_date > invoice.payment_date:
          invoice.payment_date = payment_date
     became_paid = apply_paid_if_settled(invoice)
     db.flush()

     logger.info(
          "payment_recorded",
          invoice_id=invoice.id,
          payment_id=payment.id,
          amount=str(amount),
          paid_amount=str(invoice.paid_amount),
          became_paid=became_paid,
     )
     return payment


def verify_ledger(invoice: Invoice) -> Tuple[bool, str, int]:
     """
     Verify every payment of an invoice.

     Returns:
          (all_valid: bool, message: str, payments_checked: int)
          - hash mismatch, broken chain, or payments that do not add up to
            paid_amount all fail verification
     """
     prev_hash = GENESIS_HASH
     checked = 0
     total = Decimal("0.00")

     for payment in invoice.payments:
          if payment.previous_hash != prev_hash:
               return False, f"Chain broken at payment id={payment.id}: previous_hash mismatch", checked
          computed = compute_transaction_hash(
               payment.invoice_id,
               payment.account_id,
               payment.amount,
               payment.payment_date,
               payment.created_at,
               payment.previous_hash,
          )
          if computed != payment.transaction_hash:
               return False, f"Hash mismatch at payment id={payment.id}", checked
          prev_hash = payment.transaction_hash
          total += payment.amount
          checked += 1

     if total != invoice.paid_amount:
          return False, f"Payments total {total} but invoice paid_amount is {invoice.paid_amount}", checked

     if checked == 0:
          return True, "No payments recorded", 0
     return True, "Ledger verification passed", checked

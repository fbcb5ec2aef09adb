# services/invoice_service.py
"""
Invoice Service - Business logic layer for invoice operations.

This service handles invoice creation, recalculation, status transitions,
payment recording and deletion, separate from the API layer.

Every mutating operation is one unit of work: the invoice row is loaded
with FOR UPDATE, the change is flushed, and the transaction is committed
here. A stale version_id (concurrent writer) rolls back and retries the
whole operation; any other error rolls back and propagates.
"""
import functools
from datetime import date, timedelta
from typing import Optional, Tuple

import structlog
from sqlalchemy import and_, not_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from models import Account, Customer, Invoice, InvoiceStatus, Job, Payment
from models.base import utcnow
from . import payment_ledger
from .errors import NotFoundError, StateConflictError, ValidationError
from .invoice_calculator import compute_totals, normalize_inputs
from .invoice_status import (
     OVERDUE_ELIGIBLE,
     apply_paid_if_settled,
     effective_status,
     ensure_editable,
     ensure_transition,
)
from .money import MoneyInput, ZERO, quantize_money

logger = structlog.get_logger(__name__)

MAX_CONFLICT_RETRIES = 3


def unit_of_work(retry_on=(StaleDataError,), retry_if=None):
     """
     Commit the wrapped service call, retrying it when a concurrent writer wins.

     The wrapped function must take the session as its first argument and
     must be safe to re-run from scratch. retry_if narrows retry_on: an
     exception it rejects is rolled back and re-raised at once.
     """
     def decorator(fn):
          @functools.wraps(fn)
          def wrapper(db: Session, *args, **kwargs):
               for attempt in range(1, MAX_CONFLICT_RETRIES + 1):
                    try:
                         result = fn(db, *args, **kwargs)
                         db.commit()
                         return result
                    except retry_on as exc:
                         db.rollback()
                         if retry_if is not None and not retry_if(exc):
                              raise
                         logger.warning(
                              "invoice_write_conflict",
                              operation=fn.__name__,
                              attempt=attempt,
                              error=str(exc),
                         )
                    except Exception:
                         db.rollback()
                         raise
               raise StateConflictError(
                    f"{fn.__name__} lost {MAX_CONFLICT_RETRIES} races with concurrent updates; retry the request"
               )
          return wrapper
     return decorator


def is_number_collision(exc: Exception) -> bool:
     """True for a concurrent creator taking the same invoice number."""
     if isinstance(exc, StaleDataError):
          return True
     if not isinstance(exc, IntegrityError):
          return False
     message = str(exc.orig)
     # MS SQL and PostgreSQL name the constraint; SQLite names the columns
     return (
          "uq_invoices_account_number" in message
          or "invoices.account_id, invoices.invoice_number" in message
     )


def _overdue_clause(today: date):
     return and_(
          Invoice.status.in_(list(OVERDUE_ELIGIBLE)),
          Invoice.due_date < today,
          Invoice.paid_amount < Invoice.total_amount,
     )


class InvoiceService:
     """Service class for invoice-related business logic."""

     # ------------------------------------------------------------------
     # Lookups (account scoped; foreign records are reported as not found)
     # ------------------------------------------------------------------

     @staticmethod
     def get_account(db: Session, account_id: int) -> Account:
          account = db.query(Account).filter(Account.id == account_id).first()
          if not account:
               raise NotFoundError(f"Account with ID {account_id} not found")
          return account

     @staticmethod
     def get_invoice(
          db: Session,
          account_id: int,
          invoice_id: int,
          lock: bool = False
     ) -> Invoice:
          """
          Load an invoice of the given account.

          Args:
               lock: take a row lock (SELECT ... FOR UPDATE) and refresh any
                    copy already held in the session

          Raises:
               NotFoundError: if the invoice does not exist in this account
          """
          query = db.query(Invoice).filter(
               Invoice.id == invoice_id,
               Invoice.account_id == account_id
          )
          if lock:
               query = query.with_for_update().populate_existing()
          invoice = query.first()
          if not invoice:
               raise NotFoundError(f"Invoice with ID {invoice_id} not found")
          return invoice

     @staticmethod
     def next_invoice_number(db: Session, account_id: int, invoice_date: date) -> str:
          """
          Next number in the account's sequence for invoice_date: INV-YYYYMMDD-NNNN.

          The suffix is compared as a number, so 9999 is followed by 10000
          and then 10001. Two concurrent creators can compute the same number;
          the unique constraint rejects the loser and create_invoice retries.
          """
          prefix = f"INV-{invoice_date:%Y%m%d}-"
          numbers = (
               db.query(Invoice.invoice_number)
               .filter(
                    Invoice.account_id == account_id,
                    Invoice.invoice_number.like(f"{prefix}%")
               )
               .all()
          )
          suffixes = [number[len(prefix):] for (number,) in numbers]
          sequence = max((int(s) for s in suffixes if s.isdigit()), default=0) + 1
          return f"{prefix}{sequence:04d}"

     @staticmethod
     def ensure_sent(invoice: Invoice) -> None:
          """Drafts are never delivered; send them first."""
          if invoice.status == InvoiceStatus.DRAFT:
               raise StateConflictError(
                    f"Invoice {invoice.invoice_number} is a draft; send it first",
                    current_status=invoice.status.value,
               )

     # ------------------------------------------------------------------
     # Mutations
     # ------------------------------------------------------------------

     @staticmethod
     @unit_of_work(retry_on=(StaleDataError, IntegrityError), retry_if=is_number_collision)
     def create_invoice(
          db: Session,
          account_id: int,
          job_id: int,
          customer_id: int,
          due_date: Optional[date] = None,
          labor_hours: Optional[MoneyInput] = None,
          hourly_rate: Optional[MoneyInput] = None,
          material_cost: Optional[MoneyInput] = None,
          tax_rate: Optional[MoneyInput] = None,
          notes: Optional[str] = None,
          invoice_date: Optional[date] = None,
     ) -> Invoice:
          """
          Create a draft invoice for a job.

          Args:
               db: SQLAlchemy database session
               account_id: Owning account (from the caller's identity)
               job_id: Job being billed (must belong to customer_id)
               customer_id: Customer being billed
               due_date: Defaults to invoice_date + the account's payment terms
               labor_hours, hourly_rate: Optional; labor is 0 unless both are given
               material_cost: Defaults to 0
               tax_rate: Fraction (0.08 = 8%); defaults to the account default
               notes: Defaults to the account's default invoice notes
               invoice_date: Defaults to today

          Returns:
               Created Invoice object

          Raises:
               NotFoundError: account, job or customer not in this account
               ValidationError: bad amounts, job/customer mismatch, due date before invoice date
          """
          account = InvoiceService.get_account(db, account_id)

          customer = db.query(Customer).filter(
               Customer.id == customer_id,
               Customer.account_id == account_id
          ).first()
          if not customer:
               raise NotFoundError(f"Customer with ID {customer_id} not found")

          job = db.query(Job).filter(Job.id == job_id, Job.account_id == account_id).first()
          if not job:
               raise NotFoundError(f"Job with ID {job_id} not found")

          if job.customer_id != customer_id:
               raise ValidationError("Job does not belong to the specified customer")

          invoice_date = invoice_date or date.today()
          if due_date is None:
               due_date = invoice_date + timedelta(days=account.payment_terms_days or 0)
          if due_date < invoice_date:
               raise ValidationError("due_date cannot be before invoice_date")

          if tax_rate is None:
               tax_rate = account.default_tax_rate
          inputs = normalize_inputs(labor_hours, hourly_rate, material_cost, tax_rate)
          totals = compute_totals(*inputs)

          invoice = Invoice(
               account_id=account_id,
               job_id=job_id,
               customer_id=customer_id,
               invoice_number=InvoiceService.next_invoice_number(db, account_id, invoice_date),
               invoice_date=invoice_date,
               due_date=due_date,
               labor_hours=inputs.labor_hours,
               hourly_rate=inputs.hourly_rate,
               material_cost=inputs.material_cost,
               tax_rate=inputs.tax_rate,
               labor_amount=totals.labor_amount,
               subtotal=totals.subtotal,
               tax_amount=totals.tax_amount,
               total_amount=totals.total_amount,
               paid_amount=ZERO,
               status=InvoiceStatus.DRAFT,
               notes=notes if notes is not None else account.default_invoice_notes,
          )
          db.add(invoice)
          db.flush()  # Flush to get the ID and hit the number constraint before commit

          logger.info(
               "invoice_created",
               invoice_id=invoice.id,
               invoice_number=invoice.invoice_number,
               account_id=account_id,
               total_amount=str(invoice.total_amount),
          )
          return invoice

     @staticmethod
     @unit_of_work()
     def recalculate(
          db: Session,
          account_id: int,
          invoice_id: int,
          labor_hours: Optional[MoneyInput] = None,
          hourly_rate: Optional[MoneyInput] = None,
          material_cost: Optional[MoneyInput] = None,
          tax_rate: Optional[MoneyInput] = None,
     ) -> Invoice:
          """
          Re-run the calculator on a draft invoice.

          Omitted inputs keep their stored values. All derived fields are
          replaced, never adjusted.

          Raises:
               StateConflictError: invoice is not a draft, or the new total
               would fall below what has already been paid
          """
          invoice = InvoiceService.get_invoice(db, account_id, invoice_id, lock=True)
          ensure_editable(invoice)

          inputs = normalize_inputs(
               labor_hours if labor_hours is not None else invoice.labor_hours,
               hourly_rate if hourly_rate is not None else invoice.hourly_rate,
               material_cost if material_cost is not None else invoice.material_cost,
               tax_rate if tax_rate is not None else invoice.tax_rate,
          )
          totals = compute_totals(*inputs)

          if totals.total_amount < invoice.paid_amount:
               raise StateConflictError(
                    f"New total {totals.total_amount} is below the {invoice.paid_amount} already paid",
                    current_status=invoice.status.value,
               )

          invoice.labor_hours = inputs.labor_hours
          invoice.hourly_rate = inputs.hourly_rate
          invoice.material_cost = inputs.material_cost
          invoice.tax_rate = inputs.tax_rate
          invoice.labor_amount = totals.labor_amount
          invoice.subtotal = totals.subtotal
          invoice.tax_amount = totals.tax_amount
          invoice.total_amount = totals.total_amount
          apply_paid_if_settled(invoice)
          db.flush()

          logger.info("invoice_recalculated", invoice_id=invoice.id, total_amount=str(invoice.total_amount))
          return invoice

     @staticmethod
     @unit_of_work()
     def send(
          db: Session,
          account_id: int,
          invoice_id: int,
          allow_zero_total: bool = False
     ) -> Invoice:
          """
          draft -> sent. Freezes the financial fields.

          PDF rendering and email delivery are not done here; the caller
          dispatches them after this commit.

          A zero-total invoice sent with allow_zero_total stays sent: there is
          no payment that could settle it, and it never reads as overdue
          because nothing is outstanding.

          Raises:
               StateConflictError: not a draft, or total is zero without allow_zero_total
          """
          invoice = InvoiceService.get_invoice(db, account_id, invoice_id, lock=True)
          ensure_transition(invoice, InvoiceStatus.SENT)
          if invoice.total_amount == 0 and not allow_zero_total:
               raise StateConflictError(
                    f"Invoice {invoice.invoice_number} has a zero total; "
                    "send with allow_zero_total to confirm",
                    current_status=invoice.status.value,
               )
          invoice.status = InvoiceStatus.SENT
          invoice.sent_date = utcnow()
          db.flush()

          logger.info("invoice_sent", invoice_id=invoice.id, invoice_number=invoice.invoice_number)
          return invoice

     @staticmethod
     @unit_of_work()
     def mark_viewed(db: Session, account_id: int, invoice_id: int) -> Invoice:
          """sent -> viewed (e.g. the customer opened it in the portal)."""
          invoice = InvoiceService.get_invoice(db, account_id, invoice_id, lock=True)
          ensure_transition(invoice, InvoiceStatus.VIEWED)
          invoice.status = InvoiceStatus.VIEWED
          invoice.viewed_date = utcnow()
          db.flush()

          logger.info("invoice_viewed", invoice_id=invoice.id)
          return invoice

     @staticmethod
     @unit_of_work()
     def accept(db: Session, account_id: int, invoice_id: int) -> Invoice:
          """sent/viewed -> accepted (customer approved a quote-style invoice)."""
          invoice = InvoiceService.get_invoice(db, account_id, invoice_id, lock=True)
          ensure_transition(invoice, InvoiceStatus.ACCEPTED)
          invoice.status = InvoiceStatus.ACCEPTED
          db.flush()

          logger.info("invoice_accepted", invoice_id=invoice.id)
          return invoice

     @staticmethod
     @unit_of_work()
     def record_payment(
          db: Session,
          account_id: int,
          invoice_id: int,
          amount: MoneyInput,
          method: Optional[str] = None,
          payment_date: Optional[date] = None,
          reference_number: Optional[str] = None,
          notes: Optional[str] = None,
     ) -> Tuple[Invoice, Payment]:
          """
          Record a payment through the ledger under the invoice lock.

          Returns:
               (updated invoice, created payment)
          """
          invoice = InvoiceService.get_invoice(db, account_id, invoice_id, lock=True)
          payment = payment_ledger.record_payment(
               db,
               invoice,
               amount=amount,
               method=method,
               payment_date=payment_date,
               reference_number=reference_number,
               notes=notes,
          )
          return invoice, payment

     @staticmethod
     @unit_of_work()
     def update_due_date(db: Session, account_id: int, invoice_id: int, due_date: date) -> Invoice:
          """
          Move the due date. Extending it lifts a derived overdue status.

          Raises:
               StateConflictError: invoice is already paid
               ValidationError: due date before invoice date
          """
          invoice = InvoiceService.get_invoice(db, account_id, invoice_id, lock=True)
          if invoice.status == InvoiceStatus.PAID:
               raise StateConflictError(
                    f"Invoice {invoice.invoice_number} is already paid",
                    current_status=invoice.status.value,
               )
          if due_date < invoice.invoice_date:
               raise ValidationError("due_date cannot be before invoice_date")
          invoice.due_date = due_date
          db.flush()

          logger.info("invoice_due_date_changed", invoice_id=invoice.id, due_date=due_date.isoformat())
          return invoice

     @staticmethod
     @unit_of_work()
     def delete_invoice(db: Session, account_id: int, invoice_id: int) -> None:
          """
          Delete an invoice that has no payments.

          Raises:
               StateConflictError: payments exist (paid_amount > 0)
          """
          invoice = InvoiceService.get_invoice(db, account_id, invoice_id, lock=True)
          if invoice.paid_amount > 0 or invoice.payments:
               raise StateConflictError(
                    f"Invoice {invoice.invoice_number} has {invoice.paid_amount} in payments and cannot be deleted",
                    current_status=invoice.status.value,
               )
          db.delete(invoice)
          db.flush()

          logger.info("invoice_deleted", invoice_id=invoice_id, account_id=account_id)

     # ------------------------------------------------------------------
     # Queries
     # ------------------------------------------------------------------

     @staticmethod
     def list_invoices(
          db: Session,
          account_id: int,
          status: Optional[InvoiceStatus] = None,
          customer_id: Optional[int] = None,
          job_id: Optional[int] = None,
          page: int = 1,
          page_size: int = 50,
          today: Optional[date] = None,
     ) -> Tuple[list[Invoice], int]:
          """
          Paginated invoices of an account, newest first.

          status filters on the effective status, so OVERDUE works and SENT
          excludes sent invoices that are overdue.

          Returns:
               (invoices on this page, total matching)
          """
          today = today or date.today()
          query = db.query(Invoice).filter(Invoice.account_id == account_id)

          if customer_id:
               query = query.filter(Invoice.customer_id == customer_id)

          if job_id:
               query = query.filter(Invoice.job_id == job_id)

          if status == InvoiceStatus.OVERDUE:
               query = query.filter(_overdue_clause(today))
          elif status in OVERDUE_ELIGIBLE:
               query = query.filter(Invoice.status == status, not_(_overdue_clause(today)))
          elif status is not None:
               query = query.filter(Invoice.status == status)

          total = query.count()
          offset = (page - 1) * page_size
          invoices = (
               query.order_by(Invoice.invoice_date.desc(), Invoice.id.desc())
               .offset(offset)
               .limit(page_size)
               .all()
          )
          return invoices, total

     @staticmethod
     def list_payments(
          db: Session,
          account_id: int,
          invoice_id: Optional[int] = None,
          page: int = 1,
          page_size: int = 50,
     ) -> Tuple[list[Payment], int]:
          """Payments of an account (optionally of one invoice), newest first."""
          query = db.query(Payment).filter(Payment.account_id == account_id)
          if invoice_id is not None:
               InvoiceService.get_invoice(db, account_id, invoice_id)
               query = query.filter(Payment.invoice_id == invoice_id)

          total = query.count()
          offset = (page - 1) * page_size
          payments = (
               query.order_by(Payment.payment_date.desc(), Payment.id.desc())
               .offset(offset)
               .limit(page_size)
               .all()
          )
          return payments, total

     @staticmethod
     def get_payment(db: Session, account_id: int, payment_id: int) -> Payment:
          payment = db.query(Payment).filter(
               Payment.id == payment_id,
               Payment.account_id == account_id
          ).first()
          if not payment:
               raise NotFoundError(f"Payment with ID {payment_id} not found")
          return payment

     @staticmethod
     def summarize(db: Session, account_id: int, today: Optional[date] = None) -> dict:
          """
          Calculate the account's billing summary.

          Args:
               db: SQLAlchemy database session
               account_id: ID of the account
               today: Reference date for overdue evaluation

          Returns:
               Dictionary with totals, counts and collection rate (percent)
          """
          today = today or date.today()
          invoices = db.query(Invoice).filter(Invoice.account_id == account_id).all()
          payments = db.query(Payment).filter(Payment.account_id == account_id).all()

          statuses = [effective_status(inv, today) for inv in invoices]
          total_invoiced = sum((inv.total_amount for inv in invoices), ZERO)
          total_collected = sum((p.amount for p in payments), ZERO)

          if total_invoiced > 0:
               collection_rate = quantize_money(total_collected / total_invoiced * 100)
          else:
               collection_rate = ZERO
          if payments:
               average_payment = quantize_money(total_collected / len(payments))
          else:
               average_payment = ZERO

          return {
               "account_id": account_id,
               "total_invoices": len(invoices),
               "total_invoiced": total_invoiced,
               "total_collected": total_collected,
               "total_outstanding": total_invoiced - total_collected,
               "draft_invoices": statuses.count(InvoiceStatus.DRAFT),
               "paid_invoices": statuses.count(InvoiceStatus.PAID),
               "unpaid_invoices": sum(
                    1 for s in statuses if s not in (InvoiceStatus.PAID, InvoiceStatus.OVERDUE)
               ),
               "overdue_invoices": statuses.count(InvoiceStatus.OVERDUE),
               "collection_rate": collection_rate,
               "total_payments": len(payments),
               "average_payment": average_payment,
          }

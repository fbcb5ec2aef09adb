"""
Concurrent writers against one file-backed SQLite database.

Each worker gets its own session and connection, so the version_id check,
the locked reload and the retry loop run for real.
"""
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from models import Account, Base, Customer, Invoice, Job, Payment
from services.errors import OverpaymentError
from services.invoice_service import InvoiceService

WORKERS = 4


@pytest.fixture
def file_engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def make_session(file_engine):
    return sessionmaker(bind=file_engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def billing(make_session):
    """Account, customer, job and one 405.00 draft invoice"""
    with make_session() as db:
        account = Account(owner_id=1, business_name="Rivera Plumbing", default_tax_rate=Decimal("0"))
        db.add(account)
        db.flush()
        customer = Customer(account_id=account.id, first_name="Dana", last_name="Okafor")
        db.add(customer)
        db.flush()
        job = Job(account_id=account.id, customer_id=customer.id, title="Water heater install")
        db.add(job)
        db.commit()
        invoice = InvoiceService.create_invoice(
            db,
            account_id=account.id,
            job_id=job.id,
            customer_id=customer.id,
            labor_hours="3",
            hourly_rate="85",
            material_cost="120",
            tax_rate="0.08",
            invoice_date=date(2026, 9, 1),
        )
        return {"account_id": account.id, "customer_id": customer.id, "job_id": job.id, "invoice_id": invoice.id}


def test_concurrent_payments_never_overpay(make_session, billing):
    barrier = threading.Barrier(WORKERS)

    def pay():
        db = make_session()
        try:
            barrier.wait()
            InvoiceService.record_payment(
                db, billing["account_id"], billing["invoice_id"], amount="300.00"
            )
            return "ok"
        except OverpaymentError:
            return "overpayment"
        except Exception as exc:
            return type(exc).__name__
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        results = [future.result() for future in [pool.submit(pay) for _ in range(WORKERS)]]

    assert sorted(results) == ["ok"] + ["overpayment"] * (WORKERS - 1)

    with make_session() as db:
        invoice = db.get(Invoice, billing["invoice_id"])
        payments = db.query(Payment).filter(Payment.invoice_id == invoice.id).all()
        assert invoice.paid_amount == Decimal("300.00")
        assert sum((p.amount for p in payments), Decimal("0")) == Decimal("300.00")
        assert len(payments) == 1


def test_colliding_invoice_number_is_retried(make_session, billing, monkeypatch):
    compute_number = InvoiceService.next_invoice_number
    taken = []

    def number_taken_by_another_creator(db, account_id, invoice_date):
        number = compute_number(db, account_id, invoice_date)
        if not taken:
            # Another request commits the same number first
            with make_session() as other:
                other.add(
                    Invoice(
                        account_id=account_id,
                        job_id=billing["job_id"],
                        customer_id=billing["customer_id"],
                        invoice_number=number,
                        invoice_date=invoice_date,
                        due_date=invoice_date,
                    )
                )
                other.commit()
            taken.append(number)
        return number

    monkeypatch.setattr(InvoiceService, "next_invoice_number", staticmethod(number_taken_by_another_creator))

    with make_session() as db:
        invoice = InvoiceService.create_invoice(
            db,
            account_id=billing["account_id"],
            job_id=billing["job_id"],
            customer_id=billing["customer_id"],
            material_cost="50",
            invoice_date=date(2026, 9, 1),
        )
        numbers = sorted(n for (n,) in db.query(Invoice.invoice_number).all())

    assert taken == ["INV-20260901-0002"]
    assert invoice.invoice_number == "INV-20260901-0003"
    assert numbers == ["INV-20260901-0001", "INV-20260901-0002", "INV-20260901-0003"]

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import text

from models import ImmutablePaymentError, Invoice, Payment
from services.errors import OverpaymentError, ValidationError
from services.invoice_service import InvoiceService
from services.payment_ledger import GENESIS_HASH, compute_transaction_hash, verify_ledger


@pytest.fixture
def invoice(db_session, account, customer, job):
    return InvoiceService.create_invoice(
        db_session,
        account_id=account.id,
        job_id=job.id,
        customer_id=customer.id,
        labor_hours="3",
        hourly_rate="85",
        material_cost="120",
        tax_rate="0.08",
        invoice_date=date(2026, 10, 1),
    )


def _pay(db_session, invoice, amount, **kwargs):
    return InvoiceService.record_payment(db_session, invoice.account_id, invoice.id, amount=amount, **kwargs)


def test_hash_is_deterministic_and_covers_every_field():
    created = datetime(2026, 10, 19, 12, 30, 45)
    base = compute_transaction_hash(1, 2, Decimal("10.00"), date(2026, 10, 19), created)

    assert len(base) == 64
    assert base == compute_transaction_hash(1, 2, Decimal("10"), date(2026, 10, 19), created)
    assert base != compute_transaction_hash(1, 2, Decimal("10.01"), date(2026, 10, 19), created)
    assert base != compute_transaction_hash(1, 3, Decimal("10.00"), date(2026, 10, 19), created)
    assert base != compute_transaction_hash(1, 2, Decimal("10.00"), date(2026, 10, 19), created, "abc")


def test_payments_form_a_chain(db_session, invoice):
    _, first = _pay(db_session, invoice, "100.00")
    _, second = _pay(db_session, invoice, "100.00")

    assert first.previous_hash == GENESIS_HASH
    assert second.previous_hash == first.transaction_hash
    assert first.transaction_hash != second.transaction_hash


def test_verify_passes_for_untouched_ledger(db_session, invoice):
    assert verify_ledger(invoice) == (True, "No payments recorded", 0)

    _pay(db_session, invoice, "100.00")
    updated, _ = _pay(db_session, invoice, "5.00")

    assert verify_ledger(updated) == (True, "Ledger verification passed", 2)


def test_verify_detects_tampering(db_session, invoice):
    _, payment = _pay(db_session, invoice, "100.00")

    db_session.execute(text("UPDATE payments SET amount = 1 WHERE id = :id"), {"id": payment.id})
    db_session.commit()
    db_session.expire_all()

    reloaded = db_session.get(Invoice, invoice.id)
    verified, message, _ = verify_ledger(reloaded)
    assert verified is False
    assert "Hash mismatch" in message


def test_payments_cannot_be_updated(db_session, invoice):
    _, payment = _pay(db_session, invoice, "100.00")

    payment.amount = Decimal("1.00")
    with pytest.raises(ImmutablePaymentError):
        db_session.flush()
    db_session.rollback()


def test_payments_cannot_be_deleted(db_session, invoice):
    _, payment = _pay(db_session, invoice, "100.00")

    db_session.delete(payment)
    with pytest.raises(ImmutablePaymentError):
        db_session.flush()
    db_session.rollback()


@pytest.mark.parametrize("amount", ["0", "0.00", "-5.00", "10.005", "abc"])
def test_invalid_amounts_are_rejected(db_session, invoice, amount):
    with pytest.raises(ValidationError):
        _pay(db_session, invoice, amount)
    assert db_session.query(Payment).count() == 0


def test_float_amounts_are_rejected(db_session, invoice):
    with pytest.raises(ValidationError):
        _pay(db_session, invoice, 100.0)


def test_overpayment_is_never_capped(db_session, invoice):
    with pytest.raises(OverpaymentError):
        _pay(db_session, invoice, "405.01")
    assert db_session.query(Payment).count() == 0


def test_blank_method_defaults_to_other(db_session, invoice):
    _, payment = _pay(db_session, invoice, "1.00", method="  ")
    assert payment.method == "other"

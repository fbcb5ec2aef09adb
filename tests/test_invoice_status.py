from datetime import date
from decimal import Decimal

import pytest

from models import Invoice, InvoiceStatus
from services.errors import StateConflictError
from services.invoice_status import (
    TRANSITIONS,
    apply_paid_if_settled,
    can_transition,
    effective_status,
    ensure_editable,
    ensure_transition,
    is_overdue,
)

TODAY = date(2026, 10, 19)


def _invoice(status=InvoiceStatus.SENT, due=date(2026, 10, 1), total="405.00", paid="0.00"):
    return Invoice(
        invoice_number="INV-20260901-0001",
        invoice_date=date(2026, 9, 1),
        due_date=due,
        total_amount=Decimal(total),
        paid_amount=Decimal(paid),
        status=status,
    )


@pytest.mark.parametrize(
    "current,target",
    [
        (InvoiceStatus.DRAFT, InvoiceStatus.SENT),
        (InvoiceStatus.DRAFT, InvoiceStatus.PAID),
        (InvoiceStatus.SENT, InvoiceStatus.VIEWED),
        (InvoiceStatus.SENT, InvoiceStatus.ACCEPTED),
        (InvoiceStatus.VIEWED, InvoiceStatus.ACCEPTED),
        (InvoiceStatus.ACCEPTED, InvoiceStatus.PAID),
    ],
)
def test_allowed_transitions(current, target):
    assert can_transition(current, target)


@pytest.mark.parametrize(
    "current,target",
    [
        (InvoiceStatus.DRAFT, InvoiceStatus.VIEWED),
        (InvoiceStatus.DRAFT, InvoiceStatus.ACCEPTED),
        (InvoiceStatus.SENT, InvoiceStatus.SENT),
        (InvoiceStatus.VIEWED, InvoiceStatus.VIEWED),
        (InvoiceStatus.ACCEPTED, InvoiceStatus.SENT),
        (InvoiceStatus.PAID, InvoiceStatus.SENT),
        (InvoiceStatus.PAID, InvoiceStatus.DRAFT),
    ],
)
def test_rejected_transitions(current, target):
    assert not can_transition(current, target)


def test_paid_is_terminal_and_overdue_is_never_a_target():
    assert TRANSITIONS[InvoiceStatus.PAID] == frozenset()
    assert all(InvoiceStatus.OVERDUE not in targets for targets in TRANSITIONS.values())


def test_ensure_transition_reports_current_status():
    invoice = _invoice(status=InvoiceStatus.PAID)
    with pytest.raises(StateConflictError) as exc_info:
        ensure_transition(invoice, InvoiceStatus.SENT)
    assert exc_info.value.current_status == "paid"


def test_only_drafts_are_editable():
    ensure_editable(_invoice(status=InvoiceStatus.DRAFT))
    for status in (InvoiceStatus.SENT, InvoiceStatus.VIEWED, InvoiceStatus.ACCEPTED, InvoiceStatus.PAID):
        with pytest.raises(StateConflictError):
            ensure_editable(_invoice(status=status))


@pytest.mark.parametrize("status", [InvoiceStatus.SENT, InvoiceStatus.VIEWED, InvoiceStatus.ACCEPTED])
def test_past_due_unpaid_invoices_read_as_overdue(status):
    invoice = _invoice(status=status)
    assert is_overdue(invoice, TODAY)
    assert effective_status(invoice, TODAY) == InvoiceStatus.OVERDUE
    # Never persisted
    assert invoice.status == status


def test_drafts_and_paid_invoices_are_never_overdue():
    assert effective_status(_invoice(status=InvoiceStatus.DRAFT), TODAY) == InvoiceStatus.DRAFT
    paid = _invoice(status=InvoiceStatus.PAID, paid="405.00")
    assert effective_status(paid, TODAY) == InvoiceStatus.PAID


def test_due_today_is_not_overdue():
    assert effective_status(_invoice(due=TODAY), TODAY) == InvoiceStatus.SENT


def test_apply_paid_if_settled():
    invoice = _invoice(paid="405.00")
    assert apply_paid_if_settled(invoice) is True
    assert invoice.status == InvoiceStatus.PAID
    assert apply_paid_if_settled(invoice) is False

    partial = _invoice(paid="100.00")
    assert apply_paid_if_settled(partial) is False
    assert partial.status == InvoiceStatus.SENT


def test_zero_total_invoice_is_not_settled_without_payment():
    invoice = _invoice(status=InvoiceStatus.DRAFT, total="0.00", paid="0.00")
    assert apply_paid_if_settled(invoice) is False
    assert invoice.status == InvoiceStatus.DRAFT

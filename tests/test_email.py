import base64
from decimal import Decimal

import pytest
import requests

from utils import email as invoice_email


class FakeResponse:
    def __init__(self, status_code, text=""):
        self.status_code = status_code
        self.text = text


def test_requires_api_key(monkeypatch):
    monkeypatch.setattr(invoice_email, "BREVO_KEY", None)
    with pytest.raises(invoice_email.EmailDeliveryError):
        invoice_email.send_invoice_email("a@example.com", "A", "INV-20261019-0001", Decimal("10.00"))


def test_posts_invoice_with_attachment(monkeypatch):
    calls = []

    def fake_post(url, headers=None, json=None, timeout=None):
        calls.append((url, headers, json))
        return FakeResponse(201)

    monkeypatch.setattr(invoice_email, "BREVO_KEY", "key-123")
    monkeypatch.setattr(invoice_email.requests, "post", fake_post)

    invoice_email.send_invoice_email(
        "dana@example.com",
        "Dana Okafor",
        "INV-20261019-0001",
        Decimal("1405.00"),
        pdf_bytes=b"%PDF",
        business_name="Rivera Plumbing",
    )

    url, headers, payload = calls[0]
    assert url == invoice_email.BREVO_URL
    assert headers["api-key"] == "key-123"
    assert payload["to"] == [{"email": "dana@example.com", "name": "Dana Okafor"}]
    assert payload["subject"] == "Invoice INV-20261019-0001 from Rivera Plumbing"
    assert "$1,405.00" in payload["htmlContent"]
    assert payload["attachment"][0]["content"] == base64.b64encode(b"%PDF").decode()


def test_rejected_message_raises(monkeypatch):
    monkeypatch.setattr(invoice_email, "BREVO_KEY", "key-123")
    monkeypatch.setattr(invoice_email.requests, "post", lambda *a, **k: FakeResponse(401, "unauthorized"))

    with pytest.raises(invoice_email.EmailDeliveryError, match="unauthorized"):
        invoice_email.send_invoice_email("a@example.com", "A", "INV-1", Decimal("1.00"))


def test_network_errors_are_wrapped(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.ConnectionError("no route")

    monkeypatch.setattr(invoice_email, "BREVO_KEY", "key-123")
    monkeypatch.setattr(invoice_email.requests, "post", boom)

    with pytest.raises(invoice_email.EmailDeliveryError, match="no route"):
        invoice_email.send_invoice_email("a@example.com", "A", "INV-1", Decimal("1.00"))

import smtplib

import pytest

from telus_umrah.core.errors import InvoiceGenerationError
from telus_umrah.services import booking_service, email_service


class FakeSMTP:
    sent = []
    fail_with = None

    def __init__(self, host, port, timeout=None):
        self.host = host

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, username, password):
        pass

    def send_message(self, msg):
        if FakeSMTP.fail_with:
            raise FakeSMTP.fail_with
        FakeSMTP.sent.append(msg)


@pytest.fixture
def smtp(monkeypatch):
    FakeSMTP.sent = []
    FakeSMTP.fail_with = None
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


@pytest.fixture
def booking(db, hotel, hotel_payload):
    return booking_service.create_booking(db, "hotel", hotel_payload)


def _send(db, booking, number="HTL-123456-ABCD"):
    return email_service.send_invoice_email(
        db,
        to=booking["customerEmail"],
        customer_name=booking["customerName"],
        invoice_number=number,
        booking_type="hotel",
        invoice_url=f"http://localhost:8000/api/v1/invoices/{booking['_id']}?type=hotel",
        booking_id=booking["_id"],
    )


def test_invoice_email_carries_pdf(db, booking, smtp):
    assert _send(db, booking) == {"success": True}
    msg = smtp.sent[0]
    assert msg["To"] == "ali.khan@example.com"
    assert msg["Subject"] == "Invoice for Your Hotel Booking - HTL-123456-ABCD"
    html = msg.get_body(preferencelist=("html",)).get_content()
    assert "Download Invoice (PDF)" in html
    assert f"/api/v1/invoices/{booking['_id']}?type=hotel" in html
    attachments = list(msg.iter_attachments())
    assert [a.get_filename() for a in attachments] == ["invoice-HTL-123456-ABCD.pdf"]
    assert attachments[0].get_content().startswith(b"%PDF")


def test_render_failure_sends_without_attachment(db, booking, smtp, monkeypatch):
    def broken(data):
        raise InvoiceGenerationError("Failed to generate PDF: boom")

    monkeypatch.setattr(email_service, "render_document", broken)
    assert _send(db, booking) == {"success": True}
    assert list(smtp.sent[0].iter_attachments()) == []


def test_missing_booking_still_sends_link(db, smtp):
    result = email_service.send_invoice_email(
        db,
        to="someone@example.com",
        customer_name="Someone",
        invoice_number="PKG-000001-0000",
        booking_type="package",
        invoice_url="http://localhost:8000/api/v1/invoices/missing?type=package",
        booking_id="missing",
    )
    assert result == {"success": True}
    assert list(smtp.sent[0].iter_attachments()) == []


def test_send_failure_is_reported_not_raised(db, booking, smtp):
    smtp.fail_with = smtplib.SMTPException("relay refused")
    assert _send(db, booking) == {"success": False, "error": "relay refused"}
    assert smtp.sent == []


def test_customer_name_is_escaped_in_html():
    html = email_service.invoice_email_html("<b>Ali</b>", "HTL-1", "http://x/?a=1&b=2")
    assert "&lt;b&gt;Ali&lt;/b&gt;" in html
    assert 'href="http://x/?a=1&amp;b=2"' in html


def test_sendgrid_is_used_when_configured(monkeypatch):
    calls = []

    class FakeResponse:
        status_code = 202
        text = ""

    def fake_post(url, json, headers, timeout):
        calls.append(json)
        return FakeResponse()

    monkeypatch.setattr(email_service.settings, "SENDGRID_API_KEY", "SG.test")
    monkeypatch.setattr(email_service.requests, "post", fake_post)
    email_service.send_email("a@example.com", "Hi", "text", [("x.pdf", b"%PDF", "application/pdf")], html_body="<p>Hi</p>")
    payload = calls[0]
    assert [c["type"] for c in payload["content"]] == ["text/plain", "text/html"]
    assert payload["attachments"][0]["filename"] == "x.pdf"


def test_custom_request_form_is_attached_under_its_own_name(db, custom_payload, smtp):
    created = booking_service.create_booking(db, "custom", custom_payload)
    reference = f"REQ-{created['_id'][-6:]}"
    result = email_service.send_invoice_email(
        db,
        to=created["email"],
        customer_name=created["name"],
        invoice_number=reference,
        booking_type="custom",
        invoice_url=f"http://localhost:8000/api/v1/invoices/{created['_id']}?type=custom",
        booking_id=created["_id"],
    )
    assert result == {"success": True}
    msg = smtp.sent[0]
    assert msg["Subject"] == f"Invoice for Your Custom Umrah Request - {reference}"
    assert [a.get_filename() for a in msg.iter_attachments()] == [f"request-form-{created['_id']}.pdf"]

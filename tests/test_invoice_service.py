import re
from datetime import datetime, timezone

from telus_umrah.services import booking_service, email_service, invoice_service


def test_hotel_total_falls_back_to_catalogue_estimate(db, hotel, hotel_payload):
    created = booking_service.create_booking(db, "hotel", hotel_payload)
    data = invoice_service.build_invoice_data(db, "hotel", created["_id"])
    # deluxe 30000 x 4 nights x 2 rooms + meals 5000 x 4 x 2 + transport 8000
    assert data.total_amount == 30000 * 4 * 2 + 5000 * 4 * 2 + 8000
    assert data.item_name == "Makkah Clock Royal Tower"
    assert data.additional_services == ["Meals", "Transport"]


def test_stored_total_wins(db, hotel, hotel_payload):
    created = booking_service.create_booking(db, "hotel", {**hotel_payload, "totalAmount": 99000})
    assert invoice_service.build_invoice_data(db, "hotel", created["_id"]).total_amount == 99000


def test_hotel_without_catalogue_row_or_name_is_generic(db, hotel_payload):
    created = booking_service.create_booking(db, "hotel", {**hotel_payload, "hotelId": "gone"})
    data = invoice_service.build_invoice_data(db, "hotel", created["_id"])
    assert data.item_name == "Hotel Booking"
    assert data.total_amount == 0


def test_package_estimate_and_family_head(db, umrah_package, package_payload):
    created = booking_service.create_booking(db, "package", package_payload)
    data = invoice_service.build_invoice_data(db, "package", created["_id"])
    # 3 travelers: package price + visa + eSIM per person
    assert data.total_amount == 3 * (250000 + 50000 + 5000)
    assert data.customer_name == "Ahmed Raza"
    assert data.item_name == "15 Days Economy Umrah"
    assert data.additional_services == ["Umrah Visa", "eSIM"]


def test_selected_services_name_the_add_ons(db, umrah_package, package_payload):
    services = [{"serviceId": "s1", "serviceName": "Airport Pickup", "price": 4000}]
    created = booking_service.create_booking(db, "package", {**package_payload, "selectedServices": services})
    assert invoice_service.build_invoice_data(db, "package", created["_id"]).additional_services == ["Airport Pickup"]


def test_invoice_date_is_taken_from_caller(db, custom_payload):
    created = booking_service.create_booking(db, "custom", custom_payload)
    when = datetime(2025, 1, 2, tzinfo=timezone.utc)
    data = invoice_service.build_invoice_data(db, "custom", created["_id"], invoice_number="CUS-1", invoice_date=when)
    assert data.invoice_date == when
    assert data.invoice_number == "CUS-1"
    assert data.route_from == "LHE"
    assert data.additional_services == ["Transport"]
    assert invoice_service.render_document(data).startswith(b"%PDF")


def test_unknown_booking_has_no_invoice_data(db):
    assert invoice_service.build_invoice_data(db, "hotel", "nope") is None
    assert invoice_service.ensure_invoice(db, "hotel", "nope") is None


def test_ensure_invoice_is_idempotent(db, hotel_payload):
    created = booking_service.create_booking(db, "hotel", hotel_payload)
    first = invoice_service.ensure_invoice(db, "hotel", created["_id"])
    number, url = first.invoice_number, first.invoice_url
    assert re.match(r"^HTL-\d{6}-[0-9A-F]{4}$", number)
    assert url.endswith(f"/api/v1/invoices/{created['_id']}?type=hotel")
    assert first.invoice_generated is True
    again = invoice_service.ensure_invoice(db, "hotel", created["_id"])
    assert (again.invoice_number, again.invoice_url) == (number, url)


def test_issue_invoice_marks_sent_on_success(db, hotel_payload, monkeypatch):
    sent = []
    monkeypatch.setattr(email_service, "send_invoice_email", lambda db, **kw: sent.append(kw) or {"success": True})
    created = booking_service.create_booking(db, "hotel", hotel_payload)
    assert invoice_service.issue_invoice(db, "hotel", created["_id"], send=True) == {"success": True, "sent": True}
    assert sent[0]["to"] == "ali.khan@example.com"
    assert booking_service.get_booking(db, "hotel", created["_id"])["invoiceSent"] is True


def test_issue_invoice_reports_dispatch_failure(db, hotel_payload, monkeypatch):
    monkeypatch.setattr(email_service, "send_invoice_email", lambda db, **kw: {"success": False, "error": "down"})
    created = booking_service.create_booking(db, "hotel", hotel_payload)
    assert invoice_service.issue_invoice(db, "hotel", created["_id"], send=True) == {"success": False, "error": "down"}
    out = booking_service.get_booking(db, "hotel", created["_id"])
    assert out["invoiceGenerated"] is True
    assert out["invoiceSent"] is False


def test_issue_invoice_respects_auto_send_setting(db, hotel_payload):
    created = booking_service.create_booking(db, "hotel", hotel_payload)
    assert invoice_service.issue_invoice(db, "hotel", created["_id"]) == {"success": True, "sent": False}


def test_catalogue_hotel_name_comes_before_stored_name(db, hotel, hotel_payload):
    listed = booking_service.create_booking(db, "hotel", {**hotel_payload, "hotelName": "Booked As"})
    orphan = booking_service.create_booking(db, "hotel", {**hotel_payload, "hotelId": "gone", "hotelName": "Booked As"})
    assert invoice_service.build_invoice_data(db, "hotel", listed["_id"]).item_name == "Makkah Clock Royal Tower"
    assert invoice_service.build_invoice_data(db, "hotel", orphan["_id"]).item_name == "Booked As"


def test_custom_request_carries_request_reference(db, custom_payload):
    created = booking_service.create_booking(db, "custom", custom_payload)
    data = invoice_service.build_invoice_data(db, "custom", created["_id"])
    assert data.invoice_number == f"REQ-{created['_id'][-6:]}"
    assert invoice_service.document_filename("custom", created["_id"], data.invoice_number) == f"request-form-{created['_id']}.pdf"


def test_sending_custom_request_does_not_number_it(db, custom_payload, monkeypatch):
    sent = []
    monkeypatch.setattr(email_service, "send_invoice_email", lambda db, **kw: sent.append(kw) or {"success": True})
    created = booking_service.create_booking(db, "custom", custom_payload)
    assert invoice_service.issue_invoice(db, "custom", created["_id"], send=True) == {"success": True, "sent": True}
    assert sent[0]["invoice_number"] == f"REQ-{created['_id'][-6:]}"
    assert sent[0]["to"] == "bilal@example.com"
    assert sent[0]["invoice_url"].endswith(f"/api/v1/invoices/{created['_id']}?type=custom")
    assert booking_service.get_booking(db, "custom", created["_id"]) == created

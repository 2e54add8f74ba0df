"""Sanitizer rules: strict top-level fields, lenient nested collections."""

import pytest

from telus_umrah.core.errors import BookingValidationError
from telus_umrah.services.sanitizer import (
    sanitize_custom_umrah_request,
    sanitize_hotel_booking,
    sanitize_package_booking,
)


def _error(fn, data) -> BookingValidationError:
    with pytest.raises(BookingValidationError) as exc:
        fn(data)
    return exc.value


def test_hotel_booking_is_normalised(hotel_payload):
    out = sanitize_hotel_booking(hotel_payload)
    assert out["customer_email"] == "ali.khan@example.com"
    assert out["bed_type"] == "double"
    assert out["room_type"] == "deluxe"
    assert out["rooms"] == 2
    assert out["transport"] is True
    assert out["status"] == "pending"
    assert out["payment_status"] == "pending"
    assert out["paid_amount"] == 0
    assert out["check_in_date"].isoformat().startswith("2025-03-01")
    assert "invoice_number" not in out


@pytest.mark.parametrize(
    "field, value, kind",
    [
        ("customerName", "   ", "missing"),
        ("customerEmail", "not-an-email", "invalid"),
        ("rooms", 0, "range"),
        ("adults", "two", "invalid"),
        ("checkInDate", "someday", "invalid"),
    ],
)
def test_hotel_booking_rejects_first_bad_field(hotel_payload, field, value, kind):
    err = _error(sanitize_hotel_booking, {**hotel_payload, field: value})
    assert err.kind == kind
    assert err.field == field
    assert err.to_dict() == {"message": err.message, "field": field, "kind": kind}


def test_hotel_check_out_must_follow_check_in(hotel_payload):
    err = _error(sanitize_hotel_booking, {**hotel_payload, "checkOutDate": "2025-03-01"})
    assert err.kind == "order"
    assert err.field == "checkOutDate"


def test_non_object_input_is_invalid():
    assert _error(sanitize_hotel_booking, ["not", "a", "dict"]).kind == "invalid"


def test_child_ages_drop_bad_entries(hotel_payload):
    out = sanitize_hotel_booking({**hotel_payload, "childAges": ["3", "x", -1, None, 5.5]})
    assert out["child_ages"] == [3, 5.5]


def test_status_is_permissive(hotel_payload):
    out = sanitize_hotel_booking({**hotel_payload, "status": "on-hold"})
    assert out["status"] == "on-hold"


def test_paid_above_total_is_kept(hotel_payload):
    out = sanitize_hotel_booking({**hotel_payload, "totalAmount": 1000, "paidAmount": "1500"})
    assert out["total_amount"] == 1000
    assert out["paid_amount"] == 1500


def test_negative_amount_is_rejected(hotel_payload):
    err = _error(sanitize_hotel_booking, {**hotel_payload, "totalAmount": -5})
    assert (err.kind, err.field) == ("range", "totalAmount")


def test_invoice_fields_pass_through_when_present(hotel_payload):
    out = sanitize_hotel_booking({**hotel_payload, "invoiceNumber": "HTL-123456-00AB", "invoiceSent": "yes"})
    assert out["invoice_number"] == "HTL-123456-00AB"
    assert out["invoice_sent"] is True
    assert "invoice_url" not in out


def test_selected_services_without_name_are_dropped(hotel_payload):
    services = [{"serviceId": "s1", "serviceName": "Ziyarat Tour", "price": "15000"}, {"serviceId": "s2"}, "junk"]
    out = sanitize_hotel_booking({**hotel_payload, "selectedServices": services})
    assert out["selected_services"] == [{"serviceId": "s1", "serviceName": "Ziyarat Tour", "price": 15000}]


def test_package_customer_comes_from_family_head(package_payload):
    out = sanitize_package_booking(package_payload)
    assert out["customer_name"] == "Ahmed Raza"
    assert out["customer_phone"] == "+92 321 7654321"
    assert out["customer_nationality"] == "Pakistani"
    assert out["travelers"] == {"adults": 2, "children": 1, "childAges": [6]}
    assert out["umrah_visa"] is True
    assert out["zaiarat"] is False
    assert out["check_in_date"] is None


def test_package_explicit_customer_fields_win(package_payload):
    out = sanitize_package_booking({**package_payload, "customerName": "Booking Agent", "customerPhone": "042111"})
    assert out["customer_name"] == "Booking Agent"
    assert out["customer_phone"] == "042111"


def test_package_roster_entries_without_name_are_dropped(package_payload):
    adults = package_payload["adults"] + [{"gender": "male"}, {"name": "  "}, 42]
    out = sanitize_package_booking({**package_payload, "adults": adults})
    assert [a["name"] for a in out["adults"]] == ["Sara Raza", "Ahmed Raza"]
    assert out["adults"][1]["isHead"] is True


def test_package_without_any_name_is_rejected(package_payload):
    err = _error(sanitize_package_booking, {**package_payload, "adults": []})
    assert (err.kind, err.field) == ("missing", "customerName")


def test_package_traveler_counts_are_validated(package_payload):
    err = _error(sanitize_package_booking, {**package_payload, "travelers": {"adults": 0}})
    assert (err.kind, err.field) == ("range", "travelers.adults")


def test_package_dates_are_ordered_when_both_present(package_payload):
    err = _error(sanitize_package_booking, {**package_payload, "checkInDate": "2025-05-10", "checkOutDate": "2025-05-01"})
    assert err.kind == "order"


def test_custom_request_keeps_only_complete_hotels(custom_payload):
    out = sanitize_custom_umrah_request(custom_payload)
    assert out["from_city"] == "LHE"
    assert out["to_city"] == "JED"
    assert len(out["hotels"]) == 1
    assert out["hotels"][0]["hotel"] == "Hilton Suites"
    assert out["return_from"] is None


def test_custom_request_needs_a_complete_hotel(custom_payload):
    err = _error(sanitize_custom_umrah_request, {**custom_payload, "hotels": [{"city": "Makkah"}]})
    assert (err.kind, err.field) == ("missing", "hotels")


def test_custom_request_requires_adults(custom_payload):
    data = dict(custom_payload)
    del data["adults"]
    err = _error(sanitize_custom_umrah_request, data)
    assert (err.kind, err.field) == ("missing", "adults")


def test_custom_request_return_cities_only_when_flagged(custom_payload):
    data = {**custom_payload, "returnFrom": "MED", "returnTo": "KHI"}
    assert sanitize_custom_umrah_request(data)["return_to"] is None
    out = sanitize_custom_umrah_request({**data, "differentReturnCity": "true"})
    assert (out["return_from"], out["return_to"]) == ("MED", "KHI")


@pytest.mark.parametrize("return_date", ["2025-04-01", "2025-03-20"])
def test_custom_return_must_follow_departure(custom_payload, return_date):
    err = _error(sanitize_custom_umrah_request, {**custom_payload, "returnDate": return_date})
    assert (err.kind, err.field) == ("order", "returnDate")


def test_hotel_preference_missing_bed_type_is_dropped(custom_payload):
    good = custom_payload["hotels"][0]
    no_bed = {k: v for k, v in good.items() if k != "bedType"}
    out = sanitize_custom_umrah_request({**custom_payload, "hotels": [good, no_bed]})
    assert out["hotels"] == [good]

"""Validate and coerce raw booking input into the shape the models store.

Top-level required fields are strict: the first bad one raises
BookingValidationError. Nested collections are lenient: malformed entries are
dropped and the rest of the record goes through.
"""
from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import datetime

import structlog

from telus_umrah.core.errors import BookingValidationError
from telus_umrah.services.normalize import as_bool, parse_datetime, parse_number, pick, snake_case

log = structlog.get_logger(__name__)

_REQUIRED = object()

HOTEL_PREFERENCE_FIELDS = ("city", "hotel", "hotelClass", "stayDuration", "bedType")
GENDERS = ("male", "female", "")
# Fields an invoice-only update may touch without re-sanitizing the record.
INVOICE_FIELDS = {"invoiceGenerated": "invoice_generated", "invoiceSent": "invoice_sent",
                  "invoiceNumber": "invoice_number", "invoiceUrl": "invoice_url"}


# -------------------------
# Scalars
# -------------------------
def _required_str(data: Mapping, key: str, label: str | None = None) -> str:
    value = pick(data, key)
    if not isinstance(value, str) or not value.strip():
        raise BookingValidationError("missing", key, f"{label or key} is required")
    return value.strip()


def _optional_str(data: Mapping, key: str) -> str | None:
    value = pick(data, key)
    if value is None or isinstance(value, (Mapping, list)):
        return None
    text = str(value).strip()
    return text or None


def _email(data: Mapping, key: str) -> str:
    email = _required_str(data, key, "Email").lower()
    if "@" not in email:
        raise BookingValidationError("invalid", key, "A valid email is required")
    return email


def _number(data: Mapping, key: str, minimum: int, default=_REQUIRED, field: str | None = None) -> int:
    field = field or key
    value = pick(data, key)
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is _REQUIRED:
            raise BookingValidationError("missing", field, f"{field} is required")
        return default
    n = parse_number(value)
    if math.isnan(n) or not math.isfinite(n) or not n.is_integer():
        raise BookingValidationError("invalid", field, f"{field} must be a whole number")
    if n < minimum:
        raise BookingValidationError("range", field, f"{field} must be at least {minimum}")
    return int(n)


def _amount(data: Mapping, key: str, default=None):
    value = pick(data, key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    n = parse_number(value)
    if not math.isfinite(n):
        raise BookingValidationError("invalid", key, f"{key} must be a number")
    if n < 0:
        raise BookingValidationError("range", key, f"{key} cannot be negative")
    return int(n) if n.is_integer() else n


def _date(data: Mapping, key: str, required: bool = True) -> datetime | None:
    value = pick(data, key)
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise BookingValidationError("missing", key, f"{key} is required")
        return None
    dt = parse_datetime(value)
    if dt is None:
        raise BookingValidationError("invalid", key, f"{key} is not a valid date")
    return dt


def _check_order(start: datetime | None, end: datetime | None, start_key: str, end_key: str) -> None:
    if start is not None and end is not None and end <= start:
        raise BookingValidationError("order", end_key, f"{end_key} must be after {start_key}")


# -------------------------
# Nested collections (lenient)
# -------------------------
def _child_ages(value) -> list:
    if not isinstance(value, list):
        return []
    ages = []
    for raw in value:
        n = parse_number(raw)
        if math.isfinite(n) and n >= 0:
            ages.append(int(n) if n.is_integer() else n)
    return ages


def _hotel_preferences(value) -> list[dict]:
    if not isinstance(value, list):
        return []
    out = []
    for raw in value:
        if not isinstance(raw, Mapping):
            continue
        entry = {}
        for key in HOTEL_PREFERENCE_FIELDS:
            v = raw.get(key)
            text = "" if v is None or isinstance(v, (Mapping, list)) else str(v).strip()
            if not text:
                break
            entry[key] = text
        else:
            out.append(entry)
    return out


def _people(value) -> list[dict]:
    if not isinstance(value, list):
        return []
    out = []
    for raw in value:
        if not isinstance(raw, Mapping):
            continue
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            continue
        gender = str(raw.get("gender") or "").strip().lower()
        age = parse_number(raw.get("age"))
        out.append({
            "name": name.strip(),
            "gender": gender if gender in GENDERS else "",
            "nationality": _optional_str(raw, "nationality"),
            "passportNumber": _optional_str(raw, "passportNumber"),
            "age": (int(age) if age.is_integer() else age) if math.isfinite(age) and age >= 0 else None,
            "phone": _optional_str(raw, "phone"),
            "isHead": as_bool(raw.get("isHead")),
        })
    return out


def _selected_services(value) -> list[dict]:
    if not isinstance(value, list):
        return []
    out = []
    for raw in value:
        if not isinstance(raw, Mapping):
            continue
        name = raw.get("serviceName")
        if not isinstance(name, str) or not name.strip():
            continue
        price = parse_number(raw.get("price"))
        out.append({
            "serviceId": _optional_str(raw, "serviceId") or "",
            "serviceName": name.strip(),
            "price": (int(price) if price.is_integer() else price) if math.isfinite(price) else None,
        })
    return out


def family_head(adults: list[dict]) -> dict | None:
    for person in adults:
        if person.get("isHead"):
            return person
    return adults[0] if adults else None


# -------------------------
# Shared tail: status, notes, payment, invoice
# -------------------------
def _common(data: Mapping) -> dict:
    status = pick(data, "status")
    out = {
        "status": str(status).strip() if status is not None and str(status).strip() else "pending",
        "notes": _optional_str(data, "notes"),
        "selected_services": _selected_services(pick(data, "selectedServices")),
        "total_amount": _amount(data, "totalAmount"),
        "paid_amount": _amount(data, "paidAmount", default=0),
        "payment_status": _optional_str(data, "paymentStatus") or "pending",
        "payment_method": _optional_str(data, "paymentMethod"),
    }
    total, paid = out["total_amount"], out["paid_amount"]
    if total is not None and paid > total:
        # Not enforced, only logged.
        log.warning("booking.paid_exceeds_total", total_amount=total, paid_amount=paid)
    for key, attr in INVOICE_FIELDS.items():
        if pick(data, key) is None:
            continue
        if attr in ("invoice_generated", "invoice_sent"):
            out[attr] = as_bool(pick(data, key))
        else:
            out[attr] = _optional_str(data, key)
    return out


def _flags(data: Mapping, *names: str) -> dict:
    return {snake_case(name): as_bool(pick(data, name)) for name in names}


# -------------------------
# Public sanitizers
# -------------------------
def sanitize_hotel_booking(data: Mapping) -> dict:
    if not isinstance(data, Mapping):
        raise BookingValidationError("invalid", "", "Booking data must be an object")
    out = {
        "hotel_id": _required_str(data, "hotelId", "Hotel ID"),
        "hotel_name": _optional_str(data, "hotelName"),
        "customer_name": _required_str(data, "customerName", "Customer name"),
        "customer_email": _email(data, "customerEmail"),
        "customer_phone": _required_str(data, "customerPhone", "Customer phone"),
        "customer_nationality": _optional_str(data, "customerNationality"),
        "check_in_date": _date(data, "checkInDate"),
        "check_out_date": _date(data, "checkOutDate"),
    }
    _check_order(out["check_in_date"], out["check_out_date"], "checkInDate", "checkOutDate")
    bed_type = _optional_str(data, "bedType")
    out.update({
        "rooms": _number(data, "rooms", 1, default=1),
        "adults": _number(data, "adults", 1, default=1),
        "children": _number(data, "children", 0, default=0),
        "child_ages": _child_ages(pick(data, "childAges")),
        "bed_type": bed_type.lower() if bed_type else None,
        "room_type": (_optional_str(data, "roomType") or "standard").lower(),
        "meals": as_bool(pick(data, "meals")),
        "transport": as_bool(pick(data, "transport")),
    })
    out.update(_common(data))
    return out


def sanitize_package_booking(data: Mapping) -> dict:
    if not isinstance(data, Mapping):
        raise BookingValidationError("invalid", "", "Booking data must be an object")
    package_id = _required_str(data, "packageId", "Package ID")

    adults = _people(data.get("adults"))
    children = _people(data.get("children"))
    infants = _people(data.get("infants"))
    head = family_head(adults) or {}

    # Explicit customer fields win; the family head fills the gaps.
    name_source = {"customerName": pick(data, "customerName") or head.get("name")}
    phone_source = {"customerPhone": pick(data, "customerPhone") or head.get("phone")}
    out = {
        "package_id": package_id,
        "customer_name": _required_str(name_source, "customerName", "Customer name"),
        "customer_email": _email(data, "customerEmail"),
        "customer_phone": _required_str(phone_source, "customerPhone", "Customer phone"),
        "customer_nationality": _optional_str(data, "customerNationality") or head.get("nationality"),
    }

    counts = dict(data.get("travelers")) if isinstance(data.get("travelers"), Mapping) else {}
    for key in ("adults", "children", "childAges"):
        if counts.get(key) is None and not isinstance(data.get(key), list):
            counts[key] = data.get(key)
    child_ages = _child_ages(counts.get("childAges")) or [c["age"] for c in children if c["age"] is not None]
    out["travelers"] = {
        "adults": _number(counts, "adults", 1, default=len(adults) or 1, field="travelers.adults"),
        "children": _number(counts, "children", 0, default=len(children), field="travelers.children"),
        "childAges": child_ages,
    }
    out.update({
        "adults": adults,
        "children": children,
        "infants": infants,
        "rooms": _number(data, "rooms", 1, default=1),
        "check_in_date": _date(data, "checkInDate", required=False),
        "check_out_date": _date(data, "checkOutDate", required=False),
    })
    _check_order(out["check_in_date"], out["check_out_date"], "checkInDate", "checkOutDate")
    out.update(_flags(data, "umrahVisa", "transport", "zaiarat", "meals", "esim"))
    out.update(_common(data))
    return out


def sanitize_custom_umrah_request(data: Mapping) -> dict:
    if not isinstance(data, Mapping):
        raise BookingValidationError("invalid", "", "Request data must be an object")
    out = {
        "name": _required_str(data, "name", "Name"),
        "email": _email(data, "email"),
        "phone": _required_str(data, "phone", "Phone"),
        "nationality": _required_str(data, "nationality", "Nationality"),
        "from_city": _required_str(data, "from", "Departure city"),
        "to_city": _required_str(data, "to", "Destination"),
        "depart_date": _date(data, "departDate"),
        "return_date": _date(data, "returnDate"),
    }
    _check_order(out["depart_date"], out["return_date"], "departDate", "returnDate")
    different_return_city = as_bool(pick(data, "differentReturnCity"))
    out.update({
        "airline": _required_str(data, "airline", "Airline"),
        "airline_class": _required_str(data, "airlineClass", "Airline class"),
        "different_return_city": different_return_city,
        "return_from": _optional_str(data, "returnFrom") if different_return_city else None,
        "return_to": _optional_str(data, "returnTo") if different_return_city else None,
        "adults": _number(data, "adults", 1),
        "children": _number(data, "children", 0, default=0),
        "child_ages": _child_ages(pick(data, "childAges")),
        "rooms": _number(data, "rooms", 1),
    })
    out.update(_flags(data, "umrahVisa", "transport", "zaiarat", "meals", "esim"))

    hotels = _hotel_preferences(pick(data, "hotels"))
    if not hotels:
        raise BookingValidationError("missing", "hotels", "At least one hotel is required")
    out["hotels"] = hotels
    out.update(_common(data))
    return out

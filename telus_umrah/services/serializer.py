"""Turn stored booking records into plain JSON-safe dicts.

Accepts ORM rows or mappings (camelCase or snake_case keys). Every serializer
returns None instead of raising, so list endpoints can drop corrupt rows.
"""
from __future__ import annotations

from collections.abc import Mapping

import structlog

from telus_umrah.services.normalize import as_bool, as_number, normalize_id, normalize_timestamp, pick

log = structlog.get_logger(__name__)

HOTEL_PREFERENCE_FIELDS = ("city", "hotel", "hotelClass", "stayDuration", "bedType")


def _str(record, key: str, attr: str | None = None, default: str = "") -> str:
    value = pick(record, key, attr)
    return default if value is None else str(value)


def _opt_str(record, key: str, attr: str | None = None) -> str | None:
    value = pick(record, key, attr)
    if value is None or value == "":
        return None
    return str(value)


def _list(value) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


def _child_ages(value) -> list:
    return [as_number(age, 0) for age in _list(value)]


def _people(value) -> list[dict]:
    out = []
    for raw in _list(value):
        person = raw if isinstance(raw, Mapping) else {}
        age = person.get("age")
        out.append({
            "name": str(person.get("name") or ""),
            "gender": str(person.get("gender") or ""),
            "nationality": _opt_str(person, "nationality"),
            "passportNumber": _opt_str(person, "passportNumber"),
            "age": None if age is None else as_number(age, None),
            "phone": _opt_str(person, "phone"),
            "isHead": as_bool(person.get("isHead")),
        })
    return out


def _hotel_preferences(value) -> list[dict]:
    out = []
    for raw in _list(value):
        entry = raw if isinstance(raw, Mapping) else {}
        out.append({key: str(entry.get(key) or "") for key in HOTEL_PREFERENCE_FIELDS})
    return out


def _selected_services(value) -> list[dict]:
    out = []
    for raw in _list(value):
        service = raw if isinstance(raw, Mapping) else {}
        price = service.get("price")
        out.append({
            "serviceId": str(service.get("serviceId") or ""),
            "serviceName": str(service.get("serviceName") or ""),
            "price": None if price is None else as_number(price, None),
        })
    return out


def _record_id(record) -> str:
    if record is None:
        return ""
    try:
        return normalize_id(pick(record, "_id", attr="id"))
    except Exception:
        return ""


def _common(record) -> dict:
    return {
        "status": _str(record, "status", default="pending") or "pending",
        "notes": _opt_str(record, "notes"),
        "selectedServices": _selected_services(pick(record, "selectedServices")),
        "totalAmount": as_number(pick(record, "totalAmount"), None),
        "paidAmount": as_number(pick(record, "paidAmount"), 0),
        "paymentStatus": _str(record, "paymentStatus", default="pending") or "pending",
        "paymentMethod": _opt_str(record, "paymentMethod"),
        "invoiceGenerated": as_bool(pick(record, "invoiceGenerated")),
        "invoiceSent": as_bool(pick(record, "invoiceSent")),
        "invoiceNumber": _opt_str(record, "invoiceNumber"),
        "invoiceUrl": _opt_str(record, "invoiceUrl"),
        "createdAt": normalize_timestamp(pick(record, "createdAt"), ""),
        "updatedAt": normalize_timestamp(pick(record, "updatedAt"), ""),
    }


def _flags(record, *names: str) -> dict:
    return {name: as_bool(pick(record, name)) for name in names}


def serialize_hotel_booking(record, hotel_name: str | None = None) -> dict | None:
    booking_id = _record_id(record)
    if not booking_id:
        return None
    try:
        out = {
            "_id": booking_id,
            "hotelId": _str(record, "hotelId"),
            "hotelName": hotel_name or _opt_str(record, "hotelName"),
            "customerName": _str(record, "customerName"),
            "customerEmail": _str(record, "customerEmail"),
            "customerPhone": _str(record, "customerPhone"),
            "customerNationality": _opt_str(record, "customerNationality"),
            "checkInDate": normalize_timestamp(pick(record, "checkInDate"), ""),
            "checkOutDate": normalize_timestamp(pick(record, "checkOutDate"), ""),
            "rooms": as_number(pick(record, "rooms"), 1),
            "adults": as_number(pick(record, "adults"), 1),
            "children": as_number(pick(record, "children"), 0),
            "childAges": _child_ages(pick(record, "childAges")),
            "bedType": _opt_str(record, "bedType"),
            "roomType": _opt_str(record, "roomType"),
            **_flags(record, "meals", "transport"),
        }
        out.update(_common(record))
        return out
    except Exception:
        log.warning("booking.serialize_failed", kind="hotel", booking_id=booking_id, exc_info=True)
        return None


def serialize_package_booking(record, package_name: str | None = None) -> dict | None:
    booking_id = _record_id(record)
    if not booking_id:
        return None
    try:
        adults = _people(pick(record, "adults"))
        children = _people(pick(record, "children"))
        travelers = pick(record, "travelers")
        travelers = travelers if isinstance(travelers, Mapping) else {}
        out = {
            "_id": booking_id,
            "packageId": _str(record, "packageId"),
            "packageName": package_name or _opt_str(record, "packageName"),
            "customerName": _str(record, "customerName"),
            "customerEmail": _str(record, "customerEmail"),
            "customerPhone": _str(record, "customerPhone"),
            "customerNationality": _opt_str(record, "customerNationality"),
            "travelers": {
                "adults": as_number(travelers.get("adults"), len(adults)),
                "children": as_number(travelers.get("children"), len(children)),
                "childAges": _child_ages(travelers.get("childAges")),
            },
            "adults": adults,
            "children": children,
            "infants": _people(pick(record, "infants")),
            "rooms": as_number(pick(record, "rooms"), 1),
            "checkInDate": normalize_timestamp(pick(record, "checkInDate"), None),
            "checkOutDate": normalize_timestamp(pick(record, "checkOutDate"), None),
            **_flags(record, "umrahVisa", "transport", "zaiarat", "meals", "esim"),
        }
        out.update(_common(record))
        return out
    except Exception:
        log.warning("booking.serialize_failed", kind="package", booking_id=booking_id, exc_info=True)
        return None


def serialize_custom_umrah_request(record) -> dict | None:
    request_id = _record_id(record)
    if not request_id:
        return None
    try:
        out = {
            "_id": request_id,
            "name": _str(record, "name"),
            "email": _str(record, "email"),
            "phone": _str(record, "phone"),
            "nationality": _str(record, "nationality"),
            "from": _str(record, "from", attr="from_city"),
            "to": _str(record, "to", attr="to_city"),
            "departDate": normalize_timestamp(pick(record, "departDate"), ""),
            "returnDate": normalize_timestamp(pick(record, "returnDate"), ""),
            "airline": _str(record, "airline"),
            "airlineClass": _str(record, "airlineClass"),
            "differentReturnCity": as_bool(pick(record, "differentReturnCity")),
            "returnFrom": _opt_str(record, "returnFrom"),
            "returnTo": _opt_str(record, "returnTo"),
            "adults": as_number(pick(record, "adults"), 1),
            "children": as_number(pick(record, "children"), 0),
            "childAges": _child_ages(pick(record, "childAges")),
            "rooms": as_number(pick(record, "rooms"), 1),
            **_flags(record, "umrahVisa", "transport", "zaiarat", "meals", "esim"),
            "hotels": _hotel_preferences(pick(record, "hotels")),
        }
        out.update(_common(record))
        return out
    except Exception:
        log.warning("booking.serialize_failed", kind="custom", booking_id=request_id, exc_info=True)
        return None

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Callable

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from telus_umrah.core.errors import BookingPersistenceError, BookingValidationError, DuplicateBookingError
from telus_umrah.models.booking import BOOKING_STATUSES, CUSTOM_REQUEST_STATUSES
from telus_umrah.models.custom_umrah_request import CustomUmrahRequest
from telus_umrah.models.hotel import Hotel
from telus_umrah.models.hotel_booking import HotelBooking
from telus_umrah.models.package_booking import PackageBooking
from telus_umrah.models.umrah_package import UmrahPackage
from telus_umrah.services.sanitizer import (
    INVOICE_FIELDS,
    sanitize_custom_umrah_request,
    sanitize_hotel_booking,
    sanitize_package_booking,
)
from telus_umrah.services.serializer import (
    serialize_custom_umrah_request,
    serialize_hotel_booking,
    serialize_package_booking,
)
from telus_umrah.services.normalize import as_bool

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class BookingKind:
    model: type
    sanitize: Callable
    serialize: Callable
    statuses: tuple
    email_field: str


KINDS = {
    "hotel": BookingKind(HotelBooking, sanitize_hotel_booking, serialize_hotel_booking, BOOKING_STATUSES, "customer_email"),
    "package": BookingKind(PackageBooking, sanitize_package_booking, serialize_package_booking, BOOKING_STATUSES, "customer_email"),
    "custom": BookingKind(CustomUmrahRequest, sanitize_custom_umrah_request, serialize_custom_umrah_request, CUSTOM_REQUEST_STATUSES, "email"),
}


def get_kind(kind: str) -> BookingKind:
    try:
        return KINDS[kind]
    except KeyError:
        raise BookingValidationError("invalid", "type", f"Unknown booking type: {kind}") from None


def known_statuses(kind: str) -> tuple:
    return get_kind(kind).statuses


def commit(db: Session) -> None:
    """Commit, turning constraint violations into booking errors."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        text = str(e.orig).lower()
        if "unique" in text or "duplicate" in text:
            raise DuplicateBookingError("A booking with the same invoice number already exists") from e
        raise BookingPersistenceError("The booking could not be saved") from e


def customer_name(record) -> str:
    return getattr(record, "customer_name", None) or getattr(record, "name", "") or ""


def customer_email(record) -> str:
    return getattr(record, "customer_email", None) or getattr(record, "email", "") or ""


def _serialize(db: Session, kind: str, record, names: dict | None = None) -> dict | None:
    handler = get_kind(kind)
    if kind == "hotel":
        name = record.hotel_name
        if not name:
            if names is not None:
                name = names.get(record.hotel_id)
            elif record.hotel_id:
                hotel = db.get(Hotel, record.hotel_id)
                name = hotel.name if hotel else None
        return handler.serialize(record, hotel_name=name or record.hotel_id)
    if kind == "package":
        if names is not None:
            name = names.get(record.package_id)
        else:
            package = db.get(UmrahPackage, record.package_id) if record.package_id else None
            name = package.name if package else None
        return handler.serialize(record, package_name=name or record.package_id)
    return handler.serialize(record)


def _catalogue_names(db: Session, kind: str, records) -> dict | None:
    """One lookup for every hotel/package name a listing needs."""
    if kind == "hotel":
        ids = {r.hotel_id for r in records if r.hotel_id and not r.hotel_name}
        model = Hotel
    elif kind == "package":
        ids = {r.package_id for r in records if r.package_id}
        model = UmrahPackage
    else:
        return None
    if not ids:
        return {}
    rows = db.execute(select(model.id, model.name).where(model.id.in_(ids))).all()
    return {row.id: row.name for row in rows}


def get_record(db: Session, kind: str, booking_id: str):
    return db.get(get_kind(kind).model, booking_id)


def create_booking(db: Session, kind: str, data: Mapping) -> dict:
    handler = get_kind(kind)
    values = handler.sanitize(data)
    record = handler.model(id=str(uuid.uuid4()), **values)
    db.add(record)
    commit(db)
    db.refresh(record)
    log.info("booking.created", kind=kind, booking_id=record.id)
    return _serialize(db, kind, record)


def list_bookings(db: Session, kind: str, status: str | None = None, email: str | None = None) -> list[dict]:
    """Newest first. Rows that fail to serialize are dropped.

    email narrows the listing to one customer's bookings, matched trimmed and case-insensitively.
    """
    handler = get_kind(kind)
    model = handler.model
    stmt = select(model).order_by(model.created_at.desc())
    if status:
        stmt = stmt.where(model.status == status)
    if email is not None:
        column = getattr(model, handler.email_field)
        stmt = stmt.where(func.lower(func.trim(column)) == email.strip().lower())
    records = db.execute(stmt).scalars().all()
    names = _catalogue_names(db, kind, records)
    out = []
    for record in records:
        item = _serialize(db, kind, record, names)
        if item is not None:
            out.append(item)
    return out


def get_booking(db: Session, kind: str, booking_id: str) -> dict | None:
    record = get_record(db, kind, booking_id)
    if record is None:
        return None
    return _serialize(db, kind, record)


def _is_invoice_only(data: Mapping) -> bool:
    keys = set(data)
    allowed = set(INVOICE_FIELDS) | set(INVOICE_FIELDS.values())
    return bool(keys) and keys <= allowed


def update_booking(db: Session, kind: str, booking_id: str, data: Mapping) -> dict | None:
    """Invoice-only payloads patch those fields; anything else replaces the record's contents."""
    handler = get_kind(kind)
    record = get_record(db, kind, booking_id)
    if record is None:
        return None

    if _is_invoice_only(data):
        for key, attr in INVOICE_FIELDS.items():
            if key in data:
                value = data[key]
            elif attr in data:
                value = data[attr]
            else:
                continue
            if attr in ("invoice_generated", "invoice_sent"):
                value = as_bool(value)
            elif value is not None:
                value = str(value).strip() or None
            setattr(record, attr, value)
    else:
        for attr, value in handler.sanitize(data).items():
            setattr(record, attr, value)

    commit(db)
    db.refresh(record)
    log.info("booking.updated", kind=kind, booking_id=record.id)
    return _serialize(db, kind, record)


def delete_booking(db: Session, kind: str, booking_id: str) -> dict | None:
    record = get_record(db, kind, booking_id)
    if record is None:
        return None
    out = _serialize(db, kind, record)
    db.delete(record)
    commit(db)
    log.info("booking.deleted", kind=kind, booking_id=booking_id)
    return out


def update_booking_status(db: Session, kind: str, booking_id: str, status: str) -> dict | None:
    """Any non-empty status is stored; the HTTP layer decides which ones it accepts."""
    record = get_record(db, kind, booking_id)
    if record is None:
        return None
    status = (status or "").strip()
    if not status:
        raise BookingValidationError("missing", "status", "status is required")
    record.status = status
    commit(db)
    db.refresh(record)
    log.info("booking.status_updated", kind=kind, booking_id=booking_id, status=status)
    return _serialize(db, kind, record)

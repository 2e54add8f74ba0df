from __future__ import annotations

import math
import time
from datetime import datetime, timezone

import structlog
from sqlalchemy.orm import Session

from telus_umrah.core.config import settings
from telus_umrah.models.hotel import Hotel
from telus_umrah.models.umrah_package import UmrahPackage
from telus_umrah.services import booking_service
from telus_umrah.services.invoice_pdf import InvoiceData, render_invoice_pdf, render_request_form_pdf
from telus_umrah.services.normalize import normalize_id, parse_datetime
from telus_umrah.services.sanitizer import family_head

log = structlog.get_logger(__name__)

INVOICE_PREFIXES = {"hotel": "HTL", "package": "PKG"}

# PKR estimates used only when a package booking carries no total
VISA_PER_PERSON = 50000
TRANSPORT_FLAT = 15000
ZAIARAT_FLAT = 20000
MEALS_PER_PERSON = 30000
ESIM_PER_PERSON = 5000

HOTEL_ADDONS = (("meals", "Meals"), ("transport", "Transport"))
PACKAGE_ADDONS = (
    ("umrah_visa", "Umrah Visa"),
    ("transport", "Transport"),
    ("zaiarat", "Zaiarat Tours"),
    ("meals", "Meals"),
    ("esim", "eSIM"),
)


def generate_invoice_number(booking_id, booking_type: str, now_ms: int | None = None) -> str:
    """HTL-123456-00AB: type prefix, last 6 digits of epoch millis, last 4 chars of the id.

    Not guaranteed unique; the invoice_number unique index catches collisions.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    prefix = INVOICE_PREFIXES.get(booking_type, "CUS")
    return f"{prefix}-{now_ms % 1_000_000:06d}-{normalize_id(booking_id)[-4:].upper()}"


def request_reference(booking_id) -> str:
    """Custom requests are not invoiced; their form carries REQ-<last 6 chars of the id>."""
    return f"REQ-{normalize_id(booking_id)[-6:]}"


def document_filename(kind: str, booking_id: str, invoice_number: str) -> str:
    if kind == "custom":
        return f"request-form-{booking_id}.pdf"
    return f"invoice-{invoice_number}.pdf"


def invoice_url(kind: str, booking_id: str) -> str:
    return f"{settings.API_PUBLIC_URL.rstrip('/')}/api/v1/invoices/{booking_id}?type={kind}"


def _addon_names(record, addons) -> list[str]:
    if record.selected_services:
        return [s.get("serviceName", "") for s in record.selected_services if s.get("serviceName")]
    return [label for attr, label in addons if getattr(record, attr, False)]


def _nights(check_in, check_out) -> int:
    start, end = parse_datetime(check_in), parse_datetime(check_out)
    if start is None or end is None:
        return 1
    return max(1, math.ceil((end - start).total_seconds() / 86400))


def estimate_hotel_total(record, hotel: Hotel | None) -> float:
    if hotel is None:
        return 0
    by_type = {
        "standard": hotel.standard_room_price,
        "deluxe": hotel.deluxe_room_price,
        "family": hotel.family_suite_price,
        "family-suite": hotel.family_suite_price,
    }
    nightly = by_type.get((record.room_type or "").lower()) or 0
    if not nightly:
        nightly = hotel.standard_room_price or hotel.deluxe_room_price or hotel.family_suite_price or 0
    nights = _nights(record.check_in_date, record.check_out_date)
    rooms = record.rooms or 1
    total = nightly * nights * rooms
    if record.meals and hotel.meals_price:
        total += hotel.meals_price * nights * rooms
    if record.transport and hotel.transport_price:
        total += hotel.transport_price
    return total


def _package_travelers(record) -> int:
    roster = len(record.adults or []) + len(record.children or []) + len(record.infants or [])
    if roster:
        return roster
    counts = record.travelers or {}
    return int(counts.get("adults") or 0) + int(counts.get("children") or 0)


def estimate_package_total(record, package: UmrahPackage | None) -> float:
    if package is None:
        return 0
    people = _package_travelers(record)
    total = (package.price or 0) * people
    if record.umrah_visa:
        total += VISA_PER_PERSON * people
    if record.transport:
        total += TRANSPORT_FLAT
    if record.zaiarat:
        total += ZAIARAT_FLAT
    if record.meals:
        total += MEALS_PER_PERSON * people
    if record.esim:
        total += ESIM_PER_PERSON * people
    return total


def build_invoice_data(
    db: Session,
    kind: str,
    booking_id: str,
    invoice_number: str | None = None,
    invoice_date: datetime | None = None,
) -> InvoiceData | None:
    """Assemble what the PDF prints from the stored booking and its catalogue entry."""
    record = booking_service.get_record(db, kind, booking_id)
    if record is None:
        return None
    if kind == "custom":
        number = invoice_number or request_reference(record.id)
    else:
        number = invoice_number or record.invoice_number or generate_invoice_number(record.id, kind)
    common = dict(
        invoice_number=number,
        booking_id=record.id,
        booking_type=kind,
        status=record.status or "",
        booking_date=parse_datetime(record.created_at),
        invoice_date=invoice_date or datetime.now(timezone.utc),
        payment_method=record.payment_method or "cash",
        notes=record.notes,
    )

    if kind == "hotel":
        hotel = db.get(Hotel, record.hotel_id) if record.hotel_id else None
        return InvoiceData(
            **common,
            customer_name=record.customer_name,
            customer_email=record.customer_email,
            customer_phone=record.customer_phone,
            customer_nationality=record.customer_nationality,
            item_name=(hotel.name if hotel else None) or record.hotel_name or "Hotel Booking",
            total_amount=record.total_amount or estimate_hotel_total(record, hotel),
            check_in_date=parse_datetime(record.check_in_date),
            check_out_date=parse_datetime(record.check_out_date),
            adults=record.adults,
            children=record.children,
            child_ages=list(record.child_ages or []),
            rooms=record.rooms,
            bed_type=record.bed_type,
            additional_services=_addon_names(record, HOTEL_ADDONS),
        )

    if kind == "package":
        package = db.get(UmrahPackage, record.package_id) if record.package_id else None
        head = family_head(record.adults or []) or {}
        counts = record.travelers or {}
        return InvoiceData(
            **common,
            customer_name=head.get("name") or record.customer_name,
            customer_email=record.customer_email,
            customer_phone=head.get("phone") or record.customer_phone,
            customer_nationality=record.customer_nationality,
            item_name=package.name if package else "Umrah Package",
            total_amount=record.total_amount or estimate_package_total(record, package),
            check_in_date=parse_datetime(record.check_in_date),
            check_out_date=parse_datetime(record.check_out_date),
            adults=counts.get("adults", len(record.adults or [])),
            children=counts.get("children", len(record.children or [])),
            child_ages=list(counts.get("childAges") or []),
            rooms=record.rooms,
            additional_services=_addon_names(record, PACKAGE_ADDONS),
        )

    return InvoiceData(
        **common,
        customer_name=record.name,
        customer_email=record.email,
        customer_phone=record.phone,
        customer_nationality=record.nationality,
        item_name="Custom Umrah Request",
        total_amount=record.total_amount or 0,
        check_in_date=parse_datetime(record.depart_date),
        check_out_date=parse_datetime(record.return_date),
        adults=record.adults,
        children=record.children,
        child_ages=list(record.child_ages or []),
        rooms=record.rooms,
        airline=record.airline,
        airline_class=record.airline_class,
        route_from=record.from_city,
        route_to=record.to_city,
        different_return_city=bool(record.different_return_city),
        return_from=record.return_from,
        return_to=record.return_to,
        hotels=list(record.hotels or []),
        additional_services=_addon_names(record, PACKAGE_ADDONS),
    )


def render_document(data: InvoiceData) -> bytes:
    """Custom requests get the request form; bookings get the invoice."""
    if data.booking_type == "custom":
        return render_request_form_pdf(data)
    return render_invoice_pdf(data)


def ensure_invoice(db: Session, kind: str, booking_id: str):
    """Give the booking an invoice number and URL the first time it is asked for. Idempotent."""
    record = booking_service.get_record(db, kind, booking_id)
    if record is None:
        return None
    if record.invoice_number:
        return record
    record.invoice_number = generate_invoice_number(record.id, kind)
    record.invoice_url = invoice_url(kind, record.id)
    record.invoice_generated = True
    booking_service.commit(db)
    db.refresh(record)
    log.info("invoice.issued", kind=kind, booking_id=record.id, invoice_number=record.invoice_number)
    return record


def issue_invoice(db: Session, kind: str, booking_id: str, send: bool | None = None) -> dict:
    """Number the invoice and email it (by default only when INVOICE_AUTO_SEND is on). Never raises.

    Custom requests are never numbered or marked; they go out under their REQ- reference.
    """
    from telus_umrah.services.email_service import send_invoice_email

    if kind == "custom":
        record = booking_service.get_record(db, kind, booking_id)
    else:
        try:
            record = ensure_invoice(db, kind, booking_id)
        except Exception:
            db.rollback()
            log.exception("invoice.issue_failed", kind=kind, booking_id=booking_id)
            return {"success": False, "error": "Failed to generate invoice"}
    if record is None:
        return {"success": False, "error": "Booking not found"}
    if send is None:
        send = settings.INVOICE_AUTO_SEND
    if not send:
        return {"success": True, "sent": False}

    if kind == "custom":
        number, url = request_reference(record.id), invoice_url(kind, record.id)
    else:
        number, url = record.invoice_number, record.invoice_url
    result = send_invoice_email(
        db,
        to=booking_service.customer_email(record),
        customer_name=booking_service.customer_name(record),
        invoice_number=number,
        booking_type=kind,
        invoice_url=url,
        booking_id=record.id,
    )
    if not result.get("success"):
        return result
    if kind == "custom":
        return {"success": True, "sent": True}
    try:
        record.invoice_sent = True
        booking_service.commit(db)
    except Exception:
        db.rollback()
        log.exception("invoice.mark_sent_failed", kind=kind, booking_id=booking_id)
    return {"success": True, "sent": True}

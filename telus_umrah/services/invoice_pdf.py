from __future__ import annotations

import io
from dataclasses import dataclass, field
from datetime import datetime

import structlog
from reportlab.lib import colors
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from telus_umrah.core.config import settings
from telus_umrah.core.errors import InvoiceGenerationError

log = structlog.get_logger(__name__)

PAGE_SIZE = (595, 842)  # A4 in points
MARGIN = 50
ROW_HEIGHT = 20
DETAIL_COLUMN = 170  # x offset of the "Details" column inside the table

TOTAL_BOX_WIDTH = 300
TOTAL_BOX_HEIGHT = 50
TOTAL_BOX_ANCHOR = 210  # preferred top edge of the total box
FOOTER_TOP = 115  # nothing but the footer below this line
SERVICE_LINE_HEIGHT = 16

PRIMARY = colors.Color(0.2, 0.4, 0.8)
DARK = colors.Color(0.2, 0.2, 0.2)
MUTED = colors.Color(0.5, 0.5, 0.5)
RULE = colors.Color(0.8, 0.8, 0.8)
HEADER_FILL = colors.Color(0.95, 0.95, 0.95)
BOX_FILL = colors.Color(0.98, 0.98, 0.98)

BOOKING_TYPE_LABELS = {"hotel": "Hotel Booking", "package": "Umrah Package", "custom": "Custom Umrah Request"}


@dataclass(frozen=True)
class InvoiceData:
    """Everything an invoice or request form prints. Built per render, never stored."""
    invoice_number: str
    booking_id: str
    booking_type: str  # hotel | package | custom
    customer_name: str
    customer_email: str
    customer_phone: str
    item_name: str
    total_amount: float = 0
    payment_method: str = "cash"
    customer_nationality: str | None = None
    status: str = ""
    booking_date: datetime | None = None
    invoice_date: datetime | None = None
    check_in_date: datetime | None = None
    check_out_date: datetime | None = None
    adults: int | None = None
    children: int | None = None
    child_ages: list = field(default_factory=list)
    rooms: int | None = None
    bed_type: str | None = None
    airline: str | None = None
    airline_class: str | None = None
    route_from: str | None = None
    route_to: str | None = None
    different_return_city: bool = False
    return_from: str | None = None
    return_to: str | None = None
    hotels: list = field(default_factory=list)
    additional_services: list = field(default_factory=list)
    notes: str | None = None


def format_money(amount) -> str:
    """PKR with thousands grouping and no decimals: 1234567 -> 'PKR 1,234,567'."""
    return f"PKR {int(round(float(amount or 0))):,}"


def format_date(value: datetime | None) -> str:
    if value is None:
        return ""
    return f"{value:%b} {value.day}, {value.year}"


def _fit(text: str, font: str, size: float, width: float) -> str:
    """Clip text with '...' so it fits in width points."""
    if stringWidth(text, font, size) <= width:
        return text
    while text and stringWidth(text + "...", font, size) > width:
        text = text[:-1]
    return text + "..."


def _draw_logo(c: canvas.Canvas, x: float, top: float, max_height: float) -> float:
    """Draw the company logo with its top-left at (x, top); return its width, 0 if unavailable."""
    try:
        logo = ImageReader(settings.INVOICE_LOGO_PATH)
        iw, ih = logo.getSize()
    except Exception:
        log.debug("invoice.logo_skipped", path=settings.INVOICE_LOGO_PATH)
        return 0
    scale = max_height / float(ih)
    c.drawImage(logo, x, top - max_height, width=iw * scale, height=max_height, mask="auto")
    return iw * scale


def _line_items(data: InvoiceData) -> list[tuple[str, str]]:
    rows = [
        ("Booking Type", BOOKING_TYPE_LABELS.get(data.booking_type, data.booking_type.title())),
        ("Item", data.item_name),
    ]
    if data.check_in_date:
        rows.append(("Check-in Date", format_date(data.check_in_date)))
    if data.check_out_date:
        rows.append(("Check-out Date", format_date(data.check_out_date)))
    if data.adults is not None:
        rows.append(("Travelers", f"{data.adults} Adult(s), {data.children or 0} Child(ren)"))
    if data.rooms:
        rows.append(("Rooms", str(data.rooms)))
    if data.bed_type:
        rows.append(("Bed Type", data.bed_type[:1].upper() + data.bed_type[1:]))
    if data.airline and data.route_from and data.route_to:
        carrier = f"{data.airline}, {data.airline_class}" if data.airline_class else data.airline
        rows.append(("Flight", f"{data.route_from} to {data.route_to} ({carrier})"))
    rows.append(("Payment Method", "Cash Payment" if data.payment_method == "cash" else "Online Payment"))
    return rows


def service_lines(services: list, top: float) -> list[str]:
    """Bullets that fit between top and the total box; the overflow collapses into '+N more'."""
    floor = FOOTER_TOP + TOTAL_BOX_HEIGHT + 20
    slots = max(0, int((top - floor) // SERVICE_LINE_HEIGHT) + 1)
    if len(services) <= slots:
        return [f"• {s}" for s in services]
    if slots == 0:
        return []
    shown = services[: slots - 1]
    return [f"• {s}" for s in shown] + [f"+{len(services) - len(shown)} more"]


def render_invoice_pdf(data: InvoiceData) -> bytes:
    """Return one A4 invoice page as PDF bytes. Identical input gives identical bytes."""
    try:
        return _render_invoice(data)
    except Exception as e:
        raise InvoiceGenerationError(f"Failed to generate PDF: {e}") from e


def _render_invoice(data: InvoiceData) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=PAGE_SIZE, invariant=1)
    c.setTitle(f"Invoice {data.invoice_number}")
    c.setAuthor(settings.COMPANY_NAME)
    w, h = PAGE_SIZE
    content_width = w - 2 * MARGIN
    y = h - MARGIN

    # Header band
    c.setFillColor(PRIMARY)
    c.rect(MARGIN, y - 70, content_width, 70, stroke=0, fill=1)
    _draw_logo(c, MARGIN + 10, y - 10, 50)
    c.setFillColor(colors.white)
    c.setFont("Helvetica-Bold", 24)
    c.drawCentredString(w / 2, y - 38, settings.COMPANY_NAME.upper())
    c.setFont("Helvetica", 9)
    c.drawCentredString(w / 2, y - 56, f"Phone: {settings.COMPANY_PHONE} | Email: {settings.COMPANY_EMAIL}")
    y -= 95

    # Title + metadata box
    c.setFillColor(PRIMARY)
    c.setFont("Helvetica-Bold", 22)
    c.drawString(MARGIN, y - 22, "INVOICE")
    box_w, box_h = 260, 54
    box_x = w - MARGIN - box_w
    c.setFillColor(HEADER_FILL)
    c.setStrokeColor(DARK)
    c.setLineWidth(1)
    c.rect(box_x, y - box_h, box_w, box_h, stroke=1, fill=1)
    invoice_date = data.invoice_date or data.booking_date
    meta = [
        ("Invoice No:", data.invoice_number),
        ("Booking ID:", data.booking_id),
        ("Date:", format_date(invoice_date)),
    ]
    for i, (label, value) in enumerate(meta):
        row_y = y - 15 - i * 14
        c.setFillColor(DARK)
        c.setFont("Helvetica-Bold", 9)
        c.drawString(box_x + 10, row_y, label)
        c.setFont("Helvetica", 9)
        c.drawString(box_x + 75, row_y, _fit(value, "Helvetica", 9, box_w - 85))
    y -= box_h + 22

    # Billed To / From
    col_w = content_width / 2 - 10
    billed = [(data.customer_name, "Helvetica-Bold"), (data.customer_email, "Helvetica"), (data.customer_phone, "Helvetica")]
    if data.customer_nationality:
        billed.append((f"Nationality: {data.customer_nationality}", "Helvetica"))
    sender = [
        (settings.COMPANY_NAME, "Helvetica-Bold"),
        (settings.COMPANY_ADDRESS_LINE1, "Helvetica"),
        (settings.COMPANY_ADDRESS_LINE2, "Helvetica"),
        (f"Phone: {settings.COMPANY_PHONE}", "Helvetica"),
        (f"Email: {settings.COMPANY_EMAIL}", "Helvetica"),
    ]
    for x, title, lines in ((MARGIN, "Billed To", billed), (w / 2 + 10, "From", sender)):
        c.setFillColor(PRIMARY)
        c.setFont("Helvetica-Bold", 11)
        c.drawString(x, y, title)
        c.setFillColor(DARK)
        for i, (text, font) in enumerate(lines):
            c.setFont(font, 10)
            c.drawString(x, y - 16 - i * 14, _fit(text or "", font, 10, col_w))
    y -= 16 + max(len(billed), len(sender)) * 14 + 16

    # Line-item table
    c.setFillColor(PRIMARY)
    c.setFont("Helvetica-Bold", 12)
    c.drawString(MARGIN, y, "Booking Details")
    y -= 10
    table_top = y
    c.setFillColor(HEADER_FILL)
    c.rect(MARGIN, y - ROW_HEIGHT, content_width, ROW_HEIGHT, stroke=0, fill=1)
    c.setFillColor(DARK)
    c.setFont("Helvetica-Bold", 10)
    c.drawString(MARGIN + 10, y - 14, "Description")
    c.drawString(MARGIN + DETAIL_COLUMN, y - 14, "Details")
    y -= ROW_HEIGHT
    value_width = content_width - DETAIL_COLUMN - 10
    for label, value in _line_items(data):
        c.setStrokeColor(RULE)
        c.setLineWidth(0.5)
        c.line(MARGIN, y, MARGIN + content_width, y)
        c.setFont("Helvetica", 10)
        c.drawString(MARGIN + 10, y - 14, label)
        c.drawString(MARGIN + DETAIL_COLUMN, y - 14, _fit(value or "", "Helvetica", 10, value_width))
        y -= ROW_HEIGHT
    c.setStrokeColor(DARK)
    c.setLineWidth(1)
    c.rect(MARGIN, y, content_width, table_top - y, stroke=1, fill=0)
    c.line(MARGIN + DETAIL_COLUMN - 10, y, MARGIN + DETAIL_COLUMN - 10, table_top)
    y -= 24

    # Additional services
    if data.additional_services:
        c.setFillColor(PRIMARY)
        c.setFont("Helvetica-Bold", 12)
        c.drawString(MARGIN, y, "Additional Services")
        y -= 18
        c.setFillColor(DARK)
        c.setFont("Helvetica", 10)
        for line in service_lines(data.additional_services, y):
            c.drawString(MARGIN + 10, y, _fit(line, "Helvetica", 10, content_width - 10))
            y -= SERVICE_LINE_HEIGHT
        y -= 8

    # Total box: fixed anchor near the bottom, below the content if it ran past it,
    # and a fixed offset above the footer if that would overlap the footer.
    box_top = min(y - 10, TOTAL_BOX_ANCHOR)
    if box_top - TOTAL_BOX_HEIGHT < FOOTER_TOP:
        box_top = FOOTER_TOP + TOTAL_BOX_HEIGHT + 5
    box_x = w - MARGIN - TOTAL_BOX_WIDTH
    c.setFillColor(PRIMARY)
    c.setStrokeColor(DARK)
    c.setLineWidth(2)
    c.rect(box_x, box_top - TOTAL_BOX_HEIGHT, TOTAL_BOX_WIDTH, TOTAL_BOX_HEIGHT, stroke=1, fill=1)
    c.setFillColor(colors.white)
    c.setFont("Helvetica-Bold", 12)
    c.drawString(box_x + 15, box_top - 30, "Total Amount")
    c.setFont("Helvetica-Bold", 16)
    c.drawRightString(box_x + TOTAL_BOX_WIDTH - 15, box_top - 31, format_money(data.total_amount))

    # Footer
    c.setStrokeColor(RULE)
    c.setLineWidth(1)
    c.line(MARGIN, FOOTER_TOP - 10, w - MARGIN, FOOTER_TOP - 10)
    c.setFillColor(PRIMARY)
    c.setFont("Helvetica-Bold", 10)
    c.drawCentredString(w / 2, FOOTER_TOP - 28, f"Thank you for choosing {settings.COMPANY_NAME}!")
    c.setFillColor(DARK)
    c.setFont("Helvetica", 9)
    c.drawCentredString(w / 2, FOOTER_TOP - 42, "Please visit our office to complete your payment.")
    c.setFont("Helvetica", 8)
    c.drawCentredString(w / 2, FOOTER_TOP - 54, f"For inquiries: {settings.COMPANY_EMAIL} | Phone: {settings.COMPANY_PHONE}")
    c.setFillColor(MUTED)
    c.setFont("Helvetica", 7)
    c.drawCentredString(w / 2, FOOTER_TOP - 66, "This is a computer-generated invoice. No signature required.")

    c.showPage()
    c.save()
    return buf.getvalue()


def render_request_form_pdf(data: InvoiceData) -> bytes:
    """Custom Umrah request summary; flows onto extra pages when needed."""
    try:
        return _render_request_form(data)
    except Exception as e:
        raise InvoiceGenerationError(f"Failed to generate PDF: {e}") from e


def _render_request_form(data: InvoiceData) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=PAGE_SIZE, invariant=1)
    c.setTitle(f"Custom Umrah Request {data.booking_id}")
    c.setAuthor(settings.COMPANY_NAME)
    w, h = PAGE_SIZE
    footer_height = 60
    label_x, value_x = MARGIN + 15, MARGIN + 180
    y = h - MARGIN

    def ensure_room(needed: float) -> None:
        nonlocal y
        if y - needed < MARGIN + footer_height:
            c.showPage()
            y = h - MARGIN

    def section(title: str) -> None:
        nonlocal y
        ensure_room(40)
        y -= 25
        c.setFillColor(MUTED)
        c.setFont("Helvetica-Bold", 11)
        c.drawString(MARGIN, y, title)
        c.setStrokeColor(HEADER_FILL)
        c.setLineWidth(0.5)
        c.line(MARGIN, y - 5, w - MARGIN, y - 5)
        y -= 15

    def info(label: str, value) -> None:
        nonlocal y
        if value is None or value == "":
            return
        ensure_room(20)
        y -= 20
        c.setFillColor(DARK)
        c.setFont("Helvetica-Bold", 10)
        c.drawString(label_x, y, label)
        c.setFont("Helvetica", 10)
        c.drawString(value_x, y, _fit(str(value), "Helvetica", 10, w - MARGIN - value_x))

    _draw_logo(c, MARGIN, y + 15, 40)
    c.setFillColor(PRIMARY)
    c.setFont("Helvetica-Bold", 22)
    c.drawRightString(w - MARGIN, y, "Custom Umrah Request")
    c.setFillColor(MUTED)
    c.setFont("Helvetica", 10)
    y -= 30
    c.drawRightString(w - MARGIN, y, f"Request ID: {data.booking_id}")
    y -= 15
    c.drawRightString(w - MARGIN, y, f"Request Date: {format_date(data.booking_date)}")
    if data.invoice_number:
        y -= 15
        c.drawRightString(w - MARGIN, y, f"Reference: {data.invoice_number}")
    y -= 25

    section("REQUESTER INFORMATION")
    info("Name", data.customer_name)
    info("Email", data.customer_email)
    info("Phone", data.customer_phone)
    info("Nationality", data.customer_nationality)
    info("Status", data.status)

    section("TRAVELERS")
    info("Adults", data.adults)
    info("Children", data.children)
    if data.child_ages:
        info("Child Ages", ", ".join(str(a) for a in data.child_ages))
    info("Rooms", data.rooms)

    section("FLIGHT DETAILS")
    info("Departure City", data.route_from)
    info("Destination City", data.route_to)
    info("Departure Date", format_date(data.check_in_date))
    info("Return Date", format_date(data.check_out_date))
    info("Airline", data.airline)
    info("Class", data.airline_class)
    if data.different_return_city:
        info("Return From", data.return_from)
        info("Return To", data.return_to)

    if data.hotels:
        section("HOTEL PREFERENCES")
        for i, hotel in enumerate(data.hotels, start=1):
            ensure_room(100)
            y -= 15
            c.setFillColor(DARK)
            c.setFont("Helvetica-Bold", 10)
            c.drawString(label_x, y, f"Hotel {i}: {hotel.get('city', '')}")
            y -= 5
            info("  • Class", hotel.get("hotelClass"))
            info("  • Hotel", hotel.get("hotel"))
            info("  • Stay Duration", hotel.get("stayDuration"))
            info("  • Bed Type", hotel.get("bedType"))

    if data.additional_services:
        section("ADDITIONAL SERVICES")
        for service in data.additional_services:
            ensure_room(20)
            y -= 20
            c.setFillColor(DARK)
            c.setFont("Helvetica", 10)
            c.drawString(label_x, y, f"• {service}")

    if data.notes:
        section("NOTES")
        for paragraph in data.notes.split("\n"):
            for line in simpleSplit(paragraph, "Helvetica", 10, w - 2 * MARGIN - 15) or [""]:
                ensure_room(20)
                y -= 20
                c.setFillColor(DARK)
                c.setFont("Helvetica", 10)
                c.drawString(label_x, y, line)

    footer_y = MARGIN
    c.setStrokeColor(MUTED)
    c.setLineWidth(0.5)
    c.line(MARGIN, footer_y + 20, w - MARGIN, footer_y + 20)
    c.setFillColor(PRIMARY)
    c.setFont("Helvetica-Bold", 12)
    c.drawCentredString(w / 2, footer_y, f"Thank you for your request with {settings.COMPANY_NAME}!")
    c.setFillColor(MUTED)
    c.setFont("Helvetica", 8)
    c.drawCentredString(w / 2, footer_y - 15, "This is a computer-generated document and does not require a signature.")

    c.showPage()
    c.save()
    return buf.getvalue()

from sqlalchemy import String, Float, Boolean, DateTime, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone

# Known values; only the HTTP status-update route checks them.
BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")
CUSTOM_REQUEST_STATUSES = ("pending", "in-progress", "completed", "cancelled")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BookingRecordMixin:
    """Columns shared by package bookings, hotel bookings and custom requests."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    status: Mapped[str] = mapped_column(String(30), default="pending", index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Selected catalogue services: [{serviceId, serviceName, price}]
    selected_services: Mapped[list] = mapped_column(JSON, default=list)

    # Payment. paid_amount <= total_amount is not enforced.
    total_amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    paid_amount: Mapped[float] = mapped_column(Float, default=0)
    payment_status: Mapped[str] = mapped_column(String(20), default="pending")  # pending, partial, paid
    payment_method: Mapped[str | None] = mapped_column(String(20), nullable=True)  # cash, online

    # Invoice
    invoice_generated: Mapped[bool] = mapped_column(Boolean, default=False)
    invoice_sent: Mapped[bool] = mapped_column(Boolean, default=False)
    invoice_number: Mapped[str | None] = mapped_column(String(32), unique=True, nullable=True)
    invoice_url: Mapped[str | None] = mapped_column(String(512), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)

from sqlalchemy import String, Integer, Boolean, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from telus_umrah.db.session import Base
from telus_umrah.models.booking import BookingRecordMixin

class HotelBooking(BookingRecordMixin, Base):
    __tablename__ = "hotel_bookings"

    hotel_id: Mapped[str] = mapped_column(String(36), index=True)
    hotel_name: Mapped[str | None] = mapped_column(String(200), nullable=True)  # denormalised for display

    customer_name: Mapped[str] = mapped_column(String(200))
    customer_email: Mapped[str] = mapped_column(String(320), index=True)
    customer_phone: Mapped[str] = mapped_column(String(40))
    customer_nationality: Mapped[str | None] = mapped_column(String(80), nullable=True)

    check_in_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    check_out_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    rooms: Mapped[int] = mapped_column(Integer, default=1)
    adults: Mapped[int] = mapped_column(Integer, default=1)
    children: Mapped[int] = mapped_column(Integer, default=0)
    child_ages: Mapped[list] = mapped_column(JSON, default=list)
    bed_type: Mapped[str | None] = mapped_column(String(20), nullable=True)  # single, double, twin, triple, quad
    room_type: Mapped[str] = mapped_column(String(30), default="standard")  # standard, deluxe, family

    meals: Mapped[bool] = mapped_column(Boolean, default=False)
    transport: Mapped[bool] = mapped_column(Boolean, default=False)

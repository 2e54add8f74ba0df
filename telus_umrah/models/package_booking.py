from sqlalchemy import String, Integer, Boolean, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from telus_umrah.db.session import Base
from telus_umrah.models.booking import BookingRecordMixin

class PackageBooking(BookingRecordMixin, Base):
    __tablename__ = "package_bookings"

    package_id: Mapped[str] = mapped_column(String(36), index=True)

    customer_name: Mapped[str] = mapped_column(String(200), default="")
    customer_email: Mapped[str] = mapped_column(String(320), index=True)
    customer_phone: Mapped[str] = mapped_column(String(40), default="")
    customer_nationality: Mapped[str | None] = mapped_column(String(80), nullable=True)

    # {adults, children, childAges}
    travelers: Mapped[dict] = mapped_column(JSON, default=dict)
    # Rosters of {name, gender, nationality, passportNumber, age, phone, isHead}; replaced wholesale on update
    adults: Mapped[list] = mapped_column(JSON, default=list)
    children: Mapped[list] = mapped_column(JSON, default=list)
    infants: Mapped[list] = mapped_column(JSON, default=list)  # age in months

    rooms: Mapped[int] = mapped_column(Integer, default=1)
    check_in_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    check_out_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    umrah_visa: Mapped[bool] = mapped_column(Boolean, default=False)
    transport: Mapped[bool] = mapped_column(Boolean, default=False)
    zaiarat: Mapped[bool] = mapped_column(Boolean, default=False)
    meals: Mapped[bool] = mapped_column(Boolean, default=False)
    esim: Mapped[bool] = mapped_column(Boolean, default=False)

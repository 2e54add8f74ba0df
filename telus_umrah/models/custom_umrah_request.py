from sqlalchemy import String, Integer, Boolean, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from telus_umrah.db.session import Base
from telus_umrah.models.booking import BookingRecordMixin

class CustomUmrahRequest(BookingRecordMixin, Base):
    __tablename__ = "custom_umrah_requests"

    name: Mapped[str] = mapped_column(String(200))
    email: Mapped[str] = mapped_column(String(320), index=True)
    phone: Mapped[str] = mapped_column(String(40))
    nationality: Mapped[str] = mapped_column(String(80))

    # Flight; exposed as "from" / "to"
    from_city: Mapped[str] = mapped_column(String(120))
    to_city: Mapped[str] = mapped_column(String(120))
    depart_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    return_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    airline: Mapped[str] = mapped_column(String(120))
    airline_class: Mapped[str] = mapped_column(String(40))
    different_return_city: Mapped[bool] = mapped_column(Boolean, default=False)
    return_from: Mapped[str | None] = mapped_column(String(120), nullable=True)
    return_to: Mapped[str | None] = mapped_column(String(120), nullable=True)

    adults: Mapped[int] = mapped_column(Integer, default=1)
    children: Mapped[int] = mapped_column(Integer, default=0)
    child_ages: Mapped[list] = mapped_column(JSON, default=list)
    rooms: Mapped[int] = mapped_column(Integer, default=1)

    umrah_visa: Mapped[bool] = mapped_column(Boolean, default=False)
    transport: Mapped[bool] = mapped_column(Boolean, default=False)
    zaiarat: Mapped[bool] = mapped_column(Boolean, default=False)
    meals: Mapped[bool] = mapped_column(Boolean, default=False)
    esim: Mapped[bool] = mapped_column(Boolean, default=False)

    # [{city, hotel, hotelClass, stayDuration, bedType}]; at least one
    hotels: Mapped[list] = mapped_column(JSON, default=list)

from sqlalchemy import String, Float, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from telus_umrah.db.session import Base

class Hotel(Base):
    __tablename__ = "hotels"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    city: Mapped[str] = mapped_column(String(40), default="")  # Makkah | Madina

    # PKR per room per night; 0 means "not offered"
    standard_room_price: Mapped[float] = mapped_column(Float, default=0)
    deluxe_room_price: Mapped[float] = mapped_column(Float, default=0)
    family_suite_price: Mapped[float] = mapped_column(Float, default=0)
    meals_price: Mapped[float] = mapped_column(Float, default=0)  # per room per night
    transport_price: Mapped[float] = mapped_column(Float, default=0)  # flat

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

from pydantic import BaseModel
from typing import Any, List, Optional

# Booking bodies are taken as raw JSON objects; services/sanitizer.py validates them.


class StatusUpdateIn(BaseModel):
    status: str


class BookingOut(BaseModel):
    data: Optional[dict[str, Any]] = None


class BookingListOut(BaseModel):
    data: List[dict[str, Any]]


class InvoiceDispatchOut(BaseModel):
    success: bool
    sent: Optional[bool] = None
    error: Optional[str] = None

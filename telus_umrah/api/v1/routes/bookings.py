from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from telus_umrah.api.deps import booking_kind
from telus_umrah.db.session import get_db
from telus_umrah.schemas.booking import BookingListOut, BookingOut, StatusUpdateIn
from telus_umrah.services import booking_service
from telus_umrah.services.invoice_service import issue_invoice

router = APIRouter(tags=["bookings"])


@router.post("/bookings/{kind}", status_code=201, response_model=BookingOut)
def create_booking(
    body: dict[str, Any] = Body(...),
    kind: str = Depends(booking_kind),
    db: Session = Depends(get_db),
):
    out = booking_service.create_booking(db, kind, body)
    # Hotel and package bookings get their invoice right away; custom requests on demand.
    if out and kind in ("hotel", "package"):
        issue_invoice(db, kind, out["_id"])
        out = booking_service.get_booking(db, kind, out["_id"]) or out
    return {"data": out}


@router.get("/bookings/{kind}", response_model=BookingListOut)
def list_bookings(
    status: Optional[str] = None,
    email: Optional[str] = None,
    kind: str = Depends(booking_kind),
    db: Session = Depends(get_db),
):
    return {"data": booking_service.list_bookings(db, kind, status=status, email=email)}


@router.get("/bookings/{kind}/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: str, kind: str = Depends(booking_kind), db: Session = Depends(get_db)):
    out = booking_service.get_booking(db, kind, booking_id)
    if out is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return {"data": out}


@router.put("/bookings/{kind}/{booking_id}", response_model=BookingOut)
def update_booking(
    booking_id: str,
    body: dict[str, Any] = Body(...),
    kind: str = Depends(booking_kind),
    db: Session = Depends(get_db),
):
    out = booking_service.update_booking(db, kind, booking_id, body)
    if out is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return {"data": out}


@router.delete("/bookings/{kind}/{booking_id}", response_model=BookingOut)
def delete_booking(booking_id: str, kind: str = Depends(booking_kind), db: Session = Depends(get_db)):
    out = booking_service.delete_booking(db, kind, booking_id)
    if out is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return {"data": out}


@router.patch("/bookings/{kind}/{booking_id}/status", response_model=BookingOut)
def update_status(
    booking_id: str,
    body: StatusUpdateIn,
    kind: str = Depends(booking_kind),
    db: Session = Depends(get_db),
):
    allowed = booking_service.known_statuses(kind)
    if body.status not in allowed:
        raise HTTPException(status_code=400, detail=f"Invalid status. Allowed: {', '.join(allowed)}")
    out = booking_service.update_booking_status(db, kind, booking_id, body.status)
    if out is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return {"data": out}

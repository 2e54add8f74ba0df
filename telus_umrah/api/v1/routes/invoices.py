from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from telus_umrah.api.deps import booking_kind
from telus_umrah.db.session import get_db
from telus_umrah.schemas.booking import InvoiceDispatchOut
from telus_umrah.services import booking_service
from telus_umrah.services.invoice_service import (
    build_invoice_data,
    document_filename,
    ensure_invoice,
    issue_invoice,
    render_document,
)

router = APIRouter(tags=["invoices"])


def invoice_kind(kind: str = Query("hotel", alias="type")) -> str:
    return booking_kind(kind)


@router.get("/invoices/{booking_id}")
def download_invoice(booking_id: str, kind: str = Depends(invoice_kind), db: Session = Depends(get_db)):
    """Invoice PDF, numbered on first download. Custom requests get a read-only request form."""
    if kind == "custom":
        record = booking_service.get_record(db, kind, booking_id)
    else:
        record = ensure_invoice(db, kind, booking_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    data = build_invoice_data(db, kind, booking_id)
    pdf_bytes = render_document(data)
    filename = document_filename(kind, booking_id, data.invoice_number)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/invoices/{booking_id}/send", response_model=InvoiceDispatchOut)
def send_invoice(booking_id: str, kind: str = Depends(invoice_kind), db: Session = Depends(get_db)):
    if booking_service.get_record(db, kind, booking_id) is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return issue_invoice(db, kind, booking_id, send=True)

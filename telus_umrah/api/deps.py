from fastapi import HTTPException

from telus_umrah.services.booking_service import KINDS


def booking_kind(kind: str) -> str:
    """Path/query guard: hotel, package or custom."""
    if kind not in KINDS:
        raise HTTPException(status_code=404, detail=f"Unknown booking type: {kind}")
    return kind

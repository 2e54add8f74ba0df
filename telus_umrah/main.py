import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from telus_umrah.core.config import settings
from telus_umrah.core.errors import (
    BookingPersistenceError,
    BookingValidationError,
    DuplicateBookingError,
    InvoiceGenerationError,
)
from telus_umrah.core.logging_config import configure_logging
from telus_umrah.api.v1.api import api_router

configure_logging()
log = structlog.get_logger(__name__)

app = FastAPI(title=settings.APP_NAME)

# CORS: use CORS_ORIGINS from env in production; default to localhost for dev
_default_origins = [
    "http://127.0.0.1:3000", "http://localhost:3000",
]
_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()] if settings.CORS_ORIGINS else _default_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(BookingValidationError)
def _validation_error(request: Request, exc: BookingValidationError):
    return JSONResponse(status_code=400, content={"error": exc.to_dict()})


@app.exception_handler(BookingPersistenceError)
def _persistence_error(request: Request, exc: BookingPersistenceError):
    status = 409 if isinstance(exc, DuplicateBookingError) else 400
    kind = "duplicate" if status == 409 else "persistence"
    return JSONResponse(status_code=status, content={"error": {"message": str(exc), "field": "", "kind": kind}})


@app.exception_handler(InvoiceGenerationError)
def _invoice_error(request: Request, exc: InvoiceGenerationError):
    log.error("invoice.render_failed", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"error": {"message": "Failed to generate invoice", "field": "", "kind": "document"}})


@app.get("/health")
def health():
    return {"status": "ok"}

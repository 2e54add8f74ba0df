from fastapi import APIRouter
from telus_umrah.api.v1.routes.bookings import router as bookings_router
from telus_umrah.api.v1.routes.invoices import router as invoices_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(bookings_router)
api_router.include_router(invoices_router)

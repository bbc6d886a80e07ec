import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .config import settings
from .database import engine, get_db
from .exceptions import RepairServiceError
from .mailer import SmtpMailTransport
from .notifications import NotificationDispatcher
from .routers import booking_router, admin_router

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

# Setup logger
logger = logging.getLogger("repair_service")

# Creates 'bookings' and 'archived_bookings' if they don't exist
models.Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manages application startup and shutdown events.
    """
    logger.info("Starting notification dispatcher...")

    # One mail transport for the whole process, shared through the dispatcher
    transport = SmtpMailTransport.from_settings(settings)
    if not transport.configured:
        logger.warning("EMAIL_USER is not set; customer emails will be skipped.")

    dispatcher = NotificationDispatcher(transport, shutdown_timeout=settings.NOTIFY_SHUTDOWN_TIMEOUT_SECONDS)
    await dispatcher.start()
    app.state.dispatcher = dispatcher

    yield  # The application is now running

    # --- Code to run on shutdown ---
    logger.info("Shutting down notification dispatcher...")
    await dispatcher.stop()


app = FastAPI(
    title="Repair Booking Service API",
    description="Tracks device-repair bookings from intake to archive.",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(RepairServiceError)
async def repair_service_error_handler(request: Request, exc: RepairServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


# Include the API routes
app.include_router(booking_router.router)
app.include_router(admin_router.router)

API_ENDPOINTS = {
    "Public Booking and Tracking": [
        {"method": "POST", "path": "/api/bookings", "description": "Submit repair request."},
        {"method": "GET", "path": "/api/bookings/{identifier}", "description": "Retrieve status & details."},
    ],
    "Admin Management": [
        {"method": "GET", "path": "/api/admin/bookings", "description": "Retrieve active/search results."},
        {"method": "PATCH", "path": "/api/admin/bookings/{id}/status", "description": "Update booking status."},
        {"method": "POST", "path": "/api/admin/bookings/{id}/archive", "description": "Archive completed job."},
        {"method": "GET", "path": "/api/admin/archived-bookings", "description": "Retrieve archived history."},
    ],
}


@app.get("/")
def read_root(db: Session = Depends(get_db)):
    database = {"status": "connected", "error": None}
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        database = {"status": "disconnected", "error": str(e)}

    return {
        "message": "Welcome to the Repair Booking Service",
        "database": database,
        "endpoints": API_ENDPOINTS,
    }

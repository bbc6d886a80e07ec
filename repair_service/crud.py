import json
import logging
import random
from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models, schemas
from .exceptions import ValidationError, NotFoundError, ConflictError, StoreError

logger = logging.getLogger("repair_service")

REQUIRED_FIELDS = ("customer_name", "email", "device_type")


def generate_tracking_id() -> str:
    """
    Draws a tracking code between TR-1000 and TR-9999.

    The code is not checked against existing bookings; a collision surfaces as
    a unique-constraint failure on insert.
    """
    return f"TR-{random.randint(1000, 9999)}"


def to_notice(booking: models.Booking) -> schemas.BookingNotice:
    return schemas.BookingNotice(
        tracking_id=booking.tracking_id,
        customer_name=booking.customer_name,
        email=booking.email,
        device_type=booking.device_type,
        booking_date=booking.booking_date,
        booking_time=booking.booking_time,
    )


def create_booking(db: Session, booking: schemas.BookingCreate) -> models.Booking:
    """
    Inserts a new booking in the Booked state.

    Does not send the confirmation email; the caller hands the new booking to
    the notification dispatcher.
    """
    missing = [field for field in REQUIRED_FIELDS if not (getattr(booking, field) or "").strip()]
    if missing:
        raise ValidationError("Missing required fields", details={"missing": missing})

    db_booking = models.Booking(
        tracking_id=generate_tracking_id(),
        customer_name=booking.customer_name,
        email=booking.email,
        phone=booking.phone,
        device_type=booking.device_type,
        issue_description=booking.issue_description,
        service_type=booking.service_type or "Drop-off",
        address=booking.address,
        booking_date=booking.booking_date,
        booking_time=booking.booking_time,
        images=json.dumps(booking.images or []),
        status=models.BookingStatus.BOOKED,
    )

    db.add(db_booking)
    try:
        db.commit()
    except IntegrityError as e:
        # Most likely a duplicate TR-XXXX code
        db.rollback()
        logger.error(f"Booking insert rejected for {db_booking.tracking_id}: {e.orig}")
        raise ConflictError(details=str(e.orig))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Booking insert failed: {e}")
        raise StoreError("Database insertion failed", details=str(e))

    db.refresh(db_booking)
    logger.info(f"Booking created: {db_booking.id} ({db_booking.tracking_id})")
    return db_booking


def get_booking_by_tracking_id_or_id(db: Session, identifier: str) -> schemas.BookingSummary:
    condition = models.Booking.tracking_id == identifier
    if identifier.isdecimal() and models.is_booking_id(int(identifier)):
        condition = or_(condition, models.Booking.id == int(identifier))

    booking = db.execute(select(models.Booking).where(condition)).scalars().first()
    if booking is None:
        raise NotFoundError("Repair not found. Check your ID.")

    return schemas.BookingSummary(
        tracking_id=booking.tracking_id,
        customer=booking.customer_name,
        device=booking.device_type,
        status=booking.status,
        date=booking.created_at,
        updated_at=booking.updated_at,
    )


def validate_status(value) -> models.BookingStatus:
    """Only membership in the fixed set is checked, not the transition."""
    try:
        return models.BookingStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status. Allowed: {', '.join(models.BookingStatus.allowed())}")


def update_booking_status(db: Session, booking_id: int, new_status, dispatcher) -> schemas.StatusUpdateResult:
    """
    Sets a booking's status and schedules the customer notification.

    The row is read first to get the contact fields for the email, then
    written with a separate UPDATE. Nothing locks the row between the two, so
    a concurrent update can land in between; the later write wins.
    """
    status = validate_status(new_status)

    booking = db.get(models.Booking, booking_id) if models.is_booking_id(booking_id) else None
    if booking is None:
        raise NotFoundError("Booking ID not found")
    notice = to_notice(booking)

    updated_at = models.utcnow()
    try:
        result = db.execute(
            update(models.Booking)
            .where(models.Booking.id == booking_id)
            .values(status=status, updated_at=updated_at)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            # Archived between the read and the write
            db.rollback()
            raise NotFoundError("Booking ID not found")
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Status update failed for booking {booking_id}: {e}")
        raise StoreError("Database update failed", details=str(e))

    logger.info(f"Booking {booking_id} ({notice.tracking_id}) set to {status.value}")
    dispatcher.notify_status_changed(notice, status)

    return schemas.StatusUpdateResult(
        data=schemas.StatusUpdateData(
            id=booking_id,
            tracking_id=notice.tracking_id,
            status=status,
            updated_at=updated_at,
        )
    )

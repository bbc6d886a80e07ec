import logging
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .database import transaction
from .exceptions import NotFoundError, StoreError

logger = logging.getLogger("repair_service")


def archive_booking(db: Session, booking_id: int) -> models.ArchivedBooking:
    """
    Moves one booking from the active table into the archive.

    Copy and delete run in a single transaction: either the archive row exists
    and the active row is gone, or nothing changed.
    """
    if not models.is_booking_id(booking_id):
        raise NotFoundError("Booking not found or already archived")

    try:
        with transaction(db):
            booking = db.execute(
                select(models.Booking)
                .where(models.Booking.id == booking_id)
                .with_for_update()
            ).scalar_one_or_none()

            if booking is None:
                raise NotFoundError("Booking not found or already archived")

            archived = models.ArchivedBooking(
                original_id=booking.id,
                archived_at=models.utcnow(),
                **{column: getattr(booking, column) for column in models.COPIED_COLUMNS},
            )
            db.add(archived)
            db.delete(booking)
            # Surface constraint errors before the commit
            db.flush()
    except SQLAlchemyError as e:
        logger.error(f"Archiving booking {booking_id} failed and was rolled back: {e}")
        raise StoreError("Failed to archive booking", details=str(e))

    logger.info(f"Booking {booking_id} ({archived.tracking_id}) archived as {archived.id}")
    return archived

import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas, crud
from ..database import get_db
from ..notifications import NotificationDispatcher, get_dispatcher

logger = logging.getLogger("repair_service")

router = APIRouter(prefix="/api/bookings", tags=["Bookings"])


@router.post("", response_model=schemas.BookingCreated)
def create_booking(
        booking: schemas.BookingCreate,
        db: Session = Depends(get_db),
        dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Submit a repair request. The confirmation email is sent in the background.
    """
    db_booking = crud.create_booking(db=db, booking=booking)

    dispatcher.notify_created(crud.to_notice(db_booking))
    logger.info(f"Booking Created: {db_booking.id} and email triggered.")

    return schemas.BookingCreated(db_id=db_booking.id, tracking_id=db_booking.tracking_id)


@router.get("/{identifier}", response_model=schemas.BookingSummary)
def read_booking_status(identifier: str, db: Session = Depends(get_db)):
    """
    Look up a repair by tracking id (TR-1234) or by database id.
    """
    return crud.get_booking_by_tracking_id_or_id(db=db, identifier=identifier)

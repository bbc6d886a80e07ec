from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from .. import schemas, crud, search
from ..archive import archive_booking
from ..database import get_db
from ..notifications import NotificationDispatcher, get_dispatcher

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/bookings", response_model=schemas.Page)
def read_bookings(
        q: Optional[str] = None,
        limit: int = search.DEFAULT_LIMIT,
        offset: int = 0,
        db: Session = Depends(get_db),
):
    """
    Active bookings, newest first. With `q`, searches customer name, email and
    tracking id across active and archived bookings.
    """
    return search.list_bookings(db=db, query=q, limit=limit, offset=offset)


@router.patch("/bookings/{booking_id}/status", response_model=schemas.StatusUpdateResult)
def update_status(
        booking_id: int,
        body: schemas.StatusUpdate,
        db: Session = Depends(get_db),
        dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return crud.update_booking_status(db=db, booking_id=booking_id, new_status=body.status, dispatcher=dispatcher)


@router.post("/bookings/{booking_id}/archive", response_model=schemas.ArchiveResult)
def archive(booking_id: int, db: Session = Depends(get_db)):
    """
    Move a finished job into the archive table.
    """
    archive_booking(db=db, booking_id=booking_id)
    return schemas.ArchiveResult()


@router.get("/archived-bookings", response_model=schemas.Page)
def read_archived_bookings(
        limit: int = search.DEFAULT_LIMIT,
        offset: int = 0,
        db: Session = Depends(get_db),
):
    return search.list_archived_bookings(db=db, limit=limit, offset=offset)

"""
Paginated listing and free-text search over active and archived bookings.

A search runs over the union of both tables, so one page can contain rows
from either. The total and the page are fetched with two separate queries and
may reflect slightly different moments under concurrent writes.
"""
from typing import Optional
from sqlalchemy import TIMESTAMP, cast, func, null, or_, select, union_all
from sqlalchemy.orm import Session

from . import models, schemas

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def clamp_pagination(limit: Optional[int] = None, offset: Optional[int] = None) -> tuple[int, int]:
    if limit is None:
        limit = DEFAULT_LIMIT
    limit = max(1, min(limit, MAX_LIMIT))
    offset = max(0, offset or 0)
    return limit, offset


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _matches(table, term: str):
    pattern = f"%{_escape_like(term)}%"
    return or_(
        table.customer_name.ilike(pattern, escape="\\"),
        table.email.ilike(pattern, escape="\\"),
        table.tracking_id.ilike(pattern, escape="\\"),
    )


def _projection(table, id_column, archived_at):
    return select(
        id_column.label("id"),
        table.tracking_id.label("tracking_id"),
        table.customer_name.label("customer_name"),
        table.email.label("email"),
        table.phone.label("phone"),
        table.device_type.label("device_type"),
        table.service_type.label("service_type"),
        table.status.label("status"),
        table.booking_date.label("booking_date"),
        table.booking_time.label("booking_time"),
        table.created_at.label("created_at"),
        table.updated_at.label("updated_at"),
        archived_at.label("archived_at"),
    )


def _active_rows():
    return _projection(models.Booking, models.Booking.id, cast(null(), TIMESTAMP))


def _archived_rows():
    return _projection(models.ArchivedBooking, models.ArchivedBooking.original_id, models.ArchivedBooking.archived_at)


def _page(db: Session, rows, order_by, limit: int, offset: int) -> schemas.Page:
    total = db.execute(select(func.count()).select_from(rows)).scalar_one()
    data = db.execute(
        select(rows).order_by(*order_by).limit(limit).offset(offset)
    ).mappings().all()
    return schemas.Page(
        total=total,
        limit=limit,
        offset=offset,
        data=[schemas.BookingListItem.model_validate(dict(row)) for row in data],
    )


def list_bookings(db: Session, query: Optional[str] = None, limit: Optional[int] = None,
                  offset: Optional[int] = None) -> schemas.Page:
    """
    Without a query: active bookings, newest first.

    With a query: bookings from both tables whose customer name, email or
    tracking id contains the query (case-insensitive), newest first.
    """
    limit, offset = clamp_pagination(limit, offset)
    # A blank query means no filter; any other query is matched as given
    term = query if query and query.strip() else None

    if not term:
        rows = _active_rows().subquery("active_bookings")
    else:
        rows = union_all(
            _active_rows().where(_matches(models.Booking, term)),
            _archived_rows().where(_matches(models.ArchivedBooking, term)),
        ).subquery("matching_bookings")

    return _page(db, rows, (rows.c.created_at.desc(), rows.c.id.desc()), limit, offset)


def list_archived_bookings(db: Session, limit: Optional[int] = None,
                           offset: Optional[int] = None) -> schemas.Page:
    limit, offset = clamp_pagination(limit, offset)
    rows = _archived_rows().subquery("archived")
    return _page(db, rows, (rows.c.archived_at.desc(), rows.c.id.desc()), limit, offset)

from sqlalchemy import Column, Integer, String, Text, TIMESTAMP, Index
from sqlalchemy import Enum as SQLEnum
from enum import Enum as PyEnum
import datetime

from .database import Base


def utcnow() -> datetime.datetime:
    """Naive UTC timestamp, matching the TIMESTAMP columns below."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


# Integer primary keys are 32-bit on PostgreSQL; larger ids can never match a row
MAX_BOOKING_ID = 2**31 - 1


def is_booking_id(value: int) -> bool:
    return 1 <= value <= MAX_BOOKING_ID


# --- ENUM for Booking Status ---
class BookingStatus(str, PyEnum):
    """
    The fixed set of repair states.

    Jobs normally move Booked -> Diagnosing -> Repairing -> Ready -> Completed,
    but only membership in the set is enforced when writing.
    """
    BOOKED = "Booked"
    DIAGNOSING = "Diagnosing"
    REPAIRING = "Repairing"
    READY = "Ready"
    COMPLETED = "Completed"

    @classmethod
    def allowed(cls) -> list[str]:
        return [member.value for member in cls]


# Stored by value ("Booked"), not by member name ("BOOKED"), as a VARCHAR
# with a CHECK constraint on every backend
status_type = SQLEnum(
    BookingStatus,
    name="booking_status",
    native_enum=False,
    values_callable=lambda enum_cls: [member.value for member in enum_cls],
    validate_strings=True,
    create_constraint=True,
)


class BookingFields:
    """Columns shared by the active and the archive table."""

    tracking_id = Column(String(12), index=True, nullable=False)

    customer_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)

    device_type = Column(String(255), nullable=False)
    issue_description = Column(Text, nullable=True)
    service_type = Column(String(50), default="Drop-off", nullable=False)
    address = Column(Text, nullable=True)
    booking_date = Column(String(32), nullable=True)
    booking_time = Column(String(32), nullable=True)

    # JSON-encoded list of attachment references
    images = Column(Text, default="[]", nullable=False)

    status = Column(status_type, default=BookingStatus.BOOKED, nullable=False)

    created_at = Column(TIMESTAMP, default=utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, nullable=True)


# Every column copied when a booking moves into the archive
COPIED_COLUMNS = (
    "tracking_id", "customer_name", "email", "phone", "device_type",
    "issue_description", "service_type", "address", "booking_date",
    "booking_time", "images", "status", "created_at", "updated_at",
)


class Booking(BookingFields, Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    # Unique among active bookings only; an archived job may share the code
    tracking_id = Column(String(12), unique=True, index=True, nullable=False)

    __table_args__ = (
        Index("ix_bookings_created_at", "created_at"),
        # Never hand out a deleted booking's id again
        {"sqlite_autoincrement": True},
    )


class ArchivedBooking(BookingFields, Base):
    __tablename__ = "archived_bookings"

    id = Column(Integer, primary_key=True, index=True)

    # The id the booking had in the active table
    original_id = Column(Integer, unique=True, index=True, nullable=False)

    archived_at = Column(TIMESTAMP, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_archived_bookings_archived_at", "archived_at"),
    )

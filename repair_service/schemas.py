from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional
import datetime

from .models import BookingStatus


class CamelModel(BaseModel):
    # Wire format is camelCase; Python code uses the snake_case names
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class BookingCreate(CamelModel):
    # Required fields are checked by crud.create_booking so that a missing
    # field yields the service's own error payload
    customer_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    device_type: Optional[str] = None
    issue_description: Optional[str] = None
    service_type: Optional[str] = None
    address: Optional[str] = None
    booking_date: Optional[str] = None
    booking_time: Optional[str] = None
    images: Optional[list[str]] = None


class BookingCreated(CamelModel):
    success: bool = True
    db_id: int
    tracking_id: str
    message: str = "Booking confirmed successfully"


class BookingSummary(CamelModel):
    """Read-only view returned by the public tracking lookup."""
    found: bool = True
    tracking_id: str
    customer: str
    device: str
    status: BookingStatus
    date: datetime.datetime
    updated_at: Optional[datetime.datetime] = None


class BookingNotice(CamelModel):
    """Contact and device fields handed to the notification dispatcher."""
    tracking_id: str
    customer_name: str
    email: str
    device_type: str
    booking_date: Optional[str] = None
    booking_time: Optional[str] = None


class StatusUpdate(CamelModel):
    # Membership in BookingStatus is checked by crud.update_booking_status
    status: Optional[str] = None


class StatusUpdateData(CamelModel):
    id: int
    tracking_id: str
    status: BookingStatus
    updated_at: datetime.datetime


class StatusUpdateResult(CamelModel):
    success: bool = True
    message: str = "Status updated successfully"
    data: StatusUpdateData


class ArchiveResult(CamelModel):
    success: bool = True
    message: str = "Booking archived successfully"


class BookingListItem(CamelModel):
    """
    Common row shape for both partitions. For archived rows `id` is the
    booking's former active id and `archived_at` is set.
    """
    id: int
    tracking_id: str
    customer_name: str
    email: str
    phone: Optional[str] = None
    device_type: str
    service_type: Optional[str] = None
    status: BookingStatus
    booking_date: Optional[str] = None
    booking_time: Optional[str] = None
    created_at: datetime.datetime
    updated_at: Optional[datetime.datetime] = None
    archived_at: Optional[datetime.datetime] = None


class Page(CamelModel):
    total: int
    limit: int
    offset: int
    data: list[BookingListItem] = Field(default_factory=list)

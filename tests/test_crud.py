import json
import re
import pytest
from unittest.mock import MagicMock
from sqlalchemy.orm import Session

from repair_service import crud, models, schemas
from repair_service.exceptions import ValidationError, NotFoundError, ConflictError


def new_booking(**overrides) -> schemas.BookingCreate:
    data = {
        "customer_name": "Jane Doe",
        "email": "jane@example.com",
        "device_type": "Laptop",
    }
    data.update(overrides)
    return schemas.BookingCreate(**data)


# --- Tracking ids ---

def test_generate_tracking_id_format():
    for _ in range(200):
        assert re.fullmatch(r"TR-\d{4}", crud.generate_tracking_id())


def test_generate_tracking_id_range(mocker):
    mocker.patch("repair_service.crud.random.randint", side_effect=[1000, 9999])
    assert crud.generate_tracking_id() == "TR-1000"
    assert crud.generate_tracking_id() == "TR-9999"


# --- Create ---

@pytest.mark.parametrize("missing", ["customer_name", "email", "device_type"])
def test_create_booking_requires_fields(missing):
    """Validation fails before the session is touched."""
    mock_db = MagicMock(spec=Session)
    with pytest.raises(ValidationError) as excinfo:
        crud.create_booking(mock_db, new_booking(**{missing: None}))

    assert excinfo.value.message == "Missing required fields"
    assert excinfo.value.details == {"missing": [missing]}
    mock_db.add.assert_not_called()
    mock_db.commit.assert_not_called()


def test_create_booking_rejects_blank_fields():
    mock_db = MagicMock(spec=Session)
    with pytest.raises(ValidationError):
        crud.create_booking(mock_db, new_booking(customer_name="   ", email=""))
    mock_db.add.assert_not_called()


def test_create_booking_defaults(db_session: Session):
    booking = crud.create_booking(db_session, new_booking(phone="555-0100"))

    assert booking.id is not None
    assert re.fullmatch(r"TR-\d{4}", booking.tracking_id)
    assert booking.status == models.BookingStatus.BOOKED
    assert booking.service_type == "Drop-off"
    assert json.loads(booking.images) == []
    assert booking.created_at is not None
    assert booking.updated_at is None


def test_create_booking_keeps_optional_fields(db_session: Session):
    booking = crud.create_booking(db_session, new_booking(
        service_type="Pickup",
        address="12 High St",
        booking_date="2026-11-02",
        booking_time="10:30",
        issue_description="Cracked screen",
        images=["uploads/a.jpg", "uploads/b.jpg"],
    ))

    assert booking.service_type == "Pickup"
    assert booking.address == "12 High St"
    assert booking.booking_date == "2026-11-02"
    assert json.loads(booking.images) == ["uploads/a.jpg", "uploads/b.jpg"]


def test_create_booking_tracking_id_collision(db_session: Session, mocker, make_booking):
    make_booking(tracking_id="TR-4242")
    mocker.patch("repair_service.crud.generate_tracking_id", return_value="TR-4242")

    with pytest.raises(ConflictError):
        crud.create_booking(db_session, new_booking())

    # The failed insert left nothing behind
    assert db_session.query(models.Booking).count() == 1


# --- Lookup ---

def test_get_booking_by_tracking_id(db_session: Session):
    created = crud.create_booking(db_session, new_booking())

    summary = crud.get_booking_by_tracking_id_or_id(db_session, created.tracking_id)

    assert summary.found is True
    assert summary.tracking_id == created.tracking_id
    assert summary.customer == "Jane Doe"
    assert summary.device == "Laptop"
    assert summary.status == models.BookingStatus.BOOKED
    assert summary.updated_at is None


def test_get_booking_by_numeric_id(db_session: Session):
    created = crud.create_booking(db_session, new_booking())

    summary = crud.get_booking_by_tracking_id_or_id(db_session, str(created.id))
    assert summary.tracking_id == created.tracking_id


def test_get_booking_not_found(db_session: Session):
    with pytest.raises(NotFoundError):
        crud.get_booking_by_tracking_id_or_id(db_session, "TR-0000")
    with pytest.raises(NotFoundError):
        crud.get_booking_by_tracking_id_or_id(db_session, "12345")


def test_get_booking_ignores_archived(db_session: Session, make_archived):
    make_archived(tracking_id="TR-7777")
    with pytest.raises(NotFoundError):
        crud.get_booking_by_tracking_id_or_id(db_session, "TR-7777")


# --- Status updates ---

@pytest.mark.parametrize("bad_status", ["Lost", "ready", "", None])
def test_update_status_rejects_unknown_status(db_session: Session, make_booking, dispatcher, bad_status):
    booking = make_booking()

    with pytest.raises(ValidationError) as excinfo:
        crud.update_booking_status(db_session, booking.id, bad_status, dispatcher)

    assert "Booked, Diagnosing, Repairing, Ready, Completed" in excinfo.value.message
    db_session.refresh(booking)
    assert booking.status == models.BookingStatus.BOOKED
    assert booking.updated_at is None
    assert dispatcher.status_changes == []


def test_update_status_success(db_session: Session, make_booking, dispatcher):
    booking = make_booking(customer_name="Sam", email="sam@example.com", device_type="Console")

    result = crud.update_booking_status(db_session, booking.id, "Ready", dispatcher)

    assert result.success is True
    assert result.data.id == booking.id
    assert result.data.tracking_id == booking.tracking_id
    assert result.data.status == models.BookingStatus.READY
    assert result.data.updated_at is not None

    db_session.refresh(booking)
    assert booking.status == models.BookingStatus.READY
    assert booking.updated_at is not None

    # The notification uses the contact fields read before the write
    assert len(dispatcher.status_changes) == 1
    notice, new_status = dispatcher.status_changes[0]
    assert notice.email == "sam@example.com"
    assert notice.tracking_id == booking.tracking_id
    assert new_status == models.BookingStatus.READY


def test_update_status_allows_any_transition(db_session: Session, make_booking, dispatcher):
    """Only set membership is enforced: Booked -> Completed -> Diagnosing is allowed."""
    booking = make_booking()

    crud.update_booking_status(db_session, booking.id, "Completed", dispatcher)
    crud.update_booking_status(db_session, booking.id, "Diagnosing", dispatcher)

    db_session.refresh(booking)
    assert booking.status == models.BookingStatus.DIAGNOSING
    assert len(dispatcher.status_changes) == 2


def test_update_status_not_found(db_session: Session, dispatcher):
    with pytest.raises(NotFoundError):
        crud.update_booking_status(db_session, 999, "Ready", dispatcher)
    assert dispatcher.status_changes == []


def test_update_status_row_removed_between_read_and_write(dispatcher):
    """A booking archived after the read surfaces as not found, with no email."""
    mock_db = MagicMock(spec=Session)
    mock_db.get.return_value = models.Booking(
        id=5, tracking_id="TR-5555", customer_name="A", email="a@x.com", device_type="Phone"
    )
    mock_db.execute.return_value.rowcount = 0

    with pytest.raises(NotFoundError):
        crud.update_booking_status(mock_db, 5, "Ready", dispatcher)

    mock_db.rollback.assert_called()
    mock_db.commit.assert_not_called()
    assert dispatcher.status_changes == []


def test_update_status_dispatch_does_not_change_result(db_session: Session, make_booking):
    """The dispatcher only schedules; its return value is ignored."""
    booking = make_booking()
    dispatcher = MagicMock()
    dispatcher.notify_status_changed.return_value = False

    result = crud.update_booking_status(db_session, booking.id, "Repairing", dispatcher)

    assert result.success is True
    dispatcher.notify_status_changed.assert_called_once()


@pytest.mark.parametrize("value, expected", [
    (1, True),
    (models.MAX_BOOKING_ID, True),
    (0, False),
    (-1, False),
    (models.MAX_BOOKING_ID + 1, False),
    (10**20, False),
])
def test_is_booking_id(value, expected):
    assert models.is_booking_id(value) is expected


def test_get_booking_oversized_id_falls_back_to_tracking_id(db_session: Session, make_booking):
    make_booking()
    with pytest.raises(NotFoundError):
        crud.get_booking_by_tracking_id_or_id(db_session, "99999999999999999999")


def test_update_status_oversized_id(db_session: Session, dispatcher):
    with pytest.raises(NotFoundError):
        crud.update_booking_status(db_session, 10**20, "Ready", dispatcher)
    assert dispatcher.status_changes == []

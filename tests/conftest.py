# Imports for testing tools
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Import your application code
from repair_service.main import app
from repair_service.database import Base, get_db
from repair_service.notifications import get_dispatcher
from repair_service import models

# --- Test Database Setup ---
# One in-memory database per test, shared across threads by StaticPool


@pytest.fixture(scope="function")
def engine():
    test_engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """Provides a database session for each test."""
    session = session_factory()
    yield session
    session.close()


# --- Stand-in for the notification dispatcher ---
class RecordingDispatcher:
    """Records what would have been emailed instead of sending it."""

    def __init__(self):
        self.created = []
        self.status_changes = []

    def notify_created(self, booking):
        self.created.append(booking)

    def notify_status_changed(self, booking, new_status):
        self.status_changes.append((booking, new_status))


@pytest.fixture(scope="function")
def dispatcher():
    return RecordingDispatcher()


# --- API Test Client Fixture ---
@pytest.fixture(scope="function")
def client(session_factory, dispatcher):
    """Provides a TestClient wired to the test database and dispatcher."""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher

    with TestClient(app) as c:
        yield c

    # Clean up overrides
    app.dependency_overrides.clear()


# --- Helpers for seeding rows directly ---
@pytest.fixture
def make_booking(db_session):
    counter = {"n": 1000}

    def _make(**fields):
        counter["n"] += 1
        values = {
            "tracking_id": f"TR-{counter['n']}",
            "customer_name": "Test Customer",
            "email": "customer@example.com",
            "device_type": "Phone",
            "status": models.BookingStatus.BOOKED,
        }
        values.update(fields)
        booking = models.Booking(**values)
        db_session.add(booking)
        db_session.commit()
        db_session.refresh(booking)
        return booking

    return _make


@pytest.fixture
def make_archived(db_session):
    counter = {"n": 500000}

    def _make(**fields):
        counter["n"] += 1
        values = {
            "original_id": counter["n"],
            "tracking_id": f"TR-{counter['n'] % 9000 + 1000}",
            "customer_name": "Archived Customer",
            "email": "archived@example.org",
            "device_type": "Tablet",
            "status": models.BookingStatus.COMPLETED,
        }
        values.update(fields)
        archived = models.ArchivedBooking(**values)
        db_session.add(archived)
        db_session.commit()
        db_session.refresh(archived)
        return archived

    return _make

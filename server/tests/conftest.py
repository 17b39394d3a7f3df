"""Test configuration and fixtures."""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("USE_STUB_ADAPTERS", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from fleet_booking.clients import StubUserValidator, StubVehicleCoordinator  # noqa: E402
from fleet_booking.core.database import Base, get_db  # noqa: E402
from fleet_booking.core.dependencies import (  # noqa: E402
    get_dispatcher,
    get_user_validator,
    get_vehicle_coordinator,
)
from fleet_booking.models import *  # noqa: E402,F403 - Import all models
from fleet_booking.schemas.booking import CreateBookingRequest  # noqa: E402
from fleet_booking.services.booking_service import BookingService  # noqa: E402
from fleet_booking.workers import VehicleStatusDispatcher  # noqa: E402

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

OWNER = "user-1"
VEHICLE = "vehicle-1"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def user_validator():
    return StubUserValidator()


@pytest.fixture
def vehicle_coordinator():
    return StubVehicleCoordinator()


@pytest_asyncio.fixture(scope="function")
async def dispatcher(vehicle_coordinator):
    """A running vehicle status dispatcher over the stub coordinator."""
    worker = VehicleStatusDispatcher(vehicle_coordinator, timeout_seconds=0.5, drain_seconds=1.0)
    await worker.start()
    yield worker
    if worker.is_running:
        await worker.stop()


@pytest.fixture
def booking_service(test_session, user_validator, vehicle_coordinator, dispatcher):
    return BookingService(test_session, user_validator, vehicle_coordinator, dispatcher)


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session, user_validator, vehicle_coordinator, dispatcher):
    """The real application with the database and collaborators swapped for test doubles."""
    from fleet_booking.main import create_app

    app = create_app()

    # Override database dependency
    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_user_validator] = lambda: user_validator
    app.dependency_overrides[get_vehicle_coordinator] = lambda: vehicle_coordinator
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.state.vehicle_status_dispatcher = dispatcher

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_booking_data():
    """Booking payload whose start time has already passed, so it can be started at once."""
    return {
        "user_id": OWNER,
        "vehicle_id": VEHICLE,
        "start_time": (datetime.now(timezone.utc) - timedelta(minutes=5)).isoformat(),
        "pickup_latitude": 52.52,
        "pickup_longitude": 13.405,
        "pickup_address": "Alexanderplatz 1, Berlin",
        "dropoff_latitude": 52.5163,
        "dropoff_longitude": 13.3777,
        "dropoff_address": "Pariser Platz, Berlin",
    }


@pytest.fixture
def create_request(sample_booking_data):
    return CreateBookingRequest(**sample_booking_data)


@pytest.fixture
def make_request(sample_booking_data):
    """Build a CreateBookingRequest with some fields replaced."""

    def _make(**overrides):
        return CreateBookingRequest(**{**sample_booking_data, **overrides})

    return _make

"""Concurrency tests for booking status transitions."""

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fleet_booking.clients import StubUserValidator, StubVehicleCoordinator
from fleet_booking.core.database import Base
from fleet_booking.core.exceptions import InvalidTransitionError
from fleet_booking.models.booking import BookingStatus
from fleet_booking.repositories.booking_repository import BookingRepository
from fleet_booking.schemas.booking import CompleteBookingRequest
from fleet_booking.services.booking_service import BookingService
from fleet_booking.workers import VehicleStatusDispatcher

OWNER = "user-1"


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """A file-backed database so each session gets its own connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}",
        connect_args={"timeout": 10},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def coordinator_and_dispatcher():
    coordinator = StubVehicleCoordinator()
    dispatcher = VehicleStatusDispatcher(coordinator, timeout_seconds=0.5)
    await dispatcher.start()
    yield coordinator, dispatcher
    await dispatcher.stop()


async def create_booking(session_factory, dispatcher, create_request, status: BookingStatus) -> str:
    async with session_factory() as session:
        service = BookingService(session, StubUserValidator(), StubVehicleCoordinator(), dispatcher)
        booking = await service.create_booking(create_request)
        await BookingRepository(session).transition(booking.id, list(BookingStatus), status)
        await session.commit()
        return booking.id


async def attempt(session_factory, dispatcher, coordinator, operation):
    async with session_factory() as session:
        service = BookingService(session, StubUserValidator(), coordinator, dispatcher)
        try:
            await operation(service)
            return "ok"
        except InvalidTransitionError:
            return "rejected"


@pytest.mark.asyncio
async def test_two_completes_exactly_one_wins(session_factory, coordinator_and_dispatcher, create_request):
    coordinator, dispatcher = coordinator_and_dispatcher
    booking_id = await create_booking(session_factory, dispatcher, create_request, BookingStatus.ACTIVE)

    async def complete(service):
        await service.complete_booking(booking_id, OWNER, CompleteBookingRequest(distance=5.0, duration=10))

    results = await asyncio.gather(
        attempt(session_factory, dispatcher, coordinator, complete),
        attempt(session_factory, dispatcher, coordinator, complete),
    )

    assert sorted(results) == ["ok", "rejected"]

    async with session_factory() as session:
        booking = await BookingRepository(session).get_by_id(booking_id)
        assert booking.status == "completed"
        assert booking.cost == pytest.approx(10.0)

    assert await dispatcher.drain(timeout=1.0)
    # Only the winner propagates a vehicle status
    assert len(coordinator.status_updates) == 1


@pytest.mark.asyncio
async def test_complete_and_cancel_race(session_factory, coordinator_and_dispatcher, create_request):
    coordinator, dispatcher = coordinator_and_dispatcher
    booking_id = await create_booking(session_factory, dispatcher, create_request, BookingStatus.ACTIVE)

    async def complete(service):
        await service.complete_booking(booking_id, OWNER, CompleteBookingRequest(distance=2.0))

    async def cancel(service):
        await service.cancel_booking(booking_id, OWNER)

    results = await asyncio.gather(
        attempt(session_factory, dispatcher, coordinator, complete),
        attempt(session_factory, dispatcher, coordinator, cancel),
    )

    assert sorted(results) == ["ok", "rejected"]

    async with session_factory() as session:
        booking = await BookingRepository(session).get_by_id(booking_id)
        assert booking.status in ("completed", "cancelled")
        if booking.status == "cancelled":
            assert booking.cost is None


@pytest.mark.asyncio
async def test_many_concurrent_starts(session_factory, coordinator_and_dispatcher, create_request):
    coordinator, dispatcher = coordinator_and_dispatcher
    booking_id = await create_booking(session_factory, dispatcher, create_request, BookingStatus.CONFIRMED)

    async def start(service):
        await service.start_booking(booking_id, OWNER)

    results = await asyncio.gather(
        *(attempt(session_factory, dispatcher, coordinator, start) for _ in range(10))
    )

    assert results.count("ok") == 1
    assert results.count("rejected") == 9

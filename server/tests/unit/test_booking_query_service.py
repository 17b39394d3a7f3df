"""Unit tests for the booking query service."""

from datetime import datetime, timedelta, timezone

import pytest

from fleet_booking.models.booking import Booking
from fleet_booking.schemas.booking import BookingFilter
from fleet_booking.services.booking_query_service import BookingQueryService, clamp_page

START = datetime(2030, 3, 1, 8, 0, tzinfo=timezone.utc)


async def seed(session, count: int, **overrides) -> None:
    for i in range(count):
        values = {
            "user_id": "user-1",
            "vehicle_id": f"vehicle-{i % 3}",
            "status": "pending",
            "start_time": START + timedelta(hours=i),
            "pickup_latitude": 48.8566,
            "pickup_longitude": 2.3522,
            "pickup_address": "Hotel de Ville, Paris",
            "created_at": START + timedelta(seconds=i),
        }
        values.update(overrides)
        session.add(Booking(**values))
    await session.commit()


@pytest.fixture
def query_service(test_session):
    return BookingQueryService(test_session)


class TestClampPage:
    @pytest.mark.parametrize(
        "limit,offset,expected",
        [
            (0, 0, (10, 0)),
            (-3, 5, (10, 5)),
            (500, 0, (100, 0)),
            (100, 0, (100, 0)),
            (25, -7, (25, 0)),
            (1, 3, (1, 3)),
        ],
    )
    def test_clamp(self, limit, offset, expected):
        assert clamp_page(limit, offset) == expected


@pytest.mark.asyncio
async def test_zero_limit_defaults_to_ten(query_service, test_session):
    await seed(test_session, 15)

    page = await query_service.list_bookings(BookingFilter(limit=0))

    assert page.limit == 10
    assert len(page.bookings) == 10
    assert page.total == 15


@pytest.mark.asyncio
async def test_large_limit_clamped(query_service, test_session):
    await seed(test_session, 105)

    page = await query_service.list_bookings(BookingFilter(limit=500))

    assert page.limit == 100
    assert len(page.bookings) == 100
    assert page.total == 105


@pytest.mark.asyncio
async def test_total_independent_of_page(query_service, test_session):
    await seed(test_session, 12)
    await seed(test_session, 4, user_id="user-2")

    first = await query_service.list_bookings(BookingFilter(user_id="user-1", limit=5, offset=0))
    last = await query_service.list_bookings(BookingFilter(user_id="user-1", limit=5, offset=10))
    beyond = await query_service.list_bookings(BookingFilter(user_id="user-1", limit=5, offset=50))

    assert first.total == last.total == beyond.total == 12
    assert len(last.bookings) == 2
    assert beyond.bookings == []


@pytest.mark.asyncio
async def test_negative_offset(query_service, test_session):
    await seed(test_session, 3)

    page = await query_service.list_bookings(BookingFilter(offset=-1))

    assert page.offset == 0
    assert len(page.bookings) == 3


@pytest.mark.asyncio
async def test_list_newest_first(query_service, test_session):
    await seed(test_session, 3)

    page = await query_service.list_bookings(BookingFilter())

    created = [b.created_at for b in page.bookings]
    assert created == sorted(created, reverse=True)


@pytest.mark.asyncio
async def test_user_and_vehicle_bookings_are_clamped(query_service, test_session):
    await seed(test_session, 120, vehicle_id="vehicle-x")

    assert len(await query_service.get_user_bookings("user-1", 0, 0)) == 10
    assert len(await query_service.get_vehicle_bookings("vehicle-x", 1000, 0)) == 100
    assert len(await query_service.get_vehicle_bookings("vehicle-x", 10, 115)) == 5


@pytest.mark.asyncio
async def test_active_bookings(query_service, test_session):
    await seed(test_session, 2, status="confirmed")
    await seed(test_session, 1, status="active")
    await seed(test_session, 3, status="cancelled")

    active = await query_service.get_active_bookings()

    assert {b.status for b in active} == {"confirmed", "active"}
    assert len(active) == 3


@pytest.mark.asyncio
async def test_stats(query_service, test_session):
    await seed(test_session, 1, status="completed", distance=10.0, cost=15.0)
    await seed(test_session, 1, status="completed", distance=20.0, cost=30.0)
    await seed(test_session, 1, status="completed")

    stats = await query_service.get_stats()

    assert stats.completed_bookings == 3
    assert stats.total_revenue == pytest.approx(45.0)
    assert stats.average_distance == pytest.approx(15.0)

"""Property-based tests for booking lifecycle invariants."""

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from fleet_booking.clients import StubUserValidator, StubVehicleCoordinator
from fleet_booking.core.exceptions import InvalidTransitionError
from fleet_booking.models.booking import BookingStatus, can_transition
from fleet_booking.schemas.booking import CompleteBookingRequest
from fleet_booking.services.booking_service import BookingService, calculate_cost

OWNER = "user-1"

# Operation name -> status it tries to reach
OPERATIONS = {
    "confirm": BookingStatus.CONFIRMED,
    "start": BookingStatus.ACTIVE,
    "complete": BookingStatus.COMPLETED,
    "cancel": BookingStatus.CANCELLED,
}

operation_sequences = st.lists(st.sampled_from(sorted(OPERATIONS)), min_size=1, max_size=8)
distances = st.floats(min_value=0, max_value=10_000, allow_nan=False, allow_infinity=False)
durations = st.integers(min_value=0, max_value=100_000)


class NullDispatcher:
    def submit(self, booking_id, vehicle_id, status):
        return True


async def apply(service, booking_id: str, operation: str) -> None:
    if operation == "confirm":
        await service.confirm_booking(booking_id)
    elif operation == "start":
        await service.start_booking(booking_id, OWNER)
    elif operation == "complete":
        await service.complete_booking(booking_id, OWNER, CompleteBookingRequest(distance=1.0, duration=1))
    else:
        await service.cancel_booking(booking_id, OWNER)


@pytest.mark.asyncio
@settings(max_examples=40, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(operations=operation_sequences)
async def test_status_only_moves_along_allowed_edges(test_session, create_request, operations):
    """Each operation succeeds exactly when its edge exists; otherwise nothing changes."""
    service = BookingService(test_session, StubUserValidator(), StubVehicleCoordinator(), NullDispatcher())
    booking = await service.create_booking(create_request)
    status = BookingStatus.PENDING

    for operation in operations:
        target = OPERATIONS[operation]
        if can_transition(status, target):
            await apply(service, booking.id, operation)
            status = target
        else:
            with pytest.raises(InvalidTransitionError):
                await apply(service, booking.id, operation)

        current = await service.get_booking(booking.id)
        assert current.status == status.value
        # Trip outcome only exists once completed
        if status != BookingStatus.COMPLETED:
            assert current.cost is None
            assert current.end_time is None


@given(distance=distances, duration=durations)
def test_cost_formula(distance, duration):
    assert calculate_cost(distance, duration) == distance * 1.5 + duration * 0.25


@given(distance=distances)
def test_cost_without_duration(distance):
    assert calculate_cost(distance, None) == distance * 1.5


@given(duration=st.one_of(st.none(), durations))
def test_no_cost_without_distance(duration):
    assert calculate_cost(None, duration) is None


@given(distance=distances, duration=durations)
def test_cost_is_never_negative(distance, duration):
    assert calculate_cost(distance, duration) >= 0

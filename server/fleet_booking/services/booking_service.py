"""Booking lifecycle operations."""

from datetime import datetime, timezone
from typing import Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from ..clients.interfaces import AdapterError, UserValidator, VehicleCoordinator, VehicleStatus
from ..core.exceptions import (
    InvalidTransitionError,
    InvalidUserError,
    NotFoundError,
    ProblemDetailsException,
    TooEarlyError,
    UnauthorizedError,
    VehicleUnavailableError,
)
from ..core.observability import get_logger, metrics_collector
from ..models.booking import TERMINAL_STATUSES, Booking, BookingStatus, as_utc, can_transition, sources_for
from ..repositories.booking_repository import BookingRepository
from ..schemas.booking import CompleteBookingRequest, CreateBookingRequest, UpdateBookingRequest

logger = get_logger(__name__)

RATE_PER_KM = 1.50
RATE_PER_MINUTE = 0.25


def calculate_cost(distance: Optional[float], duration: Optional[int]) -> Optional[float]:
    """
    Price a finished trip.

    No distance means no price. Duration is billed on top of distance when
    reported. The result is not rounded.
    """
    if distance is None:
        return None
    cost = distance * RATE_PER_KM
    if duration is not None:
        cost += duration * RATE_PER_MINUTE
    return cost


class StatusDispatcher(Protocol):
    def submit(self, booking_id: str, vehicle_id: str, status: VehicleStatus) -> bool:
        ...


class BookingService:
    """
    Service for the booking state machine.

    Every status change is a conditional update in the repository, so two
    requests racing on the same booking cannot both win. Vehicle status
    propagation happens after commit through the dispatcher and never
    affects the outcome of the operation.
    """

    def __init__(
        self,
        db: AsyncSession,
        user_validator: UserValidator,
        vehicle_coordinator: VehicleCoordinator,
        dispatcher: StatusDispatcher,
    ):
        self.db = db
        self.repository = BookingRepository(db)
        self.user_validator = user_validator
        self.vehicle_coordinator = vehicle_coordinator
        self.dispatcher = dispatcher

    async def create_booking(self, request: CreateBookingRequest) -> Booking:
        """
        Create a pending booking after checking the user and the vehicle.

        Raises:
            InvalidUserError: If the user may not book or the user service is unreachable
            VehicleUnavailableError: If the vehicle is taken or the vehicle service is unreachable
        """
        try:
            await self.user_validator.validate(request.user_id)
        except AdapterError as e:
            raise self._rejected(
                InvalidUserError(request.user_id, reason=f"user service unavailable: {e.reason}", retryable=True)
            ) from e
        except InvalidUserError as e:
            raise self._rejected(e)

        try:
            available = await self.vehicle_coordinator.is_available(request.vehicle_id, request.start_time)
        except AdapterError as e:
            raise self._rejected(
                VehicleUnavailableError(
                    request.vehicle_id,
                    request.start_time,
                    reason=f"vehicle service unavailable: {e.reason}",
                    retryable=True,
                )
            ) from e

        if not available:
            raise self._rejected(VehicleUnavailableError(request.vehicle_id, request.start_time))

        booking = Booking(
            user_id=request.user_id,
            vehicle_id=request.vehicle_id,
            status=BookingStatus.PENDING.value,
            start_time=request.start_time,
            pickup_latitude=request.pickup_latitude,
            pickup_longitude=request.pickup_longitude,
            pickup_address=request.pickup_address,
            dropoff_latitude=request.dropoff_latitude,
            dropoff_longitude=request.dropoff_longitude,
            dropoff_address=request.dropoff_address,
        )
        await self.repository.create(booking)
        await self.db.commit()

        metrics_collector.record_booking_created()
        logger.info(
            "Booking created",
            booking_id=booking.id,
            user_id=booking.user_id,
            vehicle_id=booking.vehicle_id,
            start_time=booking.start_time.isoformat(),
        )
        return booking

    async def confirm_booking(self, booking_id: str) -> Booking:
        """
        Apply an external confirmation to a pending booking.

        Confirmation comes from outside the booking owner's control, so there
        is no ownership check, and the vehicle is not touched.
        """
        booking = await self._get_or_raise(booking_id)
        await self._transition(booking, BookingStatus.CONFIRMED)
        await self.db.commit()
        return await self._get_or_raise(booking_id)

    async def start_booking(self, booking_id: str, user_id: str) -> None:
        """
        Start a confirmed booking once its start time has come.

        Raises:
            NotFoundError, UnauthorizedError, InvalidTransitionError, TooEarlyError
        """
        booking = await self._get_owned(booking_id, user_id)
        self._check_transition(booking, BookingStatus.ACTIVE)

        start_time = as_utc(booking.start_time)
        if datetime.now(timezone.utc) < start_time:
            raise self._rejected(TooEarlyError(booking_id, start_time))

        await self._transition(booking, BookingStatus.ACTIVE)
        await self.db.commit()
        self._propagate(booking, VehicleStatus.IN_USE)

    async def complete_booking(
        self,
        booking_id: str,
        user_id: str,
        request: Optional[CompleteBookingRequest] = None,
    ) -> None:
        """
        Finish an active booking, recording the trip outcome and its cost.

        Dropoff fields left out of the request keep their planned values.
        """
        request = request or CompleteBookingRequest()
        booking = await self._get_owned(booking_id, user_id)
        self._check_transition(booking, BookingStatus.COMPLETED)

        fields = request.model_dump(
            include={"dropoff_latitude", "dropoff_longitude", "dropoff_address"},
            exclude_none=True,
        )
        fields.update(
            end_time=datetime.now(timezone.utc),
            distance=request.distance,
            duration=request.duration,
            cost=calculate_cost(request.distance, request.duration),
        )

        await self._transition(booking, BookingStatus.COMPLETED, fields)
        await self.db.commit()
        self._propagate(booking, VehicleStatus.AVAILABLE)

    async def cancel_booking(self, booking_id: str, user_id: str) -> None:
        """Cancel a booking that has not reached a terminal status."""
        booking = await self._get_owned(booking_id, user_id)
        self._check_transition(booking, BookingStatus.CANCELLED)

        await self._transition(booking, BookingStatus.CANCELLED)
        await self.db.commit()
        self._propagate(booking, VehicleStatus.AVAILABLE)

    async def update_booking(self, booking_id: str, user_id: str, request: UpdateBookingRequest) -> Booking:
        """
        Change the planned dropoff of a booking that is still in progress.

        Only the fields present in the request body are written.
        """
        booking = await self._get_owned(booking_id, user_id)
        current = booking.booking_status
        if current in TERMINAL_STATUSES:
            raise self._rejected(
                InvalidTransitionError(
                    booking_id,
                    current.value,
                    current.value,
                    detail=f"Booking '{booking_id}' is {current.value} and can no longer be changed",
                )
            )

        patch = request.model_dump(exclude_unset=True, exclude_none=True)
        updated = await self.repository.update(booking_id, patch)
        await self.db.commit()

        logger.info("Booking updated", booking_id=booking_id, fields=sorted(patch))
        return updated

    async def get_booking(self, booking_id: str) -> Booking:
        return await self._get_or_raise(booking_id)

    async def _get_or_raise(self, booking_id: str) -> Booking:
        booking = await self.repository.get_by_id(booking_id)
        if booking is None:
            raise self._rejected(NotFoundError("booking", booking_id))
        return booking

    async def _get_owned(self, booking_id: str, user_id: str) -> Booking:
        """Ownership is checked before status so non-owners learn nothing about it."""
        booking = await self._get_or_raise(booking_id)
        if booking.user_id != user_id:
            raise self._rejected(UnauthorizedError(booking_id, user_id))
        return booking

    def _check_transition(self, booking: Booking, target: BookingStatus) -> None:
        if not can_transition(booking.booking_status, target):
            raise self._rejected(InvalidTransitionError(booking.id, booking.status, target.value))

    async def _transition(self, booking: Booking, target: BookingStatus, fields: Optional[dict] = None) -> None:
        """Run the conditional update; losing a race reports the status that won."""
        self._check_transition(booking, target)
        booking_id, from_status = booking.id, booking.status

        applied = await self.repository.transition(booking_id, sources_for(target), target, fields)
        if not applied:
            current = await self.repository.get_by_id(booking_id)
            if current is None:
                raise self._rejected(NotFoundError("booking", booking_id))
            raise self._rejected(InvalidTransitionError(booking_id, current.status, target.value))

        metrics_collector.record_transition(from_status, target.value)
        logger.info(
            "Booking status changed",
            booking_id=booking.id,
            from_status=from_status,
            to_status=target.value,
        )

    def _propagate(self, booking: Booking, status: VehicleStatus) -> None:
        self.dispatcher.submit(booking.id, booking.vehicle_id, status)

    @staticmethod
    def _rejected(error: ProblemDetailsException) -> ProblemDetailsException:
        metrics_collector.record_rejection(error.code)
        logger.info("Booking operation rejected", code=error.code, detail=error.detail)
        return error

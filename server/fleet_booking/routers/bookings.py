"""Booking router: lifecycle commands and read paths."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Body, Query, Response, status

from ..core.dependencies import ActingUser, LifecycleService, QueryService
from ..models.booking import BookingStatus
from ..schemas.booking import (
    Booking,
    BookingFilter,
    BookingListResponse,
    BookingStats,
    CompleteBookingRequest,
    CreateBookingRequest,
    UpdateBookingRequest,
)
from ..schemas.common import PROBLEM_RESPONSES
from ..services.booking_query_service import BookingQueryService
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["bookings"], responses=PROBLEM_RESPONSES)

# Define dependencies to avoid B008 linting errors
COMPLETE_BODY = Body(None)


def _convert_booking_to_schema(booking_model) -> Booking:
    """Convert booking model to schema."""
    return Booking.model_validate(booking_model)


def _convert_bookings(booking_models) -> list[Booking]:
    return [_convert_booking_to_schema(b) for b in booking_models]


@router.post("/bookings", response_model=Booking, status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: CreateBookingRequest,
    service: BookingService = LifecycleService,
) -> Booking:
    """Create a pending booking after validating the user and the vehicle."""
    booking = await service.create_booking(request)

    logger.info(
        "Booking created successfully",
        extra={
            "booking_id": booking.id,
            "user_id": request.user_id,
            "vehicle_id": request.vehicle_id,
        },
    )
    return _convert_booking_to_schema(booking)


@router.get("/bookings", response_model=BookingListResponse)
async def list_bookings(
    user_id: Optional[str] = None,
    vehicle_id: Optional[str] = None,
    booking_status: Optional[BookingStatus] = Query(None, alias="status"),
    start_from: Optional[datetime] = None,
    start_to: Optional[datetime] = None,
    limit: int = 10,
    offset: int = 0,
    queries: BookingQueryService = QueryService,
) -> BookingListResponse:
    """
    List bookings matching every given filter, newest first.

    ``total`` counts all matches regardless of the page.
    """
    booking_filter = BookingFilter(
        user_id=user_id,
        vehicle_id=vehicle_id,
        status=booking_status,
        start_from=start_from,
        start_to=start_to,
        limit=limit,
        offset=offset,
    )
    return await queries.list_bookings(booking_filter)


@router.get("/bookings/active", response_model=list[Booking])
async def get_active_bookings(queries: BookingQueryService = QueryService) -> list[Booking]:
    """Confirmed and active bookings ordered by start time."""
    return _convert_bookings(await queries.get_active_bookings())


@router.get("/bookings/stats", response_model=BookingStats, response_model_by_alias=True)
async def get_booking_stats(
    user_id: Optional[str] = None,
    queries: BookingQueryService = QueryService,
) -> BookingStats:
    """Aggregate counts, revenue and averages, optionally for one user."""
    return await queries.get_stats(user_id)


@router.get("/bookings/{booking_id}", response_model=Booking)
async def get_booking(booking_id: str, service: BookingService = LifecycleService) -> Booking:
    return _convert_booking_to_schema(await service.get_booking(booking_id))


@router.put("/bookings/{booking_id}", response_model=Booking)
async def update_booking(
    booking_id: str,
    request: UpdateBookingRequest,
    user_id: str = ActingUser,
    service: BookingService = LifecycleService,
) -> Booking:
    """Change the planned dropoff of one of the caller's bookings."""
    booking = await service.update_booking(booking_id, user_id, request)
    return _convert_booking_to_schema(booking)


@router.post("/bookings/{booking_id}/start", status_code=status.HTTP_204_NO_CONTENT)
async def start_booking(
    booking_id: str,
    user_id: str = ActingUser,
    service: BookingService = LifecycleService,
) -> Response:
    await service.start_booking(booking_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/bookings/{booking_id}/complete", status_code=status.HTTP_204_NO_CONTENT)
async def complete_booking(
    booking_id: str,
    request: Optional[CompleteBookingRequest] = COMPLETE_BODY,
    user_id: str = ActingUser,
    service: BookingService = LifecycleService,
) -> Response:
    """Finish an active booking; cost is derived from distance and duration."""
    await service.complete_booking(booking_id, user_id, request)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/bookings/{booking_id}/cancel", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_booking(
    booking_id: str,
    user_id: str = ActingUser,
    service: BookingService = LifecycleService,
) -> Response:
    await service.cancel_booking(booking_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/users/{user_id}/bookings", response_model=list[Booking])
async def get_user_bookings(
    user_id: str,
    limit: int = 10,
    offset: int = 0,
    queries: BookingQueryService = QueryService,
) -> list[Booking]:
    return _convert_bookings(await queries.get_user_bookings(user_id, limit, offset))


@router.get("/vehicles/{vehicle_id}/bookings", response_model=list[Booking])
async def get_vehicle_bookings(
    vehicle_id: str,
    limit: int = 10,
    offset: int = 0,
    queries: BookingQueryService = QueryService,
) -> list[Booking]:
    return _convert_bookings(await queries.get_vehicle_bookings(vehicle_id, limit, offset))

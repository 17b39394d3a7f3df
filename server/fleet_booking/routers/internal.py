"""Endpoints called by other platform services, not by end users."""

import logging

from fastapi import APIRouter

from ..core.dependencies import LifecycleService
from ..schemas.booking import Booking
from ..schemas.common import PROBLEM_RESPONSES
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/internal", tags=["internal"], responses=PROBLEM_RESPONSES)


@router.post("/bookings/{booking_id}/confirmation", response_model=Booking)
async def confirm_booking(booking_id: str, service: BookingService = LifecycleService) -> Booking:
    """
    Deliver the confirmation of a pending booking.

    Sent by the service that settles payment; moves the booking from
    pending to confirmed.
    """
    booking = await service.confirm_booking(booking_id)
    logger.info("Booking confirmation applied", extra={"booking_id": booking_id})
    return Booking.model_validate(booking)

"""Business logic layer."""

from .booking_query_service import BookingQueryService, clamp_page
from .booking_service import BookingService, calculate_cost

__all__ = ["BookingQueryService", "BookingService", "calculate_cost", "clamp_page"]

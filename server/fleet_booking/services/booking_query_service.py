"""Read paths over bookings: listing, per-owner views, reporting."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.booking import Booking
from ..repositories.booking_repository import BookingRepository
from ..schemas.booking import BookingFilter, BookingListResponse, BookingStats
from ..schemas.booking import Booking as BookingSchema

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def clamp_page(limit: int, offset: int) -> tuple[int, int]:
    """Non-positive limits fall back to the default; large ones are capped."""
    if limit <= 0:
        limit = DEFAULT_LIMIT
    limit = min(limit, MAX_LIMIT)
    return limit, max(offset, 0)


class BookingQueryService:
    """Service for booking queries. Never writes."""

    def __init__(self, db: AsyncSession):
        self.repository = BookingRepository(db)

    async def list_bookings(self, booking_filter: BookingFilter) -> BookingListResponse:
        """
        Return one page of bookings plus the total number of matches.

        The total honours every predicate of the filter but not the page.
        """
        limit, offset = clamp_page(booking_filter.limit, booking_filter.offset)
        page_filter = booking_filter.model_copy(update={"limit": limit, "offset": offset})

        bookings = await self.repository.list(page_filter)
        total = await self.repository.count(page_filter)
        return BookingListResponse(
            bookings=[BookingSchema.model_validate(b) for b in bookings],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def get_user_bookings(self, user_id: str, limit: int = DEFAULT_LIMIT, offset: int = 0) -> list[Booking]:
        limit, offset = clamp_page(limit, offset)
        return await self.repository.get_by_user(user_id, limit, offset)

    async def get_vehicle_bookings(self, vehicle_id: str, limit: int = DEFAULT_LIMIT, offset: int = 0) -> list[Booking]:
        limit, offset = clamp_page(limit, offset)
        return await self.repository.get_by_vehicle(vehicle_id, limit, offset)

    async def get_active_bookings(self) -> list[Booking]:
        """Confirmed and active bookings, soonest start first."""
        return await self.repository.get_active()

    async def get_stats(self, user_id: Optional[str] = None) -> BookingStats:
        return await self.repository.get_stats(user_id)

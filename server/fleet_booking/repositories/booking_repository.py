"""
Booking store -- the only component that talks SQL.

The repository receives an ``AsyncSession`` (unit of work) and never commits;
the service layer owns transaction boundaries.

Status changes go through :meth:`BookingRepository.transition`, a conditional
``UPDATE ... WHERE id = :id AND status IN (...)``. The affected-row count tells
the caller whether it won; two concurrent transitions out of the same state can
never both succeed.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import Select, and_, case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.booking import ACTIVE_STATUSES, Booking, BookingStatus
from ..schemas.booking import BookingFilter, BookingStats

# Columns a sparse patch may touch. Status only changes through transition()
PATCHABLE_FIELDS = frozenset({
    "end_time",
    "dropoff_latitude",
    "dropoff_longitude",
    "dropoff_address",
    "distance",
    "duration",
    "cost",
})


def _status_value(status: BookingStatus | str) -> str:
    return status.value if isinstance(status, BookingStatus) else BookingStatus(status).value


class BookingRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ── Writes ────────────────────────────────────────────────────────

    async def create(self, booking: Booking) -> Booking:
        self.session.add(booking)
        await self.session.flush()
        return booking

    async def update(self, booking_id: str, patch: Mapping[str, Any]) -> Optional[Booking]:
        """
        Apply a sparse patch: only the keys present in ``patch`` are written.

        Returns the refreshed booking, or None if it does not exist.

        Raises:
            ValueError: If the patch names a column that cannot be changed
        """
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")

        values = dict(patch)

        if values:
            values["updated_at"] = datetime.now(timezone.utc)
            await self.session.execute(
                update(Booking)
                .where(Booking.id == booking_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )

        return await self.get_by_id(booking_id)

    async def transition(
        self,
        booking_id: str,
        from_statuses: Iterable[BookingStatus],
        to_status: BookingStatus,
        fields: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """
        Move a booking to ``to_status`` only if it is currently in one of
        ``from_statuses``, writing ``fields`` in the same statement.

        Returns True when exactly this call changed the row.
        """
        extra = dict(fields or {})
        unknown = set(extra) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")

        result = await self.session.execute(
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.status.in_([_status_value(s) for s in from_statuses]),
            )
            .values(
                status=to_status.value,
                updated_at=datetime.now(timezone.utc),
                **extra,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def delete(self, booking_id: str) -> bool:
        result = await self.session.execute(
            delete(Booking)
            .where(Booking.id == booking_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    # ── Reads ─────────────────────────────────────────────────────────

    async def get_by_id(self, booking_id: str) -> Optional[Booking]:
        # populate_existing: conditional updates bypass the identity map
        result = await self.session.execute(
            select(Booking)
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list(self, booking_filter: BookingFilter) -> list[Booking]:
        query = (
            self._apply_filter(select(Booking), booking_filter)
            .order_by(Booking.created_at.desc(), Booking.id)
            .limit(booking_filter.limit)
            .offset(booking_filter.offset)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count(self, booking_filter: BookingFilter) -> int:
        """Count matches of every predicate; limit and offset are ignored."""
        query = self._apply_filter(select(func.count()).select_from(Booking), booking_filter)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def get_by_user(self, user_id: str, limit: int, offset: int) -> list[Booking]:
        return await self.list(BookingFilter(user_id=user_id, limit=limit, offset=offset))

    async def get_by_vehicle(self, vehicle_id: str, limit: int, offset: int) -> list[Booking]:
        return await self.list(BookingFilter(vehicle_id=vehicle_id, limit=limit, offset=offset))

    async def get_active(self) -> list[Booking]:
        result = await self.session.execute(
            select(Booking)
            .where(Booking.status.in_([s.value for s in ACTIVE_STATUSES]))
            .order_by(Booking.start_time.asc(), Booking.id)
        )
        return list(result.scalars().all())

    async def get_stats(self, user_id: Optional[str] = None) -> BookingStats:
        """
        Aggregate counts, revenue and averages.

        AVG skips NULLs, so bookings without a distance or duration do not
        pull the averages towards zero.
        """
        def count_status(status: BookingStatus):
            return func.coalesce(func.sum(case((Booking.status == status.value, 1), else_=0)), 0)

        query = select(
            func.count(Booking.id),
            count_status(BookingStatus.ACTIVE),
            count_status(BookingStatus.COMPLETED),
            count_status(BookingStatus.CANCELLED),
            func.coalesce(func.sum(Booking.cost), 0.0),
            func.coalesce(func.avg(Booking.distance), 0.0),
            func.coalesce(func.avg(Booking.duration), 0.0),
        ).select_from(Booking)
        if user_id is not None:
            query = query.where(Booking.user_id == user_id)

        row = (await self.session.execute(query)).one()
        return BookingStats(
            total_bookings=int(row[0] or 0),
            active_bookings=int(row[1] or 0),
            completed_bookings=int(row[2] or 0),
            cancelled_bookings=int(row[3] or 0),
            total_revenue=float(row[4] or 0.0),
            average_distance=float(row[5] or 0.0),
            average_duration=float(row[6] or 0.0),
        )

    @staticmethod
    def _apply_filter(query: Select, booking_filter: BookingFilter) -> Select:
        conditions = []
        if booking_filter.user_id is not None:
            conditions.append(Booking.user_id == booking_filter.user_id)
        if booking_filter.vehicle_id is not None:
            conditions.append(Booking.vehicle_id == booking_filter.vehicle_id)
        if booking_filter.status is not None:
            conditions.append(Booking.status == booking_filter.status.value)
        if booking_filter.start_from is not None:
            conditions.append(Booking.start_time >= booking_filter.start_from)
        if booking_filter.start_to is not None:
            conditions.append(Booking.start_time <= booking_filter.start_to)

        if conditions:
            query = query.where(and_(*conditions))
        return query

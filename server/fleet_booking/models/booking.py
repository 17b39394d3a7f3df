"""Booking model definition and lifecycle rules."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlalchemy import CheckConstraint, DateTime, Float, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class BookingStatus(str, Enum):
    """Booking status enumeration."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Allowed edges of the booking state machine: current status -> next statuses
BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.ACTIVE, BookingStatus.CANCELLED}),
    BookingStatus.ACTIVE: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in BOOKING_TRANSITIONS.items() if not targets
)

# Bookings that hold a vehicle or are about to
ACTIVE_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.ACTIVE)


def sources_for(target: BookingStatus) -> frozenset[BookingStatus]:
    """Return every status from which ``target`` can be reached in one step."""
    return frozenset(
        status for status, targets in BOOKING_TRANSITIONS.items() if target in targets
    )


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    """Return True if ``current -> target`` is an edge of the state machine."""
    return target in BOOKING_TRANSITIONS.get(BookingStatus(current), frozenset())


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise a datetime to timezone-aware UTC; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _new_booking_id() -> str:
    return str(uuid4())


_STATUS_VALUES = ", ".join(f"'{status.value}'" for status in BookingStatus)


class Booking(Base):
    """Booking entity representing a reservation of a vehicle by a user."""

    __tablename__ = "bookings"

    # Primary key
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_booking_id)

    # References to records owned by the user and vehicle services
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    vehicle_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=BookingStatus.PENDING.value,
        index=True
    )

    # Schedule
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Pickup is required at creation
    pickup_latitude: Mapped[float] = mapped_column(Float, nullable=False)
    pickup_longitude: Mapped[float] = mapped_column(Float, nullable=False)
    pickup_address: Mapped[str] = mapped_column(Text, nullable=False)

    # Dropoff is planning data until the booking completes
    dropoff_latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    dropoff_longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    dropoff_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Trip outcome, set on completion
    distance: Mapped[Optional[float]] = mapped_column(Float, nullable=True)  # kilometers
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # minutes
    cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now()
    )

    # Constraints
    __table_args__ = (
        CheckConstraint(f"status IN ({_STATUS_VALUES})", name="ck_booking_status_valid"),
        CheckConstraint("length(pickup_address) > 0", name="ck_booking_pickup_address_not_empty"),
        CheckConstraint(
            "pickup_latitude >= -90 AND pickup_latitude <= 90",
            name="ck_booking_pickup_latitude_range"
        ),
        CheckConstraint(
            "pickup_longitude >= -180 AND pickup_longitude <= 180",
            name="ck_booking_pickup_longitude_range"
        ),
        CheckConstraint(
            "dropoff_latitude IS NULL OR (dropoff_latitude >= -90 AND dropoff_latitude <= 90)",
            name="ck_booking_dropoff_latitude_range"
        ),
        CheckConstraint(
            "dropoff_longitude IS NULL OR (dropoff_longitude >= -180 AND dropoff_longitude <= 180)",
            name="ck_booking_dropoff_longitude_range"
        ),
        CheckConstraint(
            "status = 'completed' OR (end_time IS NULL AND distance IS NULL "
            "AND duration IS NULL AND cost IS NULL)",
            name="ck_booking_outcome_only_when_completed"
        ),
        Index("ix_bookings_user_created", "user_id", "created_at"),
    )

    @property
    def booking_status(self) -> BookingStatus:
        """Status as the enum member."""
        return BookingStatus(self.status)

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, user_id={self.user_id}, vehicle_id={self.vehicle_id}, "
            f"status={self.status}, start_time={self.start_time})>"
        )

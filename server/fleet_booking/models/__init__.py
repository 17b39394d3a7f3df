"""Models module exporting all database models."""

from .booking import (
    ACTIVE_STATUSES,
    BOOKING_TRANSITIONS,
    TERMINAL_STATUSES,
    Booking,
    BookingStatus,
    can_transition,
    sources_for,
)

__all__ = [
    # Booking entity
    "Booking",
    "BookingStatus",

    # Lifecycle rules
    "BOOKING_TRANSITIONS",
    "TERMINAL_STATUSES",
    "ACTIVE_STATUSES",
    "can_transition",
    "sources_for",
]

"""Persistence layer."""

from .booking_repository import PATCHABLE_FIELDS, BookingRepository

__all__ = ["BookingRepository", "PATCHABLE_FIELDS"]

"""Booking-related Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.booking import BookingStatus, as_utc


class CreateBookingRequest(BaseModel):
    """Request schema for creating a booking."""

    user_id: str = Field(..., min_length=1, max_length=64, description="Booking owner")
    vehicle_id: str = Field(..., min_length=1, max_length=64, description="Vehicle to book")
    start_time: datetime = Field(..., description="Scheduled start (ISO 8601, naive means UTC)")
    pickup_latitude: float = Field(..., ge=-90, le=90)
    pickup_longitude: float = Field(..., ge=-180, le=180)
    pickup_address: str = Field(..., min_length=1, description="Pickup address")
    dropoff_latitude: Optional[float] = Field(None, ge=-90, le=90)
    dropoff_longitude: Optional[float] = Field(None, ge=-180, le=180)
    dropoff_address: Optional[str] = Field(None, description="Planned dropoff address")

    @field_validator("start_time")
    @classmethod
    def normalise_start_time(cls, v: datetime) -> datetime:
        """Store every schedule in UTC."""
        return as_utc(v)


class UpdateBookingRequest(BaseModel):
    """Sparse planning update. Status, timing and billing are not writable here."""

    model_config = ConfigDict(extra="forbid")

    dropoff_latitude: Optional[float] = Field(None, ge=-90, le=90)
    dropoff_longitude: Optional[float] = Field(None, ge=-180, le=180)
    dropoff_address: Optional[str] = Field(None, min_length=1)


class CompleteBookingRequest(BaseModel):
    """Request schema for completing a booking."""

    dropoff_latitude: Optional[float] = Field(None, ge=-90, le=90)
    dropoff_longitude: Optional[float] = Field(None, ge=-180, le=180)
    dropoff_address: Optional[str] = Field(None, min_length=1)
    distance: Optional[float] = Field(None, ge=0, description="Distance driven in kilometers")
    duration: Optional[int] = Field(None, ge=0, description="Trip duration in minutes")


class BookingFilter(BaseModel):
    """Filter predicates for booking queries. All are optional and AND-combined."""

    user_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    status: Optional[BookingStatus] = None
    start_from: Optional[datetime] = Field(None, description="start_time lower bound (inclusive)")
    start_to: Optional[datetime] = Field(None, description="start_time upper bound (inclusive)")
    limit: int = 10
    offset: int = 0

    @field_validator("start_from", "start_to")
    @classmethod
    def normalise_bounds(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


class Booking(BaseModel):
    """Booking response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Unique booking ID")
    user_id: str
    vehicle_id: str
    status: BookingStatus
    start_time: datetime
    end_time: Optional[datetime] = None
    pickup_latitude: float
    pickup_longitude: float
    pickup_address: str
    dropoff_latitude: Optional[float] = None
    dropoff_longitude: Optional[float] = None
    dropoff_address: Optional[str] = None
    distance: Optional[float] = None
    duration: Optional[int] = None
    cost: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("start_time", "end_time", "created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


class BookingListResponse(BaseModel):
    """Paginated booking list."""

    bookings: list[Booking]
    total: int = Field(..., ge=0, description="Matches ignoring limit and offset")
    limit: int
    offset: int


class BookingStats(BaseModel):
    """Aggregate booking statistics."""

    model_config = ConfigDict(populate_by_name=True)

    total_bookings: int = Field(0, serialization_alias="totalBookings")
    active_bookings: int = Field(0, serialization_alias="activeBookings")
    completed_bookings: int = Field(0, serialization_alias="completedBookings")
    cancelled_bookings: int = Field(0, serialization_alias="cancelledBookings")
    total_revenue: float = Field(0.0, serialization_alias="totalRevenue")
    average_distance: float = Field(0.0, serialization_alias="averageDistance")
    average_duration: float = Field(0.0, serialization_alias="averageDuration")

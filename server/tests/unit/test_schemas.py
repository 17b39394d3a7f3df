"""Unit tests for request and response schemas."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from fleet_booking.schemas.booking import (
    BookingFilter,
    BookingStats,
    CompleteBookingRequest,
    CreateBookingRequest,
    UpdateBookingRequest,
)


class TestCreateBookingRequest:
    def test_valid(self, sample_booking_data):
        request = CreateBookingRequest(**sample_booking_data)
        assert request.user_id == "user-1"
        assert request.start_time.tzinfo is not None

    def test_naive_start_time_is_utc(self, sample_booking_data):
        sample_booking_data["start_time"] = "2030-01-01T10:00:00"
        request = CreateBookingRequest(**sample_booking_data)
        assert request.start_time == datetime(2030, 1, 1, 10, tzinfo=timezone.utc)

    def test_offset_start_time_is_converted(self, sample_booking_data):
        sample_booking_data["start_time"] = "2030-01-01T12:00:00+02:00"
        request = CreateBookingRequest(**sample_booking_data)
        assert request.start_time == datetime(2030, 1, 1, 10, tzinfo=timezone.utc)
        assert request.start_time.utcoffset() == timedelta(0)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("pickup_latitude", 90.5),
            ("pickup_latitude", -91),
            ("pickup_longitude", 180.1),
            ("dropoff_latitude", -90.01),
            ("dropoff_longitude", -181),
        ],
    )
    def test_coordinates_out_of_range(self, sample_booking_data, field, value):
        sample_booking_data[field] = value
        with pytest.raises(ValidationError):
            CreateBookingRequest(**sample_booking_data)

    def test_boundary_coordinates_accepted(self, sample_booking_data):
        sample_booking_data.update(pickup_latitude=90, pickup_longitude=-180)
        CreateBookingRequest(**sample_booking_data)

    def test_pickup_address_required(self, sample_booking_data):
        sample_booking_data["pickup_address"] = ""
        with pytest.raises(ValidationError):
            CreateBookingRequest(**sample_booking_data)

    def test_dropoff_optional(self, sample_booking_data):
        for key in ("dropoff_latitude", "dropoff_longitude", "dropoff_address"):
            sample_booking_data.pop(key)
        request = CreateBookingRequest(**sample_booking_data)
        assert request.dropoff_address is None


class TestUpdateBookingRequest:
    def test_only_dropoff_fields(self):
        request = UpdateBookingRequest(dropoff_address="Hauptbahnhof")
        assert request.model_dump(exclude_unset=True) == {"dropoff_address": "Hauptbahnhof"}

    @pytest.mark.parametrize("field", ["status", "cost", "end_time", "user_id"])
    def test_rejects_non_planning_fields(self, field):
        with pytest.raises(ValidationError):
            UpdateBookingRequest(**{field: "x"})


class TestCompleteBookingRequest:
    def test_everything_optional(self):
        request = CompleteBookingRequest()
        assert request.distance is None
        assert request.duration is None

    def test_negative_distance_rejected(self):
        with pytest.raises(ValidationError):
            CompleteBookingRequest(distance=-1)

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            CompleteBookingRequest(duration=-5)


class TestBookingFilter:
    def test_defaults(self):
        booking_filter = BookingFilter()
        assert booking_filter.limit == 10
        assert booking_filter.offset == 0

    def test_bounds_normalised_to_utc(self):
        booking_filter = BookingFilter(start_from=datetime(2030, 5, 1))
        assert booking_filter.start_from.tzinfo == timezone.utc


class TestBookingStats:
    def test_serialises_camel_case(self):
        stats = BookingStats(total_bookings=3, total_revenue=12.5, average_distance=15.0)
        data = stats.model_dump(by_alias=True)
        assert data["totalBookings"] == 3
        assert data["totalRevenue"] == 12.5
        assert data["averageDistance"] == 15.0
        assert "total_bookings" not in data

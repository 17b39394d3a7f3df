"""Unit tests for the booking state machine table."""

import pytest

from fleet_booking.models.booking import (
    ACTIVE_STATUSES,
    BOOKING_TRANSITIONS,
    TERMINAL_STATUSES,
    BookingStatus,
    can_transition,
    sources_for,
)

ALLOWED_EDGES = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED),
    (BookingStatus.PENDING, BookingStatus.CANCELLED),
    (BookingStatus.CONFIRMED, BookingStatus.ACTIVE),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
    (BookingStatus.ACTIVE, BookingStatus.COMPLETED),
    (BookingStatus.ACTIVE, BookingStatus.CANCELLED),
}


class TestBookingStateMachine:
    def test_every_status_has_an_entry(self):
        assert set(BOOKING_TRANSITIONS) == set(BookingStatus)

    @pytest.mark.parametrize("current", list(BookingStatus))
    @pytest.mark.parametrize("target", list(BookingStatus))
    def test_only_listed_edges_are_allowed(self, current, target):
        assert can_transition(current, target) == ((current, target) in ALLOWED_EDGES)

    def test_accepts_plain_status_strings(self):
        assert can_transition("confirmed", BookingStatus.ACTIVE)
        assert not can_transition("completed", BookingStatus.CANCELLED)

    # ── Terminal states ───────────────────────────────────────────

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {BookingStatus.COMPLETED, BookingStatus.CANCELLED}

    @pytest.mark.parametrize("terminal", [BookingStatus.COMPLETED, BookingStatus.CANCELLED])
    def test_nothing_leaves_a_terminal_state(self, terminal):
        assert not any(can_transition(terminal, target) for target in BookingStatus)

    # ── Sources ───────────────────────────────────────────────────

    def test_sources_for_cancel(self):
        assert sources_for(BookingStatus.CANCELLED) == {
            BookingStatus.PENDING,
            BookingStatus.CONFIRMED,
            BookingStatus.ACTIVE,
        }

    def test_sources_for_start_and_complete(self):
        assert sources_for(BookingStatus.ACTIVE) == {BookingStatus.CONFIRMED}
        assert sources_for(BookingStatus.COMPLETED) == {BookingStatus.ACTIVE}
        assert sources_for(BookingStatus.CONFIRMED) == {BookingStatus.PENDING}

    def test_nothing_returns_to_pending(self):
        assert sources_for(BookingStatus.PENDING) == frozenset()

    def test_active_statuses(self):
        assert ACTIVE_STATUSES == (BookingStatus.CONFIRMED, BookingStatus.ACTIVE)

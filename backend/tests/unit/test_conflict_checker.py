"""Interval overlap and time-range validation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from lessonbook.core.exceptions import InvalidTimeRangeException
from lessonbook.models.booking import BookingStatus
from lessonbook.services.conflict_checker import ConflictChecker, intervals_overlap
from tests._utils.timeline import FIXED_NOW, session_at


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 5, 10, hour, minute, tzinfo=timezone.utc)


class TestIntervalsOverlap:
    @pytest.mark.parametrize(
        "a,b,expected",
        [
            ((_at(10), _at(11)), (_at(10, 30), _at(11, 30)), True),
            ((_at(10), _at(11)), (_at(11), _at(12)), False),
            ((_at(10), _at(12)), (_at(10, 30), _at(11)), True),
            ((_at(10), _at(11)), (_at(12), _at(13)), False),
            ((_at(10), _at(11)), (_at(10), _at(11)), True),
        ],
    )
    def test_overlap_is_symmetric(self, a, b, expected):
        assert intervals_overlap(*a, *b) is expected
        assert intervals_overlap(*b, *a) is expected

    def test_naive_values_are_utc(self):
        naive_start = datetime(2025, 5, 10, 10, 30)
        assert intervals_overlap(_at(10), _at(11), naive_start, naive_start + timedelta(hours=1))


class TestConflictChecker:
    @pytest.fixture
    def checker(self, repositories, clock):
        return ConflictChecker(repositories.bookings, clock=clock)

    def test_overlapping_confirmed_booking_is_reported(
        self, checker, make_booking, seeded, repositories
    ):
        existing = make_booking(hour=10, minute=30)
        repositories.bookings.update_fields(existing.id, status=BookingStatus.CONFIRMED.value)

        start, end = session_at(10, 10)
        conflicts = checker.check_booking_conflicts(seeded.profile.id, start, end)

        assert [c["booking_id"] for c in conflicts] == [existing.id]
        assert conflicts[0]["status"] == BookingStatus.CONFIRMED.value
        assert checker.has_conflict(seeded.profile.id, start, end)

    def test_touching_boundaries_do_not_conflict(self, checker, make_booking, seeded):
        make_booking(hour=10)
        start, end = session_at(10, 11)
        assert checker.check_booking_conflicts(seeded.profile.id, start, end) == []

    @pytest.mark.parametrize(
        "status", [BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.NO_SHOW]
    )
    def test_inactive_bookings_never_block(
        self, checker, make_booking, seeded, repositories, status
    ):
        existing = make_booking(hour=10)
        repositories.bookings.update_fields(
            existing.id,
            status=status.value,
            cancel_reason="x" if status == BookingStatus.CANCELLED else None,
            canceled_by=seeded.student.id if status == BookingStatus.CANCELLED else None,
        )
        start, end = session_at(10, 10)
        assert not checker.has_conflict(seeded.profile.id, start, end)

    def test_other_teachers_calendar_is_ignored(self, checker, make_booking, seeded):
        make_booking(hour=10, profile=seeded.other_profile)
        start, end = session_at(10, 10)
        assert not checker.has_conflict(seeded.profile.id, start, end)

    def test_excluded_booking_is_skipped(self, checker, make_booking, seeded):
        existing = make_booking(hour=10)
        start, end = session_at(10, 10)
        assert (
            checker.check_booking_conflicts(
                seeded.profile.id, start, end, exclude_booking_id=existing.id
            )
            == []
        )


class TestValidateTimeRange:
    @pytest.fixture
    def checker(self, repositories, clock):
        return ConflictChecker(repositories.bookings, clock=clock)

    def test_valid_future_range(self, checker):
        start, end = session_at(10, 10)
        checker.validate_time_range(start, end)

    @pytest.mark.parametrize("minutes", [0, -30])
    def test_end_must_follow_start(self, checker, minutes):
        start = _at(10)
        with pytest.raises(InvalidTimeRangeException) as exc_info:
            checker.validate_time_range(start, start + timedelta(minutes=minutes))
        assert exc_info.value.message == "End time must be after start time"

    def test_start_must_be_in_the_future(self, checker):
        with pytest.raises(InvalidTimeRangeException) as exc_info:
            checker.validate_time_range(FIXED_NOW, FIXED_NOW + timedelta(hours=1))
        assert "past" in exc_info.value.message

    def test_explicit_now_wins_over_clock(self, checker):
        start, end = session_at(10, 10)
        with pytest.raises(InvalidTimeRangeException):
            checker.validate_time_range(start, end, now=start + timedelta(minutes=1))

    def test_past_allowed_when_not_required(self, checker):
        checker.validate_time_range(
            FIXED_NOW - timedelta(days=1), FIXED_NOW, require_future=False
        )

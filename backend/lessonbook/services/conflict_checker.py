# backend/lessonbook/services/conflict_checker.py
"""
Conflict Checker Service for the Lessonbook platform.

Handles booking conflict detection and time validation:
- Checking if a proposed interval overlaps an active booking of the teacher
- Validating that an interval is well-formed and starts in the future

Intervals are half-open, [start, end): a session ending at 11:00 does not
conflict with one starting at 11:00. Only PENDING and CONFIRMED bookings
occupy the calendar.

This check is an early rejection. The authoritative guard against two
racing creates is the store (per-teacher lock plus, on PostgreSQL, the
bookings_no_overlap_per_teacher exclusion constraint).
"""

from datetime import datetime, timezone
import logging
from typing import Any, Callable, Dict, List, Optional

from ..core.exceptions import InvalidTimeRangeException
from ..models.types import ensure_utc
from ..repositories.interfaces import IBookingRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """True iff [a_start, a_end) and [b_start, b_end) share any instant."""
    return ensure_utc(a_start) < ensure_utc(b_end) and ensure_utc(a_end) > ensure_utc(b_start)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConflictChecker(BaseService):
    """
    Service for checking booking conflicts and time validation.

    Depends only on the booking repository interface, so it behaves the
    same over the SQL and the in-memory store.
    """

    def __init__(
        self,
        repository: IBookingRepository,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize conflict checker service.

        Args:
            repository: Booking repository used for overlap lookups
            clock: Returns the current time (UTC); injectable for tests
        """
        super().__init__(repository)
        self.logger = logging.getLogger(__name__)
        self.clock = clock or _utcnow

    @BaseService.measure_operation("check_booking_conflicts")
    def check_booking_conflicts(
        self,
        teacher_profile_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Check if a time range conflicts with existing active bookings.

        Args:
            teacher_profile_id: The teacher profile to check
            start_time: Start of the proposed interval
            end_time: End of the proposed interval
            exclude_booking_id: Optional booking ID to exclude from check

        Returns:
            List of conflicts with booking details
        """
        bookings = self.repository.find_overlapping(
            teacher_profile_id, ensure_utc(start_time), ensure_utc(end_time), exclude_booking_id
        )

        conflicts = []
        for booking in bookings:
            # The store already filtered; re-check so a loose store can't cause false positives
            if intervals_overlap(start_time, end_time, booking.start_time, booking.end_time):
                conflicts.append(
                    {
                        "booking_id": booking.id,
                        "start_time": booking.start_time.isoformat(),
                        "end_time": booking.end_time.isoformat(),
                        "status": booking.status,
                    }
                )

        if conflicts:
            self.logger.warning(
                f"Found {len(conflicts)} booking conflicts for teacher profile "
                f"{teacher_profile_id} between {start_time}-{end_time}"
            )

        return conflicts

    def has_conflict(self, teacher_profile_id: str, start_time: datetime, end_time: datetime) -> bool:
        """Simplified boolean check for quick validation."""
        return bool(self.check_booking_conflicts(teacher_profile_id, start_time, end_time))

    def validate_time_range(
        self,
        start_time: datetime,
        end_time: datetime,
        now: Optional[datetime] = None,
        require_future: bool = True,
    ) -> None:
        """
        Validate a proposed session interval.

        Naive datetimes are taken to be UTC.

        Raises:
            InvalidTimeRangeException: end is not after start, or (when
                require_future) start is not strictly after now
        """
        start, end = ensure_utc(start_time), ensure_utc(end_time)
        if end <= start:
            raise InvalidTimeRangeException(
                "End time must be after start time",
                details={"start_time": start.isoformat(), "end_time": end.isoformat()},
            )
        if require_future:
            self.ensure_future_start(start, now)

    def ensure_future_start(self, start_time: datetime, now: Optional[datetime] = None) -> None:
        """Raise InvalidTimeRangeException unless the session starts strictly in the future."""
        start = ensure_utc(start_time)
        current = ensure_utc(now) if now is not None else self.clock()
        if start <= current:
            raise InvalidTimeRangeException(
                "Cannot book a session in the past",
                details={"start_time": start.isoformat(), "now": current.isoformat()},
            )

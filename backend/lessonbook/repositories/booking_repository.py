# backend/lessonbook/repositories/booking_repository.py
"""
Booking Repository for the Lessonbook platform.

Implements the booking data access the lifecycle core needs on top of a
SQLAlchemy session:
- Booking create/update (no deletes; cancellation is a status change)
- Interval-overlap lookup for conflict checking
- Per-teacher write serialization (row lock on the teacher profile)
- Filtered, paginated listing
"""

import logging
from typing import Any, List, Optional, Tuple, cast

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import (
    OverlapConstraintViolation,
    RepositoryException,
    StaleWriteViolation,
)
from ..models.booking import ACTIVE_STATUSES, Booking
from ..models.teacher_profile import TeacherProfile
from .base_repository import BaseRepository
from .interfaces import BookingCriteria, IBookingRepository

logger = logging.getLogger(__name__)

# Created by the PostgreSQL migration; see alembic/versions/001_initial_schema.py
OVERLAP_CONSTRAINT_NAME = "bookings_no_overlap_per_teacher"

_ACTIVE_VALUES = [s.value for s in ACTIVE_STATUSES]


def _is_overlap_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    diag = getattr(orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None)
    if constraint_name:
        return constraint_name == OVERLAP_CONSTRAINT_NAME
    return OVERLAP_CONSTRAINT_NAME in str(exc)


class BookingRepository(BaseRepository[Booking], IBookingRepository):
    """
    SQL repository for booking data access.

    Transaction boundaries belong to the caller (``transaction()``); the
    methods here only flush.
    """

    def __init__(self, db: Session):
        """Initialize with Booking model."""
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def lock_teacher(self, teacher_profile_id: str) -> None:
        """
        Take a row lock on the teacher profile for the rest of the transaction.

        Concurrent creators for the same teacher queue behind this lock, so the
        overlap check and the insert that follows it see a stable calendar.
        SQLite ignores FOR UPDATE; file databases are serialized by the
        engine's BEGIN IMMEDIATE instead (see database.build_engine).
        """
        try:
            (
                self.db.query(TeacherProfile.id)
                .filter(TeacherProfile.id == teacher_profile_id)
                .with_for_update()
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking teacher profile {teacher_profile_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock teacher: {str(e)}")

    def find_by_id(self, booking_id: str) -> Optional[Booking]:
        return self.get_by_id(booking_id)

    def find_by_id_for_update(self, booking_id: str) -> Optional[Booking]:
        """
        Load the booking with SELECT ... FOR UPDATE.

        populate_existing() discards any copy already in the session so the
        caller sees the row as of the lock. SQLite ignores FOR UPDATE; there
        the engine's BEGIN IMMEDIATE already holds the database write lock.
        """
        try:
            return (
                self.db.query(Booking)
                .filter(Booking.id == booking_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock booking: {str(e)}")

    def insert(self, **fields: Any) -> Booking:
        """Create a booking, translating the overlap guard into its own error."""
        try:
            return self.create(**fields)
        except IntegrityError as exc:
            if _is_overlap_violation(exc):
                self.logger.info(
                    "Overlap constraint rejected booking for teacher %s",
                    fields.get("teacher_profile_id"),
                )
                raise OverlapConstraintViolation(str(exc.orig or exc)) from exc
            raise RepositoryException(f"Failed to create booking: {str(exc)}") from exc

    def update_fields(
        self, booking_id: str, expected_status: Optional[str] = None, **fields: Any
    ) -> Optional[Booking]:
        """
        Update a booking, optionally only while it still has ``expected_status``.

        The guarded form is a single ``UPDATE ... WHERE id = :id AND status =
        :expected`` so a concurrent status change cannot be overwritten.
        """
        if expected_status is None:
            return self.update(booking_id, **fields)

        expected = getattr(expected_status, "value", expected_status)
        values = {
            key: getattr(value, "value", value) if key == "status" else value
            for key, value in fields.items()
        }
        try:
            matched = (
                self.db.query(Booking)
                .filter(Booking.id == booking_id, Booking.status == expected)
                .update(values, synchronize_session=False)
            )
            if not matched:
                current = (
                    self.db.query(Booking.status).filter(Booking.id == booking_id).scalar()
                )
                if current is None:
                    return None
                raise StaleWriteViolation(
                    f"Booking {booking_id} is {current}, expected {expected}"
                )
            self.db.flush()
            return (
                self.db.query(Booking)
                .filter(Booking.id == booking_id)
                .populate_existing()
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to update booking: {str(e)}")

    def find_overlapping(
        self,
        teacher_profile_id: str,
        start_time: Any,
        end_time: Any,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Get active bookings of a teacher that overlap [start_time, end_time).

        Touching intervals (one ends exactly when the other starts) do not overlap.
        """
        query = self._build_query().filter(
            Booking.teacher_profile_id == teacher_profile_id,
            Booking.status.in_(_ACTIVE_VALUES),
            # Any overlap with the half-open range
            Booking.start_time < end_time,
            Booking.end_time > start_time,
        )

        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)

        return self._execute_query(query.order_by(Booking.start_time))

    def list_bookings(
        self, criteria: BookingCriteria, offset: int, limit: int
    ) -> Tuple[List[Booking], int]:
        """
        Get one page of bookings matching the criteria.

        Returns:
            (rows ordered by start_time descending, total matching rows)
        """
        query = self._build_query()

        if criteria.student_id:
            query = query.filter(Booking.student_id == criteria.student_id)
        if criteria.teacher_profile_id:
            query = query.filter(Booking.teacher_profile_id == criteria.teacher_profile_id)
        if criteria.statuses:
            query = query.filter(Booking.status.in_([getattr(s, "value", s) for s in criteria.statuses]))
        if criteria.from_date is not None:
            query = query.filter(Booking.start_time >= criteria.from_date)
        if criteria.to_date is not None:
            query = query.filter(Booking.end_time <= criteria.to_date)

        total = self._execute_count(query)
        rows = self._execute_query(
            query.order_by(Booking.start_time.desc(), Booking.id.desc()).offset(offset).limit(limit)
        )
        return cast(List[Booking], rows), total

# backend/lessonbook/models/booking.py
"""
Booking model for the Lessonbook platform.

Represents a scheduled session between a student and a teacher profile.
Bookings are created PENDING by a student, moved through the lifecycle by
the teacher or an admin, and are never deleted: cancellation is a status
transition that records who cancelled and why.
"""

from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Any

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, String, Text

import ulid

from ..database import Base
from .types import UTCDateTime

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "PENDING"  # Requested by the student, awaiting the teacher
    CONFIRMED = "CONFIRMED"  # Accepted by the teacher
    COMPLETED = "COMPLETED"  # Session took place
    CANCELLED = "CANCELLED"  # Cancelled by any party
    NO_SHOW = "NO_SHOW"  # Student didn't attend


# Statuses that occupy the teacher's calendar
ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)
# No transition may leave these
TERMINAL_STATUSES = (BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.NO_SHOW)


class Booking(Base):
    """
    Booking record between a student and a teacher profile.

    Invariants held by the table:
    - start_time < end_time
    - a CANCELLED booking carries a cancel_reason and canceled_by
    - on PostgreSQL, no two active bookings of one teacher overlap
      (bookings_no_overlap_per_teacher, created by migration)
    """

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    student_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    teacher_profile_id = Column(
        String(26), ForeignKey("teacher_profiles.id"), nullable=False, index=True
    )

    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    notes = Column(Text, nullable=True)
    teacher_notes = Column(Text, nullable=True)
    meeting_link = Column(String(500), nullable=True)

    # Cancellation tracking
    cancel_reason = Column(Text, nullable=True)
    canceled_by = Column(String(26), ForeignKey("users.id"), nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=_utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED', 'NO_SHOW')",
            name="ck_bookings_status",
        ),
        CheckConstraint("start_time < end_time", name="check_time_order"),
        CheckConstraint(
            "status <> 'CANCELLED' OR (cancel_reason IS NOT NULL AND canceled_by IS NOT NULL)",
            name="ck_bookings_cancel_fields",
        ),
        Index("ix_bookings_teacher_window", "teacher_profile_id", "start_time", "end_time"),
    )

    def __init__(self, **kwargs: Any) -> None:
        """Initialize as a pending request by default."""
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.PENDING.value

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Booking {self.id}: student={self.student_id}, "
            f"teacher_profile={self.teacher_profile_id}, "
            f"time={self.start_time}-{self.end_time}, status={self.status}>"
        )

    @property
    def is_active(self) -> bool:
        return self.status in {s.value for s in ACTIVE_STATUSES}

    @property
    def is_terminal(self) -> bool:
        return self.status in {s.value for s in TERMINAL_STATUSES}

    def to_dict(self) -> dict[str, Any]:
        """Plain snapshot of the persisted fields."""
        return {
            "id": self.id,
            "student_id": self.student_id,
            "teacher_profile_id": self.teacher_profile_id,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "status": self.status,
            "notes": self.notes,
            "teacher_notes": self.teacher_notes,
            "meeting_link": self.meeting_link,
            "cancel_reason": self.cancel_reason,
            "canceled_by": self.canceled_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

# backend/lessonbook/repositories/interfaces.py
"""
Store-agnostic repository interfaces for the booking core.

Services depend only on these abstractions. Two implementations exist:
the SQLAlchemy repositories in this package and the in-memory store in
``repositories.memory``; which one is used is decided at composition time.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ContextManager, List, Optional, Sequence, Tuple

from ..models.booking import Booking
from ..models.notification import Notification
from ..models.teacher_profile import TeacherProfile
from ..models.user import User


@dataclass
class BookingCriteria:
    """Filters applied by the list query. Empty fields do not filter."""

    student_id: Optional[str] = None
    teacher_profile_id: Optional[str] = None
    statuses: Sequence[str] = field(default_factory=tuple)
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None


class IBookingRepository(ABC):
    """Data access for Booking records."""

    @abstractmethod
    def transaction(self) -> ContextManager[Any]:
        """Unit of work: commits on success, rolls back on error."""

    @abstractmethod
    def lock_teacher(self, teacher_profile_id: str) -> None:
        """
        Serialize writers for one teacher until the current transaction ends.

        Must be called inside ``transaction()``.
        """

    @abstractmethod
    def find_by_id(self, booking_id: str) -> Optional[Booking]:
        """Return the booking or None."""

    @abstractmethod
    def find_by_id_for_update(self, booking_id: str) -> Optional[Booking]:
        """
        Return the current booking row and hold it until the transaction ends.

        Must be called inside ``transaction()``.
        """

    @abstractmethod
    def insert(self, **fields: Any) -> Booking:
        """
        Persist a new booking.

        Raises:
            OverlapConstraintViolation: the store's overlap guard rejected it
            RepositoryException: any other store failure
        """

    @abstractmethod
    def update_fields(
        self, booking_id: str, expected_status: Optional[str] = None, **fields: Any
    ) -> Optional[Booking]:
        """
        Apply the given column values; None if the booking does not exist.

        With ``expected_status`` the write only happens while the stored
        status still equals it.

        Raises:
            StaleWriteViolation: the stored status no longer matches
        """

    @abstractmethod
    def find_overlapping(
        self,
        teacher_profile_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """Active bookings of the teacher whose [start, end) overlaps the interval."""

    @abstractmethod
    def list_bookings(
        self, criteria: BookingCriteria, offset: int, limit: int
    ) -> Tuple[List[Booking], int]:
        """One page of bookings (start_time descending) and the total match count."""


class ITeacherProfileRepository(ABC):
    """Data access for TeacherProfile records."""

    @abstractmethod
    def find_by_id(self, teacher_profile_id: str) -> Optional[TeacherProfile]:
        """Return the profile or None."""

    @abstractmethod
    def find_by_user_id(self, user_id: str) -> Optional[TeacherProfile]:
        """Return the profile owned by the user, or None."""

    @abstractmethod
    def insert(self, **fields: Any) -> TeacherProfile:
        """Persist a new profile."""


class IUserRepository(ABC):
    """Read access to users (owned by the identity system)."""

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[User]:
        """Return the user or None."""

    @abstractmethod
    def insert(self, **fields: Any) -> User:
        """Persist a new user (seeding and tests)."""


class INotificationRepository(ABC):
    """Data access for Notification records."""

    @abstractmethod
    def transaction(self) -> ContextManager[Any]:
        """Unit of work: commits on success, rolls back on error."""

    @abstractmethod
    def insert(self, **fields: Any) -> Notification:
        """Persist a new notification."""

    @abstractmethod
    def find_by_id(self, notification_id: str) -> Optional[Notification]:
        """Return the notification or None."""

    @abstractmethod
    def list_for_receiver(
        self,
        receiver_id: str,
        is_read: Optional[bool],
        offset: int,
        limit: int,
    ) -> Tuple[List[Notification], int]:
        """One page of the receiver's notifications (newest first) and the total."""

    @abstractmethod
    def count_unread(self, receiver_id: str) -> int:
        """Number of unread notifications for the receiver."""

    @abstractmethod
    def set_read(self, notification_id: str, is_read: bool) -> Optional[Notification]:
        """Flip the read flag; None if the notification does not exist."""

    @abstractmethod
    def mark_read_for_receiver(
        self, receiver_id: str, ids: Optional[Sequence[str]] = None
    ) -> int:
        """Mark the receiver's notifications (optionally only ``ids``) read."""

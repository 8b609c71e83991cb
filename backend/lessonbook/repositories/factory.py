"""
Repository Factory for the Lessonbook platform.

Provides centralized creation of repository instances. The data source
decides the implementation: a SQLAlchemy ``Session`` yields the SQL
repositories, an ``InMemoryStore`` yields the in-memory ones. Which source
is handed out is decided once, at composition time, from
``settings.storage_backend``; services never branch on it.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from sqlalchemy.orm import Session

from .interfaces import (
    IBookingRepository,
    INotificationRepository,
    ITeacherProfileRepository,
    IUserRepository,
)
from .memory import (
    InMemoryStore,
    MemoryBookingRepository,
    MemoryNotificationRepository,
    MemoryTeacherProfileRepository,
    MemoryUserRepository,
)

# Avoid circular imports
if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .notification_repository import NotificationRepository
    from .teacher_profile_repository import TeacherProfileRepository
    from .user_repository import UserRepository

DataSource = Union[Session, InMemoryStore]


@dataclass
class Repositories:
    """The full set of repositories over one data source."""

    bookings: IBookingRepository
    teacher_profiles: ITeacherProfileRepository
    users: IUserRepository
    notifications: INotificationRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations.
    """

    @staticmethod
    def create_booking_repository(source: DataSource) -> IBookingRepository:
        """Create repository for booking operations."""
        if isinstance(source, InMemoryStore):
            return MemoryBookingRepository(source)
        from .booking_repository import BookingRepository

        repo: "BookingRepository" = BookingRepository(source)
        return repo

    @staticmethod
    def create_teacher_profile_repository(source: DataSource) -> ITeacherProfileRepository:
        """Create repository for teacher profile lookups."""
        if isinstance(source, InMemoryStore):
            return MemoryTeacherProfileRepository(source)
        from .teacher_profile_repository import TeacherProfileRepository

        repo: "TeacherProfileRepository" = TeacherProfileRepository(source)
        return repo

    @staticmethod
    def create_user_repository(source: DataSource) -> IUserRepository:
        """Create repository for user lookups."""
        if isinstance(source, InMemoryStore):
            return MemoryUserRepository(source)
        from .user_repository import UserRepository

        repo: "UserRepository" = UserRepository(source)
        return repo

    @staticmethod
    def create_notification_repository(source: DataSource) -> INotificationRepository:
        """Create repository for notification inbox operations."""
        if isinstance(source, InMemoryStore):
            return MemoryNotificationRepository(source)
        from .notification_repository import NotificationRepository

        repo: "NotificationRepository" = NotificationRepository(source)
        return repo

    @classmethod
    def create_repositories(cls, source: DataSource) -> Repositories:
        """Create every repository over the same data source."""
        return Repositories(
            bookings=cls.create_booking_repository(source),
            teacher_profiles=cls.create_teacher_profile_repository(source),
            users=cls.create_user_repository(source),
            notifications=cls.create_notification_repository(source),
        )

# backend/lessonbook/repositories/__init__.py
"""
Repository Pattern Implementation for the Lessonbook platform.

This package provides the repository layer for data access,
separating business logic from the store.

Key Components:
- interfaces: abstract repositories the services depend on
- BaseRepository: foundation for the SQLAlchemy repositories
- BookingRepository, TeacherProfileRepository, UserRepository,
  NotificationRepository: SQL implementations
- InMemoryStore and Memory*Repository: in-memory implementations
- RepositoryFactory: creates the implementation matching a data source

Usage:
    from lessonbook.repositories import RepositoryFactory

    repos = RepositoryFactory.create_repositories(db)
    booking = repos.bookings.find_by_id(booking_id)
"""

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .factory import Repositories, RepositoryFactory
from .interfaces import (
    BookingCriteria,
    IBookingRepository,
    INotificationRepository,
    ITeacherProfileRepository,
    IUserRepository,
)
from .memory import InMemoryStore
from .notification_repository import NotificationRepository
from .teacher_profile_repository import TeacherProfileRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "BookingCriteria",
    "BookingRepository",
    "IBookingRepository",
    "INotificationRepository",
    "ITeacherProfileRepository",
    "IUserRepository",
    "InMemoryStore",
    "NotificationRepository",
    "Repositories",
    "RepositoryFactory",
    "TeacherProfileRepository",
    "UserRepository",
]

# backend/lessonbook/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

import logging
from typing import Union

from fastapi import Depends
from sqlalchemy.orm import Session

from ...repositories.factory import Repositories, RepositoryFactory
from ...repositories.memory import InMemoryStore
from ...services.booking_service import BookingService
from ...services.notification_service import NotificationService
from .database import get_data_source

logger = logging.getLogger(__name__)


def get_repositories(
    source: Union[Session, InMemoryStore] = Depends(get_data_source),
) -> Repositories:
    """Repositories over the request's data source."""
    return RepositoryFactory.create_repositories(source)


def get_booking_service(repositories: Repositories = Depends(get_repositories)) -> BookingService:
    """
    Get booking service instance.

    Args:
        repositories: Repositories over the request's data source

    Returns:
        BookingService instance
    """
    return BookingService(repositories)


def get_notification_service(
    repositories: Repositories = Depends(get_repositories),
) -> NotificationService:
    """Get notification inbox service instance."""
    return NotificationService(repositories.notifications)

"""FastAPI dependencies: data source, identity and services."""

from .auth import get_current_actor
from .database import get_data_source, get_db, get_memory_store
from .services import get_booking_service, get_notification_service

__all__ = [
    "get_booking_service",
    "get_current_actor",
    "get_data_source",
    "get_db",
    "get_memory_store",
    "get_notification_service",
]

# backend/lessonbook/api/dependencies/database.py
"""
Database-related dependencies.

``get_data_source`` is the composition point for storage: it hands out a
SQLAlchemy session or the process-wide in-memory store depending on
``settings.storage_backend``. Nothing downstream branches on the choice.
"""

from functools import lru_cache
from typing import Generator, Union

from sqlalchemy.orm import Session

from ...core.config import settings
from ...database import get_db as original_get_db
from ...repositories.memory import InMemoryStore


def get_db() -> Generator[Session, None, None]:
    """
    Get database session dependency.

    Yields:
        Database session that will be closed after use
    """
    yield from original_get_db()


@lru_cache(maxsize=1)
def get_memory_store() -> InMemoryStore:
    """Process-wide in-memory store (storage_backend=memory)."""
    return InMemoryStore()


def get_data_source() -> Generator[Union[Session, InMemoryStore], None, None]:
    """Yield the configured data source for one request."""
    if settings.storage_backend == "memory":
        yield get_memory_store()
        return
    yield from original_get_db()

# backend/lessonbook/repositories/user_repository.py
"""
User Repository for the Lessonbook platform.

Users belong to the identity system; the booking core reads them to
address notifications and render times in the receiver's timezone.
"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository
from .interfaces import IUserRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User], IUserRepository):
    """Repository for User data access."""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.get_by_id(user_id)

    def insert(self, **fields: Any) -> User:
        return self.create(**fields)

# backend/lessonbook/repositories/teacher_profile_repository.py
"""
Teacher Profile Repository for the Lessonbook platform.

Lookups the booking core needs to validate a booking target and to scope
a teacher's own listings.
"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..models.teacher_profile import TeacherProfile
from .base_repository import BaseRepository
from .interfaces import ITeacherProfileRepository

logger = logging.getLogger(__name__)


class TeacherProfileRepository(BaseRepository[TeacherProfile], ITeacherProfileRepository):
    """Repository for teacher profile data access."""

    def __init__(self, db: Session):
        super().__init__(db, TeacherProfile)

    def find_by_id(self, teacher_profile_id: str) -> Optional[TeacherProfile]:
        return self.get_by_id(teacher_profile_id)

    def find_by_user_id(self, user_id: str) -> Optional[TeacherProfile]:
        """Get the profile owned by a user (one-to-one)."""
        return self.find_one_by(user_id=user_id)

    def insert(self, **fields: Any) -> TeacherProfile:
        return self.create(**fields)

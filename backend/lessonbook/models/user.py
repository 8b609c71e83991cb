# backend/lessonbook/models/user.py
"""
User model for the Lessonbook platform.

Users are owned by the identity system; the booking core only reads the
fields it needs to address and format notifications.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, String
from sqlalchemy.sql import func
import ulid

from ..core.enums import RoleName
from ..database import Base


class User(Base):
    """A student, teacher or admin account."""

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(String(20), nullable=False, default=RoleName.STUDENT.value)
    timezone = Column(String(64), nullable=False, default="America/New_York")
    locale = Column(String(16), nullable=False, default="en")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("role IN ('STUDENT', 'TEACHER', 'ADMIN')", name="ck_users_role"),
    )

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email} ({self.role})>"

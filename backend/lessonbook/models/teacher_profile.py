# backend/lessonbook/models/teacher_profile.py
"""
Teacher Profile model for the Lessonbook platform.

A teacher profile extends a User with the data needed to accept bookings.
Only profiles whose approval_status is APPROVED can receive new bookings;
bookings reference the profile, they are not owned by it.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String
from sqlalchemy.sql import func
import ulid

from ..core.enums import ApprovalStatus
from ..database import Base


class TeacherProfile(Base):
    """
    Model representing a teacher's bookable profile.

    Attributes:
        id: Primary key
        user_id: Foreign key to users table (one-to-one relationship)
        approval_status: Admin review outcome (PENDING, APPROVED, REJECTED)
        headline: Short public description
    """

    __tablename__ = "teacher_profiles"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, unique=True)
    approval_status = Column(String(20), nullable=False, default=ApprovalStatus.PENDING.value)
    headline = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            "approval_status IN ('PENDING', 'APPROVED', 'REJECTED')",
            name="ck_teacher_profiles_approval_status",
        ),
    )

    @property
    def is_approved(self) -> bool:
        return self.approval_status == ApprovalStatus.APPROVED.value

    def __repr__(self) -> str:
        return f"<TeacherProfile {self.id}: user={self.user_id}, status={self.approval_status}>"

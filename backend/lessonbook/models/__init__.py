"""
Database models for the Lessonbook platform.

- User: accounts for students, teachers and admins
- TeacherProfile: a teacher's bookable profile (must be APPROVED to accept bookings)
- Booking: a scheduled session and its lifecycle status
- Notification: inbox entries produced by booking transitions
"""

from .booking import ACTIVE_STATUSES, TERMINAL_STATUSES, Booking, BookingStatus
from .notification import Notification
from .teacher_profile import TeacherProfile
from .user import User

__all__ = [
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "Booking",
    "BookingStatus",
    "Notification",
    "TeacherProfile",
    "User",
]

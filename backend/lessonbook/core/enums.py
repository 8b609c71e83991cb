# backend/lessonbook/core/enums.py
"""
Core enums for the Lessonbook platform.

This module contains enumeration types used throughout the application
for type safety and consistency.
"""

from enum import Enum


class RoleName(str, Enum):
    """
    Roles a caller can hold.

    Role is resolved outside the booking core and arrives with the Actor.
    """

    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


class ApprovalStatus(str, Enum):
    """Teacher profile review states. Only APPROVED profiles accept bookings."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class NotificationType(str, Enum):
    """Notification kinds produced by booking transitions."""

    BOOKING_REQUEST = "BOOKING_REQUEST"
    BOOKING_CONFIRMED = "BOOKING_CONFIRMED"
    BOOKING_COMPLETED = "BOOKING_COMPLETED"
    BOOKING_CANCELLED = "BOOKING_CANCELLED"
    BOOKING_NO_SHOW = "BOOKING_NO_SHOW"


class EntityType(str, Enum):
    """Back-reference kinds stored on notifications."""

    BOOKING = "BOOKING"

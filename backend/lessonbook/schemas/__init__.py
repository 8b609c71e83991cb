"""Request and response schemas for the Lessonbook API."""

from .booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingEnvelope,
    BookingListResponse,
    BookingResponse,
    BookingUpdate,
    PageMetadata,
    StudentSummary,
    TeacherProfileSummary,
)
from .notification import (
    NotificationListResponse,
    NotificationMarkReadRequest,
    NotificationMarkReadResponse,
    NotificationPageMetadata,
    NotificationReadStateUpdate,
    NotificationResponse,
)

__all__ = [
    "BookingCreate",
    "BookingDetailResponse",
    "BookingEnvelope",
    "BookingListResponse",
    "BookingResponse",
    "BookingUpdate",
    "NotificationListResponse",
    "NotificationMarkReadRequest",
    "NotificationMarkReadResponse",
    "NotificationPageMetadata",
    "NotificationReadStateUpdate",
    "NotificationResponse",
    "PageMetadata",
    "StudentSummary",
    "TeacherProfileSummary",
]

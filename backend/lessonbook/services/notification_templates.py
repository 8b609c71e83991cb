from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Any, Optional

import pytz

from ..core.enums import NotificationType
from ..models.booking import BookingStatus
from ..models.types import ensure_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationTemplate:
    type: NotificationType
    title: str
    body_template: str

    def render(self, **context: Any) -> str:
        return self.body_template.format(**context)


BOOKING_REQUEST = NotificationTemplate(
    type=NotificationType.BOOKING_REQUEST,
    title="New Booking Request",
    body_template="{sender_name} requested a session on {date} at {time}",
)

BOOKING_CONFIRMED = NotificationTemplate(
    type=NotificationType.BOOKING_CONFIRMED,
    title="Booking Confirmed",
    body_template="Your booking on {date} at {time} has been confirmed.",
)

BOOKING_COMPLETED = NotificationTemplate(
    type=NotificationType.BOOKING_COMPLETED,
    title="Booking Completed",
    body_template="Your booking on {date} at {time} has been marked as completed.",
)

BOOKING_CANCELLED = NotificationTemplate(
    type=NotificationType.BOOKING_CANCELLED,
    title="Booking Cancelled",
    body_template="Your booking on {date} at {time} has been cancelled. Reason: {reason}",
)

BOOKING_NO_SHOW = NotificationTemplate(
    type=NotificationType.BOOKING_NO_SHOW,
    title="No Show Recorded",
    body_template="A no-show was recorded for the booking on {date} at {time}.",
)

# Status a booking moved into -> template announcing it
STATUS_TEMPLATES: dict[BookingStatus, NotificationTemplate] = {
    BookingStatus.CONFIRMED: BOOKING_CONFIRMED,
    BookingStatus.COMPLETED: BOOKING_COMPLETED,
    BookingStatus.CANCELLED: BOOKING_CANCELLED,
    BookingStatus.NO_SHOW: BOOKING_NO_SHOW,
}

# strftime names weekdays and months in the process locale (English), not the
# receiver's; non-English receivers get a numeric date instead.
DATE_FORMAT = "%A, %B %d, %Y"
DATE_FORMAT_NUMERIC = "%Y-%m-%d"
TIME_FORMAT_12H = "%I:%M %p"
TIME_FORMAT_24H = "%H:%M"


def _resolve_timezone(name: Optional[str], fallback: str) -> Any:
    for candidate in (name, fallback):
        if not candidate:
            continue
        try:
            return pytz.timezone(candidate)
        except pytz.UnknownTimeZoneError:
            logger.warning(f"Unknown timezone {candidate!r}, falling back")
    return pytz.UTC


def format_session_time(
    start_time: datetime,
    timezone_name: Optional[str],
    locale: Optional[str],
    fallback_timezone: str = "UTC",
) -> tuple[str, str]:
    """
    Render a session start for a receiver.

    Returns:
        (date, time) strings in the receiver's timezone. English locales get
        "Saturday, May 10, 2025" and a 12-hour clock; any other locale gets
        "2025-05-10" and a 24-hour clock
    """
    tz = _resolve_timezone(timezone_name, fallback_timezone)
    local = ensure_utc(start_time).astimezone(tz)
    if (locale or "en").lower().startswith("en"):
        return local.strftime(DATE_FORMAT), local.strftime(TIME_FORMAT_12H).lstrip("0")
    return local.strftime(DATE_FORMAT_NUMERIC), local.strftime(TIME_FORMAT_24H)

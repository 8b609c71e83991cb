"""Message templates and receiver-local time formatting."""

from datetime import datetime, timezone

from lessonbook.core.enums import NotificationType
from lessonbook.models.booking import BookingStatus
from lessonbook.services.notification_templates import (
    BOOKING_CANCELLED,
    BOOKING_REQUEST,
    STATUS_TEMPLATES,
    format_session_time,
)

START = datetime(2025, 5, 10, 10, 0, tzinfo=timezone.utc)


def test_english_receiver_gets_12_hour_clock_in_their_timezone():
    date_str, time_str = format_session_time(START, "America/New_York", "en-US")
    assert date_str == "Saturday, May 10, 2025"
    assert time_str == "6:00 AM"


def test_other_locales_get_numeric_date_and_24_hour_clock():
    date_str, time_str = format_session_time(START, "Europe/Berlin", "de")
    assert date_str == "2025-05-10"
    assert time_str == "12:00"


def test_non_english_date_carries_no_english_names():
    date_str, _ = format_session_time(START, "Asia/Tokyo", "ja-JP")
    assert date_str == "2025-05-10"
    assert "Saturday" not in date_str and "May" not in date_str


def test_unknown_timezone_uses_fallback():
    _, time_str = format_session_time(START, "Mars/Olympus_Mons", "en", fallback_timezone="UTC")
    assert time_str == "10:00 AM"


def test_missing_timezone_and_locale():
    _, time_str = format_session_time(START, None, None, fallback_timezone="Asia/Tokyo")
    assert time_str == "7:00 PM"


def test_naive_start_is_utc():
    _, time_str = format_session_time(datetime(2025, 5, 10, 10, 0), "UTC", "en")
    assert time_str == "10:00 AM"


def test_cancelled_template_interpolates_reason():
    message = BOOKING_CANCELLED.render(date="Saturday, May 10, 2025", time="6:00 AM", reason="Sick")
    assert message.endswith("Reason: Sick")


def test_request_template_names_sender():
    message = BOOKING_REQUEST.render(sender_name="Sam Student", date="Saturday", time="6:00 AM")
    assert message == "Sam Student requested a session on Saturday at 6:00 AM"


def test_every_reachable_status_has_a_template():
    assert set(STATUS_TEMPLATES) == {
        BookingStatus.CONFIRMED,
        BookingStatus.COMPLETED,
        BookingStatus.CANCELLED,
        BookingStatus.NO_SHOW,
    }
    assert STATUS_TEMPLATES[BookingStatus.NO_SHOW].type is NotificationType.BOOKING_NO_SHOW

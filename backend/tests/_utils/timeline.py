"""Pinned clock and session builders shared across tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

FIXED_NOW = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


def session_at(
    day: int, hour: int, minute: int = 0, minutes: int = 60
) -> tuple[datetime, datetime]:
    """A May 2025 session starting at the given UTC time."""
    start = datetime(2025, 5, day, hour, minute, tzinfo=timezone.utc)
    return start, start + timedelta(minutes=minutes)


def iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")

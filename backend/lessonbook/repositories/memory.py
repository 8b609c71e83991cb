# backend/lessonbook/repositories/memory.py
"""
In-memory implementations of the repository interfaces.

Used for tests and single-process deployments (``storage_backend=memory``).
All repositories built on one ``InMemoryStore`` share its tables and its
re-entrant lock. ``transaction()`` holds the lock for its whole body, which
serializes writers exactly like the per-teacher row lock does on PostgreSQL,
and restores the pre-transaction state if the body raises.

Rows are the regular model classes, kept transient (never attached to a
session). Column defaults that SQLAlchemy would apply at flush time are
filled in here on insert.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
import logging
import threading
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Type, TypeVar

import ulid

from ..core.enums import ApprovalStatus, RoleName
from ..core.exceptions import OverlapConstraintViolation, StaleWriteViolation
from ..models.booking import ACTIVE_STATUSES, Booking, BookingStatus
from ..models.notification import Notification
from ..models.teacher_profile import TeacherProfile
from ..models.types import ensure_utc
from ..models.user import User
from .interfaces import (
    BookingCriteria,
    IBookingRepository,
    INotificationRepository,
    ITeacherProfileRepository,
    IUserRepository,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ACTIVE_VALUES = {s.value for s in ACTIVE_STATUSES}
_DATETIME_FIELDS = ("start_time", "end_time", "created_at", "updated_at")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _column_values(row: Any) -> Dict[str, Any]:
    return {name: getattr(row, name) for name in row.__table__.columns.keys()}


def _normalize(fields: Dict[str, Any]) -> Dict[str, Any]:
    normalized = dict(fields)
    for key in _DATETIME_FIELDS:
        if isinstance(normalized.get(key), datetime):
            normalized[key] = ensure_utc(normalized[key])
    if "status" in normalized and normalized["status"] is not None:
        normalized["status"] = getattr(normalized["status"], "value", normalized["status"])
    return normalized


class InMemoryStore:
    """Process-local tables guarded by a single re-entrant lock."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.tables: Dict[str, Dict[str, Any]] = {
            "users": {},
            "teacher_profiles": {},
            "bookings": {},
            "notifications": {},
        }
        self._depth = 0
        self._snapshot: Optional[Dict[str, Dict[str, Tuple[Any, Dict[str, Any]]]]] = None

    @contextmanager
    def transaction(self) -> Iterator["InMemoryStore"]:
        """
        Hold the store lock for the body; undo every change if it raises.

        Nested calls join the outermost transaction.
        """
        with self.lock:
            outermost = self._depth == 0
            if outermost:
                self._snapshot = self._take_snapshot()
            self._depth += 1
            try:
                yield self
            except Exception:
                if outermost:
                    logger.debug("Rolling back in-memory transaction")
                    self._restore(self._snapshot or {})
                raise
            finally:
                self._depth -= 1
                if outermost:
                    self._snapshot = None

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def _take_snapshot(self) -> Dict[str, Dict[str, Tuple[Any, Dict[str, Any]]]]:
        return {
            name: {row_id: (row, _column_values(row)) for row_id, row in table.items()}
            for name, table in self.tables.items()
        }

    def _restore(self, snapshot: Dict[str, Dict[str, Tuple[Any, Dict[str, Any]]]]) -> None:
        for name, rows in snapshot.items():
            restored: Dict[str, Any] = {}
            for row_id, (row, values) in rows.items():
                for key, value in values.items():
                    setattr(row, key, value)
                restored[row_id] = row
            self.tables[name] = restored

    def add(self, table: str, model: Type[T], fields: Dict[str, Any]) -> T:
        with self.lock:
            row = model(**_normalize(fields))
            if not getattr(row, "id", None):
                row.id = str(ulid.ULID())
            if hasattr(row, "created_at") and getattr(row, "created_at", None) is None:
                row.created_at = _utcnow()
            self.tables[table][row.id] = row
            return row

    def get(self, table: str, row_id: str) -> Any:
        with self.lock:
            return self.tables[table].get(row_id)

    def rows(self, table: str) -> List[Any]:
        with self.lock:
            return list(self.tables[table].values())


class _MemoryRepository:
    """Shared plumbing for the in-memory repositories."""

    table: str = ""

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.logger = logging.getLogger(f"{__name__}.{type(self).__name__}")

    @contextmanager
    def transaction(self) -> Iterator[InMemoryStore]:
        with self.store.transaction() as store:
            yield store


class MemoryUserRepository(_MemoryRepository, IUserRepository):
    table = "users"

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.store.get(self.table, user_id)

    def insert(self, **fields: Any) -> User:
        fields.setdefault("role", RoleName.STUDENT.value)
        fields.setdefault("timezone", "America/New_York")
        fields.setdefault("locale", "en")
        return self.store.add(self.table, User, fields)


class MemoryTeacherProfileRepository(_MemoryRepository, ITeacherProfileRepository):
    table = "teacher_profiles"

    def find_by_id(self, teacher_profile_id: str) -> Optional[TeacherProfile]:
        return self.store.get(self.table, teacher_profile_id)

    def find_by_user_id(self, user_id: str) -> Optional[TeacherProfile]:
        for profile in self.store.rows(self.table):
            if profile.user_id == user_id:
                return profile
        return None

    def insert(self, **fields: Any) -> TeacherProfile:
        fields.setdefault("approval_status", ApprovalStatus.PENDING.value)
        return self.store.add(self.table, TeacherProfile, fields)


class MemoryBookingRepository(_MemoryRepository, IBookingRepository):
    """
    In-memory booking table.

    ``insert`` enforces the same no-overlap rule the PostgreSQL exclusion
    constraint does, so both stores reject a racing insert the same way.
    """

    table = "bookings"

    def lock_teacher(self, teacher_profile_id: str) -> None:
        # The store lock held by transaction() already serializes all writers.
        if not self.store.in_transaction:
            raise RuntimeError("lock_teacher() must be called inside transaction()")

    def find_by_id(self, booking_id: str) -> Optional[Booking]:
        return self.store.get(self.table, booking_id)

    def find_by_id_for_update(self, booking_id: str) -> Optional[Booking]:
        # Rows are live objects and transaction() holds the store lock
        if not self.store.in_transaction:
            raise RuntimeError("find_by_id_for_update() must be called inside transaction()")
        return self.find_by_id(booking_id)

    def insert(self, **fields: Any) -> Booking:
        fields = _normalize(fields)
        with self.store.lock:
            if fields.get("status", BookingStatus.PENDING.value) in _ACTIVE_VALUES:
                clashes = self.find_overlapping(
                    fields["teacher_profile_id"], fields["start_time"], fields["end_time"]
                )
                if clashes:
                    raise OverlapConstraintViolation(
                        f"Booking overlaps {', '.join(b.id for b in clashes)}"
                    )
            now = _utcnow()
            fields.setdefault("created_at", now)
            fields.setdefault("updated_at", now)
            return self.store.add(self.table, Booking, fields)

    def update_fields(
        self, booking_id: str, expected_status: Optional[str] = None, **fields: Any
    ) -> Optional[Booking]:
        with self.store.lock:
            booking = self.find_by_id(booking_id)
            if booking is None:
                return None
            if expected_status is not None:
                expected = getattr(expected_status, "value", expected_status)
                if booking.status != expected:
                    raise StaleWriteViolation(
                        f"Booking {booking_id} is {booking.status}, expected {expected}"
                    )
            for key, value in _normalize(fields).items():
                if hasattr(booking, key):
                    setattr(booking, key, value)
            booking.updated_at = _utcnow()
            return booking

    def find_overlapping(
        self,
        teacher_profile_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        start_time, end_time = ensure_utc(start_time), ensure_utc(end_time)
        matches = [
            b
            for b in self.store.rows(self.table)
            if b.teacher_profile_id == teacher_profile_id
            and b.status in _ACTIVE_VALUES
            and b.id != exclude_booking_id
            and b.start_time < end_time
            and b.end_time > start_time
        ]
        return sorted(matches, key=lambda b: b.start_time)

    def list_bookings(
        self, criteria: BookingCriteria, offset: int, limit: int
    ) -> Tuple[List[Booking], int]:
        statuses = {getattr(s, "value", s) for s in criteria.statuses}
        from_date = ensure_utc(criteria.from_date) if criteria.from_date else None
        to_date = ensure_utc(criteria.to_date) if criteria.to_date else None

        def matches(b: Booking) -> bool:
            if criteria.student_id and b.student_id != criteria.student_id:
                return False
            if criteria.teacher_profile_id and b.teacher_profile_id != criteria.teacher_profile_id:
                return False
            if statuses and b.status not in statuses:
                return False
            if from_date is not None and b.start_time < from_date:
                return False
            if to_date is not None and b.end_time > to_date:
                return False
            return True

        rows = [b for b in self.store.rows(self.table) if matches(b)]
        rows.sort(key=lambda b: (b.start_time, b.id), reverse=True)
        return rows[offset : offset + limit], len(rows)


class MemoryNotificationRepository(_MemoryRepository, INotificationRepository):
    table = "notifications"

    def insert(self, **fields: Any) -> Notification:
        return self.store.add(self.table, Notification, fields)

    def find_by_id(self, notification_id: str) -> Optional[Notification]:
        return self.store.get(self.table, notification_id)

    def _for_receiver(self, receiver_id: str) -> List[Notification]:
        return [n for n in self.store.rows(self.table) if n.receiver_id == receiver_id]

    def list_for_receiver(
        self,
        receiver_id: str,
        is_read: Optional[bool],
        offset: int,
        limit: int,
    ) -> Tuple[List[Notification], int]:
        rows = self._for_receiver(receiver_id)
        if is_read is not None:
            rows = [n for n in rows if bool(n.is_read) is is_read]
        rows.sort(key=lambda n: (n.created_at, n.id), reverse=True)
        return rows[offset : offset + limit], len(rows)

    def count_unread(self, receiver_id: str) -> int:
        return sum(1 for n in self._for_receiver(receiver_id) if not n.is_read)

    def set_read(self, notification_id: str, is_read: bool) -> Optional[Notification]:
        with self.store.lock:
            notification = self.find_by_id(notification_id)
            if notification is None:
                return None
            notification.is_read = is_read
            return notification

    def mark_read_for_receiver(
        self, receiver_id: str, ids: Optional[Sequence[str]] = None
    ) -> int:
        wanted = set(ids) if ids is not None else None
        updated = 0
        with self.store.lock:
            for notification in self._for_receiver(receiver_id):
                if notification.is_read:
                    continue
                if wanted is not None and notification.id not in wanted:
                    continue
                notification.is_read = True
                updated += 1
        return updated

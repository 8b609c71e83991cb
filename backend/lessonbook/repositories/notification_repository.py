"""Repository for in-app notification inbox entries."""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple, cast

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.notification import Notification
from .base_repository import BaseRepository
from .interfaces import INotificationRepository


class NotificationRepository(BaseRepository[Notification], INotificationRepository):
    """Data access for notification inbox entries."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, Notification)

    def insert(self, **fields: Any) -> Notification:
        return self.create(**fields)

    def find_by_id(self, notification_id: str) -> Optional[Notification]:
        return self.get_by_id(notification_id)

    def list_for_receiver(
        self,
        receiver_id: str,
        is_read: Optional[bool],
        offset: int,
        limit: int,
    ) -> Tuple[List[Notification], int]:
        query = self.db.query(Notification).filter(Notification.receiver_id == receiver_id)
        if is_read is not None:
            query = query.filter(Notification.is_read.is_(is_read))
        total = self._execute_count(query)
        query = (
            query.order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return cast(List[Notification], self._execute_query(query)), total

    def count_unread(self, receiver_id: str) -> int:
        count = (
            self.db.query(func.count(Notification.id))
            .filter(Notification.receiver_id == receiver_id, Notification.is_read.is_(False))
            .scalar()
        )
        return int(count or 0)

    def set_read(self, notification_id: str, is_read: bool) -> Optional[Notification]:
        return self.update(notification_id, is_read=is_read)

    def mark_read_for_receiver(
        self, receiver_id: str, ids: Optional[Sequence[str]] = None
    ) -> int:
        query = self.db.query(Notification).filter(
            Notification.receiver_id == receiver_id, Notification.is_read.is_(False)
        )
        if ids is not None:
            query = query.filter(Notification.id.in_(list(ids)))
        updated = query.update({"is_read": True}, synchronize_session="fetch")
        return int(updated or 0)

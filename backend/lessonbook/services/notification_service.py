"""Service for the in-app notification inbox."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import List, Optional, Sequence

from ..core.config import settings
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.notification import Notification
from ..principal import Actor
from ..repositories.interfaces import INotificationRepository
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass
class NotificationPage:
    data: List[Notification] = field(default_factory=list)
    total: int = 0
    unread_count: int = 0
    page: int = 1
    limit: int = 10
    total_pages: int = 0


def parse_read_filter(value: Optional[str]) -> Optional[bool]:
    """Map the isRead query value ("true" | "false" | "all") to a filter."""
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in ("", "all"):
        return None
    if normalized == "true":
        return True
    if normalized == "false":
        return False
    raise ValidationException(
        "isRead must be one of true, false, all", details={"isRead": value}
    )


class NotificationService(BaseService):
    """
    Inbox reads and read-state changes for the receiving user.

    Notifications are created only by NotificationDispatcher; is_read is
    the only field that ever changes afterwards.
    """

    def __init__(self, repository: INotificationRepository):
        super().__init__(repository)

    def _load_for_actor(self, notification_id: str, actor: Actor) -> Notification:
        notification = self.repository.find_by_id(notification_id)
        if notification is None:
            raise NotFoundException(
                "Notification not found", details={"notification_id": notification_id}
            )
        if notification.receiver_id != actor.user_id and not actor.is_admin:
            raise ForbiddenException(
                "You do not have access to this notification",
                details={"notification_id": notification_id},
            )
        return notification

    @BaseService.measure_operation("list_notifications")
    def list_notifications(
        self,
        actor: Actor,
        page: int = 1,
        limit: Optional[int] = None,
        is_read: Optional[bool] = None,
    ) -> NotificationPage:
        """Page through the actor's own inbox, newest first."""
        limit = settings.default_page_limit if limit is None else limit
        if page < 1:
            raise ValidationException("page must be 1 or greater", details={"page": page})
        if limit < 1 or limit > settings.max_page_limit:
            raise ValidationException(
                f"limit must be between 1 and {settings.max_page_limit}", details={"limit": limit}
            )

        rows, total = self.repository.list_for_receiver(
            actor.user_id, is_read, offset=(page - 1) * limit, limit=limit
        )
        return NotificationPage(
            data=list(rows),
            total=total,
            unread_count=self.repository.count_unread(actor.user_id),
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if total else 0,
        )

    @BaseService.measure_operation("get_notification")
    def get_notification(self, notification_id: str, actor: Actor) -> Notification:
        """Get one notification; receiver or admin only."""
        return self._load_for_actor(notification_id, actor)

    @BaseService.measure_operation("set_notification_read_state")
    def set_read_state(self, notification_id: str, actor: Actor, is_read: bool) -> Notification:
        """Mark one notification read or unread."""
        with self.transaction():
            self._load_for_actor(notification_id, actor)
            notification = self.repository.set_read(notification_id, is_read)
            if notification is None:
                raise NotFoundException(
                    "Notification not found", details={"notification_id": notification_id}
                )
        return notification

    @BaseService.measure_operation("mark_notifications_read")
    def mark_all_read(self, actor: Actor, ids: Optional[Sequence[str]] = None) -> int:
        """
        Mark the actor's notifications read (only ``ids`` when given).

        Returns:
            The actor's remaining unread count
        """
        with self.transaction():
            updated = self.repository.mark_read_for_receiver(actor.user_id, ids)
        self.logger.debug(f"Marked {updated} notifications read for {actor.user_id}")
        return self.repository.count_unread(actor.user_id)

"""
Notification model for Lessonbook.

In-app inbox entries generated as side effects of booking transitions.
Never created directly by the UI; immutable after creation except for
the is_read flag.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Boolean, Column, ForeignKey, Index, String, Text
import ulid

from ..database import Base
from .types import UTCDateTime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Notification(Base):
    """In-app notification inbox entries."""

    __tablename__ = "notifications"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    receiver_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    entity_id = Column(String(26), nullable=True)
    entity_type = Column(String(50), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime, nullable=False, default=_utcnow)

    __table_args__ = (
        Index("ix_notifications_receiver_is_read", "receiver_id", "is_read"),
        Index("ix_notifications_receiver_created_at", "receiver_id", created_at.desc()),
        Index("ix_notifications_entity", "entity_type", "entity_id"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if self.is_read is None:
            self.is_read = False

    def __repr__(self) -> str:
        return f"<Notification {self.id}: {self.type} -> {self.receiver_id}>"


__all__ = ["Notification"]

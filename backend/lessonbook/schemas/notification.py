# backend/lessonbook/schemas/notification.py
"""Schemas for notification inbox endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field

from ._strict_base import StrictModel, StrictRequestModel


class NotificationResponse(StrictModel):
    """Notification inbox entry."""

    id: str
    receiver_id: str
    sender_id: Optional[str] = None
    type: str
    title: str
    message: str
    entity_id: Optional[str] = None
    entity_type: Optional[str] = None
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, **StrictModel.model_config)


class NotificationPageMetadata(StrictModel):
    total: int = Field(..., ge=0)
    unread_count: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1, le=100)
    total_pages: int = Field(..., ge=0)


class NotificationListResponse(StrictModel):
    """Paginated notification response."""

    data: List[NotificationResponse]
    metadata: NotificationPageMetadata


class NotificationMarkReadRequest(StrictRequestModel):
    """Mark the listed notifications read; all of them when ids is omitted."""

    ids: Optional[List[str]] = None


class NotificationMarkReadResponse(StrictModel):
    message: str
    unread_count: int = Field(..., ge=0)


class NotificationReadStateUpdate(StrictRequestModel):
    """The only change a notification accepts."""

    is_read: bool

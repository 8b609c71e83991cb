# backend/lessonbook/routes/v1/notifications.py
"""
Notification inbox routes - API v1

Endpoints:
    GET / - The caller's notifications, newest first, with unread count
    PATCH / - Mark the listed (or all) notifications read
    GET /{notification_id} - One notification (receiver or admin)
    PATCH /{notification_id} - Set isRead on one notification
"""

import asyncio
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status

from ...api.dependencies import get_current_actor, get_notification_service
from ...core.exceptions import DomainException
from ...principal import Actor
from ...schemas.notification import (
    NotificationListResponse,
    NotificationMarkReadRequest,
    NotificationMarkReadResponse,
    NotificationPageMetadata,
    NotificationReadStateUpdate,
    NotificationResponse,
)
from ...services.notification_service import NotificationService, parse_read_filter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    is_read: Optional[str] = Query(None, alias="isRead", description="true, false or all"),
    current_actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationListResponse:
    """List the caller's notifications."""
    try:
        read_filter = parse_read_filter(is_read)
        result = await asyncio.to_thread(
            service.list_notifications, current_actor, page, limit, read_filter
        )
    except DomainException as e:
        handle_domain_exception(e)

    return NotificationListResponse(
        data=[NotificationResponse.model_validate(n) for n in result.data],
        metadata=NotificationPageMetadata(
            total=result.total,
            unread_count=result.unread_count,
            page=result.page,
            limit=result.limit,
            total_pages=result.total_pages,
        ),
    )


@router.patch("", response_model=NotificationMarkReadResponse)
async def mark_notifications_read(
    payload: Optional[NotificationMarkReadRequest] = Body(None),
    current_actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationMarkReadResponse:
    """Mark notifications read; all of the caller's when no ids are given."""
    ids = payload.ids if payload else None
    try:
        unread_count = await asyncio.to_thread(service.mark_all_read, current_actor, ids)
    except DomainException as e:
        handle_domain_exception(e)

    return NotificationMarkReadResponse(
        message="Notifications marked as read", unread_count=unread_count
    )


@router.get("/{notification_id}", response_model=NotificationResponse)
async def get_notification(
    notification_id: str = Path(..., min_length=1),
    current_actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    """Get one notification."""
    try:
        notification = await asyncio.to_thread(
            service.get_notification, notification_id, current_actor
        )
    except DomainException as e:
        handle_domain_exception(e)

    return NotificationResponse.model_validate(notification)


@router.patch("/{notification_id}", response_model=NotificationResponse)
async def update_notification(
    update_data: NotificationReadStateUpdate,
    notification_id: str = Path(..., min_length=1),
    current_actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    """Set the read flag of one notification."""
    try:
        notification = await asyncio.to_thread(
            service.set_read_state, notification_id, current_actor, update_data.is_read
        )
    except DomainException as e:
        handle_domain_exception(e)

    return NotificationResponse.model_validate(notification)

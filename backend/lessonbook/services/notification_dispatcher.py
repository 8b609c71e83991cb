# backend/lessonbook/services/notification_dispatcher.py
"""
Notification Dispatcher for the Lessonbook platform.

Turns a committed booking transition into exactly one inbox entry for the
counterparty:
- a new request notifies the teacher
- a change made by the student notifies the teacher, and vice versa
- a change made by an admin (who is not on the booking) notifies the party
  selected by ``admin_notification_target``

Dispatch runs after the booking write has committed. The booking is the
source of truth, so a failure here is logged and reported as ``None``
instead of being raised.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

from ..core.config import settings
from ..core.enums import EntityType
from ..models.booking import Booking, BookingStatus
from ..models.notification import Notification
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..principal import Actor
from ..repositories.interfaces import (
    INotificationRepository,
    ITeacherProfileRepository,
    IUserRepository,
)
from .base import BaseService
from .notification_templates import (
    BOOKING_REQUEST,
    STATUS_TEMPLATES,
    NotificationTemplate,
    format_session_time,
)

logger = logging.getLogger(__name__)

ADMIN_TARGET_STUDENT = "student"
ADMIN_TARGET_TEACHER = "teacher"


@dataclass(frozen=True)
class BookingTransition:
    """
    A completed change of booking status.

    ``previous_status`` is None for a newly created booking.
    """

    previous_status: Optional[BookingStatus]
    new_status: BookingStatus
    actor: Actor
    cancel_reason: Optional[str] = None

    @property
    def is_creation(self) -> bool:
        return self.previous_status is None

    @property
    def is_noop(self) -> bool:
        return self.previous_status == self.new_status


class NotificationDispatcher(BaseService):
    """Creates the inbox entry that announces a booking transition."""

    def __init__(
        self,
        repository: INotificationRepository,
        user_repository: IUserRepository,
        teacher_profile_repository: ITeacherProfileRepository,
        admin_notification_target: Optional[str] = None,
        default_timezone: Optional[str] = None,
    ):
        super().__init__(repository)
        self.user_repository = user_repository
        self.teacher_profile_repository = teacher_profile_repository
        self.admin_notification_target = (
            admin_notification_target or settings.admin_notification_target
        )
        self.default_timezone = default_timezone or settings.default_timezone

    def resolve_receiver_id(self, booking: Booking, transition: BookingTransition) -> Optional[str]:
        """Pick the counterparty of the transition's actor."""
        profile = self.teacher_profile_repository.find_by_id(booking.teacher_profile_id)
        teacher_user_id = profile.user_id if profile else None
        actor_id = transition.actor.user_id

        if transition.is_creation:
            return teacher_user_id
        if actor_id == booking.student_id:
            return teacher_user_id
        if teacher_user_id is not None and actor_id == teacher_user_id:
            return booking.student_id
        if self.admin_notification_target == ADMIN_TARGET_TEACHER:
            return teacher_user_id
        return booking.student_id

    def _template_for(self, transition: BookingTransition) -> Optional[NotificationTemplate]:
        if transition.is_creation:
            return BOOKING_REQUEST
        return STATUS_TEMPLATES.get(transition.new_status)

    @BaseService.measure_operation("dispatch_notification")
    def dispatch(self, booking: Booking, transition: BookingTransition) -> Optional[Notification]:
        """
        Persist the notification for a transition.

        Returns:
            The created notification, or None for no-ops, transitions
            without a template, and failures (which are logged)
        """
        if transition.is_noop:
            return None

        template = self._template_for(transition)
        if template is None:
            self.logger.debug(f"No notification template for status {transition.new_status}")
            return None

        try:
            receiver_id = self.resolve_receiver_id(booking, transition)
            if receiver_id is None:
                self.logger.warning(
                    f"Booking {booking.id} has no resolvable receiver for {template.type.value}"
                )
                prometheus_metrics.record_notification(template.type.value, "failed")
                return None

            receiver = self.user_repository.find_by_id(receiver_id)
            sender = self.user_repository.find_by_id(transition.actor.user_id)
            date_str, time_str = format_session_time(
                booking.start_time,
                receiver.timezone if receiver else None,
                receiver.locale if receiver else None,
                fallback_timezone=self.default_timezone,
            )
            message = template.render(
                date=date_str,
                time=time_str,
                reason=transition.cancel_reason or booking.cancel_reason or "",
                sender_name=sender.name if sender else "A student",
            )

            with self.transaction():
                notification = self.repository.insert(
                    receiver_id=receiver_id,
                    sender_id=transition.actor.user_id,
                    type=template.type.value,
                    title=template.title,
                    message=message,
                    entity_id=booking.id,
                    entity_type=EntityType.BOOKING.value,
                    is_read=False,
                )
        except Exception as e:
            # The booking write already committed; delivery is best-effort
            self.logger.error(
                f"Failed to create {template.type.value} notification for booking {booking.id}: {str(e)}",
                exc_info=True,
            )
            prometheus_metrics.record_notification(template.type.value, "failed")
            return None

        prometheus_metrics.record_notification(template.type.value, "created")
        self.log_operation(
            "dispatch_notification",
            booking_id=booking.id,
            notification_type=template.type.value,
            receiver_id=receiver_id,
        )
        return notification

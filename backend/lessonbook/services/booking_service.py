# backend/lessonbook/services/booking_service.py
"""
Booking Service for the Lessonbook platform.

Orchestrates the booking lifecycle:
- create: validate target and interval, check conflicts and insert under a
  per-teacher lock, then announce the request to the teacher
- read: only the student, the teacher on the booking, or an admin
- update/cancel: run the transition table for the status and for every
  field, write all allowed changes at once, then notify the counterparty
- list: delegated to BookingQueryService

Every method takes the calling ``Actor`` explicitly. Notifications are
dispatched only after the booking write has committed; update and cancel
are never retried.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Any, Callable, Dict, Optional

from ..core.config import settings
from ..core.exceptions import (
    ConcurrentUpdateException,
    ForbiddenException,
    NotFoundException,
    OverlapConstraintViolation,
    SlotUnavailableException,
    StaleWriteViolation,
    TeacherNotFoundException,
    TransitionDeniedException,
)
from ..models.booking import Booking, BookingStatus
from ..models.teacher_profile import TeacherProfile
from ..models.types import ensure_utc
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..principal import Actor
from ..repositories.factory import Repositories
from ..schemas.booking import BookingCreate, BookingUpdate
from .base import BaseService
from .booking_query_service import BookingFilters, BookingPage, BookingQueryService
from .conflict_checker import ConflictChecker
from .notification_dispatcher import BookingTransition, NotificationDispatcher
from .transition_table import (
    FIELD_MEETING_LINK,
    FIELD_NOTES,
    FIELD_TEACHER_NOTES,
    ActorRelation,
    can_set_field,
    can_transition,
    normalize_status,
    resolve_cancel_reason,
)

logger = logging.getLogger(__name__)

SLOT_UNAVAILABLE_MESSAGE = "The requested time is not available, please choose another time"

# Order matters only for which denial is reported first
_EDITABLE_FIELDS = (FIELD_TEACHER_NOTES, FIELD_MEETING_LINK, FIELD_NOTES)


@dataclass
class BookingDetails:
    """A booking plus the parties it references."""

    booking: Booking
    student: Optional[User]
    teacher_profile: Optional[TeacherProfile]
    teacher_user: Optional[User]


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Depends only on repository interfaces; the store behind them is chosen
    when the service is composed.
    """

    def __init__(
        self,
        repositories: Repositories,
        notification_dispatcher: Optional[NotificationDispatcher] = None,
        conflict_checker: Optional[ConflictChecker] = None,
        query_service: Optional[BookingQueryService] = None,
        clock: Optional[Callable[[], datetime]] = None,
        cancel_reason_policy: Optional[str] = None,
        default_cancel_reason: Optional[str] = None,
    ):
        """
        Initialize booking service.

        Args:
            repositories: Repositories over one data source
            notification_dispatcher: Optional dispatcher (built from repositories if omitted)
            conflict_checker: Optional conflict checker (built from repositories if omitted)
            query_service: Optional listing service (built from repositories if omitted)
            clock: Returns the current UTC time; injectable for tests
            cancel_reason_policy: "default" or "require" (settings if omitted)
            default_cancel_reason: Substitute reason (settings if omitted)
        """
        super().__init__(repositories.bookings)
        self.repositories = repositories
        self.teacher_profile_repository = repositories.teacher_profiles
        self.user_repository = repositories.users
        self.conflict_checker = conflict_checker or ConflictChecker(repositories.bookings, clock=clock)
        self.notification_dispatcher = notification_dispatcher or NotificationDispatcher(
            repositories.notifications, repositories.users, repositories.teacher_profiles
        )
        self.query_service = query_service or BookingQueryService(
            repositories.bookings, repositories.teacher_profiles
        )
        self.cancel_reason_policy = cancel_reason_policy or settings.cancel_reason_policy
        self.default_cancel_reason = default_cancel_reason or settings.default_cancel_reason

    # Create

    def _resolve_student_id(self, actor: Actor, booking_data: BookingCreate) -> str:
        if actor.is_admin and booking_data.student_id:
            if self.user_repository.find_by_id(booking_data.student_id) is None:
                raise NotFoundException(
                    "Student not found", details={"student_id": booking_data.student_id}
                )
            return booking_data.student_id
        if booking_data.student_id and booking_data.student_id != actor.user_id:
            raise ForbiddenException("Students can only book sessions for themselves")
        return actor.user_id

    def _load_bookable_profile(self, teacher_profile_id: str) -> TeacherProfile:
        profile = self.teacher_profile_repository.find_by_id(teacher_profile_id)
        if profile is None or not profile.is_approved:
            raise TeacherNotFoundException(teacher_profile_id)
        return profile

    @BaseService.measure_operation("create_booking")
    def create_booking(self, actor: Actor, booking_data: BookingCreate) -> Booking:
        """
        Request a session; the booking starts PENDING.

        Args:
            actor: The caller (student or admin)
            booking_data: Teacher profile, interval and optional notes

        Returns:
            Created booking

        Raises:
            ForbiddenException: caller is neither student nor admin
            TeacherNotFoundException: profile missing or not APPROVED
            InvalidTimeRangeException: end not after start, or start not in the future
            SlotUnavailableException: an active booking overlaps the interval
        """
        self.log_operation(
            "create_booking",
            actor_id=actor.user_id,
            teacher_profile_id=booking_data.teacher_profile_id,
        )

        if not (actor.is_student or actor.is_admin):
            raise ForbiddenException("Only students can request bookings")

        student_id = self._resolve_student_id(actor, booking_data)
        profile = self._load_bookable_profile(booking_data.teacher_profile_id)

        start_time = ensure_utc(booking_data.start_time)
        end_time = ensure_utc(booking_data.end_time)
        self.conflict_checker.validate_time_range(start_time, end_time, require_future=False)

        with self.transaction():
            # Holds until commit; concurrent creates for this teacher wait here
            self.repository.lock_teacher(profile.id)

            conflicts = self.conflict_checker.check_booking_conflicts(
                profile.id, start_time, end_time
            )
            if conflicts:
                raise SlotUnavailableException(
                    SLOT_UNAVAILABLE_MESSAGE,
                    details={"teacher_profile_id": profile.id, "conflicts": conflicts},
                )

            self.conflict_checker.ensure_future_start(start_time)

            try:
                booking = self.repository.insert(
                    student_id=student_id,
                    teacher_profile_id=profile.id,
                    start_time=start_time,
                    end_time=end_time,
                    status=BookingStatus.PENDING.value,
                    notes=booking_data.notes,
                )
            except OverlapConstraintViolation as exc:
                # Lost a race the application-level check could not see
                self.logger.warning(
                    f"Store rejected overlapping booking for teacher profile {profile.id}"
                )
                raise SlotUnavailableException(
                    SLOT_UNAVAILABLE_MESSAGE,
                    details={"teacher_profile_id": profile.id},
                ) from exc

        self.logger.info(f"Created booking {booking.id} for teacher profile {profile.id}")

        self.notification_dispatcher.dispatch(
            booking,
            BookingTransition(previous_status=None, new_status=BookingStatus.PENDING, actor=actor),
        )
        return booking

    # Read

    def _teacher_user_id(self, booking: Booking) -> Optional[str]:
        profile = self.teacher_profile_repository.find_by_id(booking.teacher_profile_id)
        return profile.user_id if profile else None

    def _load_for_actor(
        self, booking_id: str, actor: Actor, for_update: bool = False
    ) -> tuple[Booking, ActorRelation]:
        if for_update:
            booking = self.repository.find_by_id_for_update(booking_id)
        else:
            booking = self.repository.find_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})

        relation = ActorRelation.from_actor(actor, booking, self._teacher_user_id(booking))
        if not relation.is_party:
            raise ForbiddenException(
                "You do not have access to this booking", details={"booking_id": booking_id}
            )
        return booking, relation

    @BaseService.measure_operation("get_booking")
    def get_booking_for_actor(self, booking_id: str, actor: Actor) -> Booking:
        """
        Get a booking the actor is party to.

        Raises:
            NotFoundException: no such booking
            ForbiddenException: actor is not the student, the teacher, or an admin
        """
        booking, _ = self._load_for_actor(booking_id, actor)
        return booking

    @BaseService.measure_operation("get_booking_details")
    def get_booking_details(self, booking_id: str, actor: Actor) -> BookingDetails:
        """Same access rule as get_booking_for_actor, with the referenced parties loaded."""
        booking, _ = self._load_for_actor(booking_id, actor)
        profile = self.teacher_profile_repository.find_by_id(booking.teacher_profile_id)
        return BookingDetails(
            booking=booking,
            student=self.user_repository.find_by_id(booking.student_id),
            teacher_profile=profile,
            teacher_user=self.user_repository.find_by_id(profile.user_id) if profile else None,
        )

    # Update / cancel

    def _collect_changes(
        self,
        booking: Booking,
        relation: ActorRelation,
        actor: Actor,
        patch: BookingUpdate,
    ) -> tuple[Dict[str, Any], Optional[BookingTransition]]:
        current = normalize_status(booking.status)
        requested = normalize_status(patch.status) if patch.status is not None else current

        decision = can_transition(current, requested, relation)
        if not decision.allowed:
            raise TransitionDeniedException(
                decision.reason or "Status change not allowed",
                details={"from": current.value, "to": requested.value},
            )

        changes: Dict[str, Any] = {}
        transition: Optional[BookingTransition] = None

        if not decision.noop:
            changes["status"] = requested.value
            cancel_reason = None
            if requested == BookingStatus.CANCELLED:
                cancel_reason = resolve_cancel_reason(
                    patch.cancel_reason, self.cancel_reason_policy, self.default_cancel_reason
                )
                changes["cancel_reason"] = cancel_reason
                changes["canceled_by"] = actor.user_id
            transition = BookingTransition(
                previous_status=current,
                new_status=requested,
                actor=actor,
                cancel_reason=cancel_reason,
            )
        elif patch.cancel_reason is not None:
            self.logger.debug(f"Ignoring cancel reason on booking {booking.id}: not being cancelled")

        for field in _EDITABLE_FIELDS:
            value = getattr(patch, field)
            if value is None:
                continue
            field_decision = can_set_field(field, relation, requested)
            if not field_decision.allowed:
                raise TransitionDeniedException(
                    field_decision.reason or f"Not allowed to set {field}",
                    details={"field": field},
                )
            if value != getattr(booking, field):
                changes[field] = value

        return changes, transition

    @BaseService.measure_operation("update_booking")
    def update_booking(self, booking_id: str, actor: Actor, patch: BookingUpdate) -> Booking:
        """
        Apply a status change and/or field edits.

        Requesting the current status with no other change returns the
        booking untouched and notifies nobody.

        Raises:
            NotFoundException: no such booking
            ForbiddenException: actor is not a party to the booking
            TransitionDeniedException: the state machine rejects a change
            ConcurrentUpdateException: the booking changed while this update ran
            ValidationException: unknown status, or a missing reason when reasons are required
        """
        self.log_operation(
            "update_booking", booking_id=booking_id, actor_id=actor.user_id, status=patch.status
        )

        with self.transaction():
            booking, relation = self._load_for_actor(booking_id, actor, for_update=True)
            changes, transition = self._collect_changes(booking, relation, actor, patch)
            if not changes:
                return booking
            try:
                updated = self.repository.update_fields(
                    booking_id, expected_status=booking.status, **changes
                )
            except StaleWriteViolation as exc:
                # Another request changed the status after our read; never merge
                self.logger.warning(f"Booking {booking_id} changed concurrently: {str(exc)}")
                raise ConcurrentUpdateException(
                    "The booking was changed by another request, please reload and retry",
                    details={"booking_id": booking_id},
                ) from exc
            if updated is None:
                raise NotFoundException("Booking not found", details={"booking_id": booking_id})

        if transition is not None:
            self.logger.info(
                f"Booking {booking_id} moved {transition.previous_status.value} -> "
                f"{transition.new_status.value} by {actor.role.value} {actor.user_id}"
            )
            prometheus_metrics.record_booking_transition(
                transition.previous_status.value, transition.new_status.value
            )
            self.notification_dispatcher.dispatch(updated, transition)

        return updated

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, booking_id: str, actor: Actor, reason: Optional[str] = None) -> Booking:
        """Cancel a booking; records the actor as canceled_by."""
        return self.update_booking(
            booking_id,
            actor,
            BookingUpdate(status=BookingStatus.CANCELLED.value, cancel_reason=reason),
        )

    # List

    def list_bookings(self, actor: Actor, filters: Optional[BookingFilters] = None) -> BookingPage:
        """Role-scoped listing; see BookingQueryService."""
        return self.query_service.list_bookings(actor, filters)

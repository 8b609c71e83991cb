"""
Booking status state machine.

Pure functions mapping (current status, requested change, who is asking)
to an allow/deny decision. No I/O; the Booking Service feeds in the
booking and the caller's relationship to it.

Rules:
- CONFIRMED, COMPLETED, NO_SHOW: teacher-on-booking or admin
- CANCELLED: student-on-booking, teacher-on-booking or admin
- Nothing leaves a terminal status (CANCELLED, COMPLETED, NO_SHOW), not even for admin
- Nothing goes back to PENDING
- Requesting the current status is an allowed no-op
- teacher_notes: teacher-on-booking or admin
- meeting_link: teacher-on-booking or admin, once the status is/becomes CONFIRMED
- notes: student-on-booking or admin
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..core.enums import RoleName
from ..core.exceptions import ValidationException
from ..models.booking import TERMINAL_STATUSES, BookingStatus

if TYPE_CHECKING:
    from ..models.booking import Booking
    from ..principal import Actor

# Older call sites still send these spellings
_STATUS_SYNONYMS = {
    "SCHEDULED": BookingStatus.CONFIRMED,
    "CANCELED": BookingStatus.CANCELLED,
}

# Status -> may the student / the teacher on the booking request it
_STATUS_PERMISSIONS: dict[BookingStatus, tuple[bool, bool]] = {
    BookingStatus.CONFIRMED: (False, True),
    BookingStatus.COMPLETED: (False, True),
    BookingStatus.NO_SHOW: (False, True),
    BookingStatus.CANCELLED: (True, True),
}

FIELD_TEACHER_NOTES = "teacher_notes"
FIELD_MEETING_LINK = "meeting_link"
FIELD_NOTES = "notes"

# Field -> may the student / the teacher on the booking set it
_FIELD_PERMISSIONS: dict[str, tuple[bool, bool]] = {
    FIELD_TEACHER_NOTES: (False, True),
    FIELD_MEETING_LINK: (False, True),
    FIELD_NOTES: (True, False),
}

CANCEL_REASON_POLICY_DEFAULT = "default"
CANCEL_REASON_POLICY_REQUIRE = "require"


@dataclass(frozen=True)
class ActorRelation:
    """The caller as the state machine sees them."""

    role: RoleName
    is_student_on_booking: bool = False
    is_teacher_on_booking: bool = False

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN

    @property
    def is_party(self) -> bool:
        return self.is_admin or self.is_student_on_booking or self.is_teacher_on_booking

    @classmethod
    def from_actor(cls, actor: Actor, booking: Booking, teacher_user_id: str | None) -> ActorRelation:
        """
        Relate an actor to a booking.

        Args:
            actor: The caller
            booking: The booking being read or changed
            teacher_user_id: User id owning the booking's teacher profile
        """
        return cls(
            role=actor.role,
            is_student_on_booking=booking.student_id == actor.user_id,
            is_teacher_on_booking=teacher_user_id is not None and teacher_user_id == actor.user_id,
        )


@dataclass(frozen=True)
class TransitionDecision:
    allowed: bool
    noop: bool = False
    reason: str | None = None

    @classmethod
    def allow(cls, noop: bool = False) -> TransitionDecision:
        return cls(allowed=True, noop=noop)

    @classmethod
    def deny(cls, reason: str) -> TransitionDecision:
        return cls(allowed=False, reason=reason)


def normalize_status(value: Any) -> BookingStatus:
    """
    Coerce a status value into a BookingStatus.

    Raises:
        ValidationException: value is not a known status
    """
    if isinstance(value, BookingStatus):
        return value
    raw = str(getattr(value, "value", value) or "").strip().upper()
    if raw in _STATUS_SYNONYMS:
        return _STATUS_SYNONYMS[raw]
    try:
        return BookingStatus(raw)
    except ValueError:
        raise ValidationException(
            f"Unknown booking status: {value}",
            details={"status": str(value), "allowed": [s.value for s in BookingStatus]},
        )


def _permitted(permissions: tuple[bool, bool], relation: ActorRelation) -> bool:
    student_ok, teacher_ok = permissions
    return (
        relation.is_admin
        or (student_ok and relation.is_student_on_booking)
        or (teacher_ok and relation.is_teacher_on_booking)
    )


def can_transition(current: Any, requested: Any, relation: ActorRelation) -> TransitionDecision:
    """Decide whether ``relation`` may move a booking from ``current`` to ``requested``."""
    current_status = normalize_status(current)
    requested_status = normalize_status(requested)

    if current_status == requested_status:
        return TransitionDecision.allow(noop=True)

    if current_status in TERMINAL_STATUSES:
        return TransitionDecision.deny(
            f"Booking is {current_status.value} and can no longer change status"
        )

    if requested_status == BookingStatus.PENDING:
        return TransitionDecision.deny("A booking cannot be returned to PENDING")

    if not _permitted(_STATUS_PERMISSIONS[requested_status], relation):
        return TransitionDecision.deny(
            f"{relation.role.value.title()} is not allowed to set status {requested_status.value}"
        )

    return TransitionDecision.allow()


def can_set_field(field: str, relation: ActorRelation, resulting_status: Any) -> TransitionDecision:
    """Decide whether ``relation`` may set ``field`` given the status the booking ends up in."""
    permissions = _FIELD_PERMISSIONS.get(field)
    if permissions is None:
        return TransitionDecision.deny(f"Field {field} cannot be changed")

    if not _permitted(permissions, relation):
        return TransitionDecision.deny(
            f"{relation.role.value.title()} is not allowed to set {field}"
        )

    if field == FIELD_MEETING_LINK and normalize_status(resulting_status) != BookingStatus.CONFIRMED:
        return TransitionDecision.deny("A meeting link can only be set on a confirmed booking")

    return TransitionDecision.allow()


def resolve_cancel_reason(reason: str | None, policy: str, default_reason: str) -> str:
    """
    Apply the missing-reason policy to a cancellation.

    Raises:
        ValidationException: reason is blank and policy is "require"
    """
    cleaned = (reason or "").strip()
    if cleaned:
        return cleaned
    if policy == CANCEL_REASON_POLICY_REQUIRE:
        raise ValidationException(
            "A cancellation reason is required",
            details={"field": "cancelReason"},
        )
    return default_reason

# backend/lessonbook/services/booking_query_service.py
"""
Booking Query Service for the Lessonbook platform.

Role-scoped, paginated read model over bookings:
- Admin: unrestricted, optionally filtered by user, teacher profile,
  status and date range
- Teacher: always scoped to their own profile; a requested
  teacher_profile_id is overridden, not rejected
- Student: always scoped to their own bookings

Results are ordered by start_time, newest first.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import logging
import math
from typing import Any, List, Optional, Sequence, Union

from ..core.config import settings
from ..core.exceptions import NotFoundException, ValidationException
from ..models.booking import Booking
from ..principal import Actor
from ..repositories.interfaces import BookingCriteria, IBookingRepository, ITeacherProfileRepository
from .base import BaseService
from .transition_table import normalize_status

logger = logging.getLogger(__name__)


@dataclass
class BookingFilters:
    """Requested listing filters, before role scoping."""

    page: int = 1
    limit: Optional[int] = None
    status: Union[str, Sequence[str], None] = None
    user_id: Optional[str] = None
    teacher_profile_id: Optional[str] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None


@dataclass
class BookingPage:
    data: List[Booking] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10
    total_pages: int = 0


def parse_statuses(value: Union[str, Sequence[Any], None]) -> List[str]:
    """Accept "PENDING,CONFIRMED" or a sequence; return canonical status values."""
    if value is None:
        return []
    raw_items = value.split(",") if isinstance(value, str) else list(value)
    statuses: List[str] = []
    for item in raw_items:
        if isinstance(item, str) and not item.strip():
            continue
        status = normalize_status(item).value
        if status not in statuses:
            statuses.append(status)
    return statuses


class BookingQueryService(BaseService):
    """Lists bookings with the scope the caller's role allows."""

    def __init__(
        self,
        repository: IBookingRepository,
        teacher_profile_repository: ITeacherProfileRepository,
    ):
        super().__init__(repository)
        self.teacher_profile_repository = teacher_profile_repository

    def _page_bounds(self, page: int, limit: Optional[int]) -> tuple[int, int]:
        effective_limit = settings.default_page_limit if limit is None else limit
        if page < 1:
            raise ValidationException("page must be 1 or greater", details={"page": page})
        if effective_limit < 1 or effective_limit > settings.max_page_limit:
            raise ValidationException(
                f"limit must be between 1 and {settings.max_page_limit}",
                details={"limit": effective_limit},
            )
        return page, effective_limit

    def scope_criteria(self, actor: Actor, filters: BookingFilters) -> BookingCriteria:
        """Apply role scoping to the requested filters."""
        criteria = BookingCriteria(
            student_id=filters.user_id,
            teacher_profile_id=filters.teacher_profile_id,
            statuses=parse_statuses(filters.status),
            from_date=filters.from_date,
            to_date=filters.to_date,
        )

        if actor.is_admin:
            return criteria

        if actor.is_teacher:
            profile = self.teacher_profile_repository.find_by_user_id(actor.user_id)
            if profile is None:
                raise NotFoundException(
                    "Teacher profile not found", details={"user_id": actor.user_id}
                )
            if filters.teacher_profile_id and filters.teacher_profile_id != profile.id:
                self.logger.info(
                    f"Teacher {actor.user_id} requested bookings of profile "
                    f"{filters.teacher_profile_id}; scoping to own profile {profile.id}"
                )
            criteria.teacher_profile_id = profile.id
            return criteria

        criteria.student_id = actor.user_id
        return criteria

    @BaseService.measure_operation("list_bookings")
    def list_bookings(self, actor: Actor, filters: Optional[BookingFilters] = None) -> BookingPage:
        """
        Get one page of bookings visible to the actor.

        Raises:
            ValidationException: bad page/limit or unknown status
            NotFoundException: a teacher without a profile
        """
        filters = filters or BookingFilters()
        page, limit = self._page_bounds(filters.page, filters.limit)
        criteria = self.scope_criteria(actor, filters)

        rows, total = self.repository.list_bookings(criteria, offset=(page - 1) * limit, limit=limit)

        return BookingPage(
            data=list(rows),
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if total else 0,
        )

# backend/lessonbook/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    GET / - List bookings visible to the caller, filtered and paginated
    POST / - Request a booking (student or admin)
    GET /{booking_id} - Booking with student and teacher-profile summaries
    PATCH /{booking_id} - Change status and/or notes, meeting link
    DELETE /{booking_id} - Cancel (soft; the booking is kept as CANCELLED)
"""

import asyncio
from datetime import datetime
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from ...api.dependencies import get_booking_service, get_current_actor
from ...core.exceptions import DomainException
from ...principal import Actor
from ...schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingEnvelope,
    BookingListResponse,
    BookingResponse,
    BookingUpdate,
    PageMetadata,
    StudentSummary,
    TeacherProfileSummary,
)
from ...services.booking_query_service import BookingFilters
from ...services.booking_service import BookingDetails, BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _detail_response(details: BookingDetails) -> BookingDetailResponse:
    base = BookingResponse.model_validate(details.booking).model_dump()
    teacher_profile = None
    if details.teacher_profile is not None:
        teacher_profile = TeacherProfileSummary(
            id=details.teacher_profile.id,
            user_id=details.teacher_profile.user_id,
            name=details.teacher_user.name if details.teacher_user else None,
            headline=details.teacher_profile.headline,
            approval_status=details.teacher_profile.approval_status,
        )
    return BookingDetailResponse(
        **base,
        student=StudentSummary.model_validate(details.student) if details.student else None,
        teacher_profile=teacher_profile,
    )


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    booking_status: Optional[str] = Query(
        None, alias="status", description="One status or a comma-separated list"
    ),
    user_id: Optional[str] = Query(None, alias="userId"),
    teacher_profile_id: Optional[str] = Query(None, alias="teacherProfileId"),
    from_date: Optional[datetime] = Query(None, alias="fromDate"),
    to_date: Optional[datetime] = Query(None, alias="toDate"),
    current_actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    """
    List bookings for the caller.

    Admins see everything (optionally filtered); teachers see their own
    profile's bookings; students see their own bookings.
    """
    filters = BookingFilters(
        page=page,
        limit=limit,
        status=booking_status,
        user_id=user_id,
        teacher_profile_id=teacher_profile_id,
        from_date=from_date,
        to_date=to_date,
    )
    try:
        result = await asyncio.to_thread(booking_service.list_bookings, current_actor, filters)
    except DomainException as e:
        handle_domain_exception(e)

    return BookingListResponse(
        data=[BookingResponse.model_validate(b) for b in result.data],
        metadata=PageMetadata(
            total=result.total,
            page=result.page,
            limit=result.limit,
            total_pages=result.total_pages,
        ),
    )


@router.post("", response_model=BookingEnvelope, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    current_actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingEnvelope:
    """Request a booking; it starts PENDING and the teacher is notified."""
    try:
        booking = await asyncio.to_thread(
            booking_service.create_booking, current_actor, booking_data
        )
    except DomainException as e:
        handle_domain_exception(e)

    return BookingEnvelope(
        data=BookingResponse.model_validate(booking),
        message="Booking created and awaiting teacher confirmation",
    )


@router.get("/{booking_id}", response_model=BookingDetailResponse)
async def get_booking(
    booking_id: str = Path(..., min_length=1),
    current_actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingDetailResponse:
    """Get one booking the caller is party to."""
    try:
        details = await asyncio.to_thread(
            booking_service.get_booking_details, booking_id, current_actor
        )
    except DomainException as e:
        handle_domain_exception(e)

    return _detail_response(details)


@router.patch("/{booking_id}", response_model=BookingEnvelope)
async def update_booking(
    update_data: BookingUpdate,
    booking_id: str = Path(..., min_length=1),
    current_actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingEnvelope:
    """Change a booking's status and/or editable fields."""
    try:
        booking = await asyncio.to_thread(
            booking_service.update_booking, booking_id, current_actor, update_data
        )
    except DomainException as e:
        handle_domain_exception(e)

    return BookingEnvelope(
        data=BookingResponse.model_validate(booking),
        message="Booking updated successfully",
    )


@router.delete("/{booking_id}", response_model=BookingEnvelope)
async def cancel_booking(
    booking_id: str = Path(..., min_length=1),
    reason: Optional[str] = Query(None, max_length=500),
    current_actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingEnvelope:
    """Cancel a booking. The record is kept with status CANCELLED."""
    try:
        booking = await asyncio.to_thread(
            booking_service.cancel_booking, booking_id, current_actor, reason
        )
    except DomainException as e:
        handle_domain_exception(e)

    return BookingEnvelope(
        data=BookingResponse.model_validate(booking),
        message="Booking cancelled successfully",
    )

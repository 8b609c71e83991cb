# backend/lessonbook/schemas/booking.py
"""
Booking schemas for the Lessonbook platform.

Request bodies arrive camelCase (teacherProfileId, startTime, ...) and
responses are serialized the same way; Python code uses the snake_case
field names.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator

from ._strict_base import StrictModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    """
    Request a session with a teacher.

    ``student_id`` is honoured for admins only; a student always books
    for themself.
    """

    teacher_profile_id: str = Field(..., min_length=1, description="Teacher profile to book")
    start_time: datetime = Field(..., description="Session start (ISO 8601, UTC if no offset)")
    end_time: datetime = Field(..., description="Session end (ISO 8601, UTC if no offset)")
    notes: Optional[str] = Field(None, max_length=1000, description="Optional note from student")
    student_id: Optional[str] = Field(None, description="Student to book for (admin only)")


class BookingUpdate(StrictRequestModel):
    """Partial update of a booking; omitted fields are left unchanged."""

    status: Optional[str] = Field(None, description="Requested status")
    teacher_notes: Optional[str] = Field(None, max_length=2000)
    meeting_link: Optional[str] = Field(None, max_length=500)
    cancel_reason: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("status", mode="before")
    @classmethod
    def _upper_status(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class StudentSummary(StrictModel):
    id: str
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True, **StrictModel.model_config)


class TeacherProfileSummary(StrictModel):
    id: str
    user_id: str
    name: Optional[str] = None
    headline: Optional[str] = None
    approval_status: str

    model_config = ConfigDict(from_attributes=True, **StrictModel.model_config)


class BookingResponse(StrictModel):
    """A booking as returned by the API."""

    id: str
    student_id: str
    teacher_profile_id: str
    start_time: datetime
    end_time: datetime
    status: str
    notes: Optional[str] = None
    teacher_notes: Optional[str] = None
    meeting_link: Optional[str] = None
    cancel_reason: Optional[str] = None
    canceled_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, **StrictModel.model_config)


class BookingDetailResponse(BookingResponse):
    """Single booking with nested student and teacher-profile summaries."""

    student: Optional[StudentSummary] = None
    teacher_profile: Optional[TeacherProfileSummary] = None


class BookingEnvelope(StrictModel):
    """Result of a booking mutation."""

    data: BookingResponse
    message: str


class PageMetadata(StrictModel):
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1, le=100)
    total_pages: int = Field(..., ge=0)


class BookingListResponse(StrictModel):
    """One page of bookings."""

    data: List[BookingResponse]
    metadata: PageMetadata

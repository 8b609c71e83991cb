# backend/lessonbook/core/exceptions.py
"""
Domain-specific exceptions for the Lessonbook platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
Every exception carries an ErrorKind so callers can branch on the
failure category without matching on message text.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class ErrorKind(str, Enum):
    """Failure categories surfaced by the booking core."""

    UNAUTHENTICATED = "Unauthenticated"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    TEACHER_NOT_FOUND = "TeacherNotFound"
    VALIDATION_ERROR = "ValidationError"
    SLOT_UNAVAILABLE = "SlotUnavailable"
    INVALID_TIME_RANGE = "InvalidTimeRange"
    TRANSITION_DENIED = "TransitionDenied"
    CONCURRENT_UPDATE = "ConcurrentUpdate"
    INTERNAL = "Internal"


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        kind: Optional[ErrorKind] = None,
    ) -> None:
        self.message = message
        if kind is not None:
            self.kind = kind
        self.code = code or self.kind.value
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException carrying the structured detail."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when input fails business validation."""

    kind = ErrorKind.VALIDATION_ERROR
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    kind = ErrorKind.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND


class TeacherNotFoundException(NotFoundException):
    """Raised when a teacher profile is missing or not approved for bookings."""

    kind = ErrorKind.TEACHER_NOT_FOUND

    def __init__(self, teacher_profile_id: str):
        super().__init__(
            message="Teacher not found or not approved",
            details={"teacher_profile_id": teacher_profile_id},
        )


class UnauthorizedException(DomainException):
    """Raised when the caller is not authenticated."""

    kind = ErrorKind.UNAUTHENTICATED
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when the caller's role or ownership does not permit the action."""

    kind = ErrorKind.FORBIDDEN
    status_code = status.HTTP_403_FORBIDDEN


class TransitionDeniedException(ForbiddenException):
    """Raised when the booking state machine rejects a requested change."""

    kind = ErrorKind.TRANSITION_DENIED


class SlotUnavailableException(DomainException):
    """Raised when a requested interval overlaps an active booking."""

    kind = ErrorKind.SLOT_UNAVAILABLE
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "The requested time is not available, please choose another time",
            details=details or {},
        )


class ConcurrentUpdateException(DomainException):
    """Raised when the booking changed between being read and being written."""

    kind = ErrorKind.CONCURRENT_UPDATE
    status_code = status.HTTP_409_CONFLICT


class InvalidTimeRangeException(DomainException):
    """Raised when start is not before end, or start is not in the future."""

    kind = ErrorKind.INVALID_TIME_RANGE
    status_code = status.HTTP_400_BAD_REQUEST


class ServiceException(DomainException):
    """Raised when a service operation fails (store or dispatch failure)."""

    kind = ErrorKind.INTERNAL
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """


class OverlapConstraintViolation(RepositoryException):
    """Raised by a store when its interval-overlap guard rejects an insert."""


class StaleWriteViolation(RepositoryException):
    """Raised when a guarded update finds the row no longer in the expected state."""

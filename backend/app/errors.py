"""Domain exceptions raised by the booking core.

The service layer raises these; a single exception handler in ``app.main``
turns them into JSON responses of the form::

    {"detail": {"message": "...", "code": "...", ...details}}
"""

from typing import Any

from fastapi import status


class BookingError(Exception):
    """Base class for every business-rule rejection."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "booking_error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_detail(self) -> dict[str, Any]:
        return {"message": self.message, "code": self.code, **self.details}


class BookingValidationError(BookingError):
    """Malformed or missing input the client can correct."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class NotAuthorizedError(BookingError):
    """The actor neither owns the booking nor holds a privileged role."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "not_authorized"


class BookingNotFoundError(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class BookingConflictError(BookingError):
    """A scheduling rule rejected the request; nothing was written."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class ResourceUnavailableError(BookingConflictError):
    code = "court_unavailable"


class CoachUnavailableError(BookingConflictError):
    code = "coach_unavailable"


class CooldownActiveError(BookingConflictError):
    """Raised with ``next_available_date`` so clients need not re-query."""

    code = "cooldown_active"

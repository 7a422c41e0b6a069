"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.config import settings
from app.models.booking import BookingStatus, MembershipStatus
from app.scheduling.window import normalize_booking_date, normalize_time

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


def _blank_to_none(value: str | None) -> str | None:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class BookingCreate(BaseModel):
    """Schema for creating a new booking."""

    court_id: str = Field(..., min_length=1, max_length=64)
    booking_date: str
    start_time: str
    end_time: str
    notes: str | None = Field(None, max_length=settings.booking_notes_max_length)
    coach_id: str | None = Field(None, max_length=64)
    coach_name: str | None = Field(None, max_length=settings.coach_name_max_length)
    membership_status: MembershipStatus

    @field_validator("booking_date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        return normalize_booking_date(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_time(cls, value: str) -> str:
        return normalize_time(value)

    @field_validator("coach_id", "coach_name", "notes")
    @classmethod
    def _strip_blank(cls, value: str | None) -> str | None:
        return _blank_to_none(value)

    @model_validator(mode="after")
    def check_times(self) -> "BookingCreate":
        """Validate that end_time is strictly after start_time."""
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class BookingUpdate(BaseModel):
    """Typed patch: only fields present in the request are applied.

    ``coach_id``, ``coach_name`` and ``notes`` may be set to ``null`` to clear
    them; the remaining fields cannot be cleared.
    """

    court_id: str | None = Field(None, min_length=1, max_length=64)
    booking_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    notes: str | None = Field(None, max_length=settings.booking_notes_max_length)
    coach_id: str | None = Field(None, max_length=64)
    coach_name: str | None = Field(None, max_length=settings.coach_name_max_length)
    membership_status: MembershipStatus | None = None
    status: BookingStatus | None = None

    @field_validator("booking_date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        if value is None:
            return None
        return normalize_booking_date(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_time(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return normalize_time(value)

    @field_validator("coach_id", "coach_name", "notes")
    @classmethod
    def _strip_blank(cls, value: str | None) -> str | None:
        return _blank_to_none(value)

    @model_validator(mode="after")
    def check_fields(self) -> "BookingUpdate":
        """Reject clearing required fields; if both times are given, end > start."""
        required = ("court_id", "booking_date", "start_time", "end_time", "membership_status", "status")
        for name in required:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        if self.start_time is not None and self.end_time is not None and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    def changes(self) -> dict:
        """The fields explicitly present in the request, enums as plain values."""
        return self.model_dump(exclude_unset=True, mode="json")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """The persisted booking plus court display data."""

    id: uuid.UUID
    user_id: uuid.UUID
    court_id: str
    court_name: str | None = None
    court_color: str | None = None
    booking_date: str
    start_time: str
    end_time: str
    coach_id: str | None = None
    coach_name: str | None = None
    membership_status: str
    status: str
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OwnerSummary(BaseModel):
    full_name: str | None = None
    email: str
    phone: str | None = None

    model_config = ConfigDict(from_attributes=True)


class AdminBookingResponse(BookingResponse):
    """Booking with the owner's contact details, for privileged listings."""

    owner: OwnerSummary | None = None


class BookingListResponse(BaseModel):
    items: list[BookingResponse]
    total: int


class AdminBookingListResponse(BaseModel):
    items: list[AdminBookingResponse]
    total: int


class AvailabilitySlot(BaseModel):
    """An occupied window on the availability calendar."""

    id: uuid.UUID
    start_time: str
    end_time: str
    user_id: uuid.UUID

    model_config = ConfigDict(from_attributes=True)


class AvailabilityResponse(BaseModel):
    court_id: str
    booking_date: str
    items: list[AvailabilitySlot]

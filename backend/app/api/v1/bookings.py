"""Bookings API router.

Ownership rule: players see and change only their own bookings; admins see
and change everyone's. ``/availability`` is public and exposes occupied
windows only.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin, get_current_user, get_db
from app.config import settings
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.booking import (
    AdminBookingListResponse,
    AdminBookingResponse,
    AvailabilityResponse,
    AvailabilitySlot,
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingUpdate,
)
from app.scheduling.window import normalize_booking_date
from app.services import booking_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


@router.get(
    "/availability",
    response_model=AvailabilityResponse,
    summary="Occupied windows for a court on a date (public)",
)
async def get_availability(
    response: Response,
    court_id: str = Query(..., min_length=1, description="Court to inspect"),
    booking_date: date = Query(..., alias="date", description="Calendar day (YYYY-MM-DD)"),
    db: AsyncSession = Depends(get_db),
) -> AvailabilityResponse:
    """Return the non-cancelled bookings' windows so clients can render a calendar."""
    rows = await booking_service.get_availability(db, court_id, booking_date)

    response.headers["Cache-Control"] = settings.availability_cache_control
    logger.info(
        "Availability request: court_id=%s date=%s results=%d",
        court_id,
        booking_date,
        len(rows),
    )
    return AvailabilityResponse(
        court_id=court_id,
        booking_date=normalize_booking_date(booking_date),
        items=[AvailabilitySlot.model_validate(row) for row in rows],
    )


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingResponse:
    """Book a court (optionally with a coach) for the current user.

    Rejected with 409 when the cooldown since the user's last booking has not
    elapsed, or when the court or coach is taken for an overlapping window.
    """
    booking = await booking_service.create_booking(db, body, current_user)
    return BookingResponse.model_validate(booking)


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List the current user's bookings",
)
async def list_my_bookings(
    upcoming: bool = Query(True, description="Only bookings from today onwards"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingListResponse:
    bookings = await booking_service.get_user_bookings(db, current_user.id, upcoming_only=upcoming)
    return BookingListResponse(
        items=[BookingResponse.model_validate(b) for b in bookings],
        total=len(bookings),
    )


@router.get(
    "/all",
    response_model=AdminBookingListResponse,
    summary="List every booking (admin)",
)
async def list_all_bookings(
    date_from: date | None = Query(None, description="Bookings on or after this date"),
    date_to: date | None = Query(None, description="Bookings on or before this date"),
    court_id: str | None = Query(None, description="Filter by court"),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(get_current_admin),
) -> AdminBookingListResponse:
    bookings = await booking_service.get_all_bookings(db, date_from=date_from, date_to=date_to, court_id=court_id)
    return AdminBookingListResponse(
        items=[AdminBookingResponse.model_validate(b) for b in bookings],
        total=len(bookings),
    )


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a single booking",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingResponse:
    """Returns 404 unless the booking belongs to the current user (admins see all)."""
    booking = await booking_service.get_booking_for_actor(db, booking_id, current_user)
    return BookingResponse.model_validate(booking)


@router.put(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Update a booking",
)
async def update_booking(
    booking_id: uuid.UUID,
    body: BookingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingResponse:
    """Partially update a booking; conflicts are re-checked when the window moves."""
    booking = await booking_service.update_booking(
        db,
        booking_id,
        body,
        actor_id=current_user.id,
        is_privileged=current_user.is_admin,
    )
    return BookingResponse.model_validate(booking)


@router.patch(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel a booking",
)
async def cancel_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingResponse:
    booking = await booking_service.cancel_booking(
        db,
        booking_id,
        actor_id=current_user.id,
        is_privileged=current_user.is_admin,
    )
    return BookingResponse.model_validate(booking)


@router.delete(
    "/{booking_id}",
    response_model=MessageResponse,
    summary="Delete a booking",
)
async def delete_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    await booking_service.delete_booking(
        db,
        booking_id,
        actor_id=current_user.id,
        is_privileged=current_user.is_admin,
    )
    return {"message": "Booking deleted"}

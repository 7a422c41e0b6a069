"""Booking lifecycle operations.

Admission runs its gates in a fixed order and writes nothing until all of
them pass: membership tag, cooldown, court conflict, coach conflict. The
checks and the insert are separate statements; the partial unique indexes
on ``bookings`` turn an identical-slot race into a conflict error, while two
concurrent requests for overlapping but differently-aligned windows can
still both pass the read (accepted limitation).
"""

import logging
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import (
    BookingConflictError,
    BookingNotFoundError,
    BookingValidationError,
    CoachUnavailableError,
    ResourceUnavailableError,
)
from app.models.booking import Booking, BookingStatus, MembershipStatus
from app.models.user import User
from app.notifications import outbox
from app.notifications.dispatcher import BookingNotice, notify_booking_cancelled, notify_booking_created
from app.scheduling.authorization import can_modify_booking, ensure_can_modify_booking
from app.scheduling.conflicts import check_coach_conflict, check_conflict, check_resource_conflict
from app.scheduling.cooldown import ensure_cooldown_elapsed
from app.scheduling.window import TimeWindow, normalize_booking_date
from app.schemas.booking import BookingCreate, BookingUpdate
from app.services.coach_service import ensure_coach

logger = logging.getLogger(__name__)

_WINDOW_FIELDS = ("court_id", "booking_date", "start_time", "end_time", "coach_id")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def utc_today() -> date:
    """Current calendar day in UTC; the day boundary for "upcoming" bookings."""
    return datetime.now(timezone.utc).date()


async def _load_booking(db: AsyncSession, booking_id: uuid.UUID) -> Booking | None:
    """Fetch a booking with fresh column values and its court/owner loaded."""
    result = await db.execute(
        select(Booking).where(Booking.id == booking_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _get_booking_or_404(db: AsyncSession, booking_id: uuid.UUID) -> Booking:
    booking = await _load_booking(db, booking_id)
    if booking is None:
        raise BookingNotFoundError("Booking not found")
    return booking


def _validate_membership(value) -> str:
    try:
        return MembershipStatus(value).value
    except ValueError:
        allowed = ", ".join(m.value for m in MembershipStatus)
        raise BookingValidationError(
            f"membership_status is required and must be one of: {allowed}",
            field="membership_status",
        ) from None


def _build_window(**fields) -> TimeWindow:
    try:
        return TimeWindow.build(**fields)
    except ValueError as exc:
        raise BookingValidationError(str(exc)) from None


def _conflict_from_integrity_error(exc: IntegrityError) -> BookingConflictError:
    """Map a unique-slot violation to the matching conflict error."""
    text = str(exc.orig)
    if "uq_bookings_coach_slot" in text or "bookings.coach_id" in text:
        return CoachUnavailableError("Coach not available")
    return ResourceUnavailableError("Time slot not available")


async def _flush_or_conflict(db: AsyncSession, booking: Booking) -> None:
    try:
        async with db.begin_nested():
            db.add(booking)
    except IntegrityError as exc:
        logger.info("Slot taken concurrently for court %s on %s", booking.court_id, booking.booking_date)
        raise _conflict_from_integrity_error(exc) from exc


def _queue_notice(db: AsyncSession, name: str, dispatch, booking: Booking) -> None:
    """Snapshot the booking now; the notice goes out once the transaction commits."""
    outbox.enqueue(db, name, dispatch, BookingNotice.from_booking(booking, booking.owner))


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def create_booking(db: AsyncSession, request: BookingCreate, user: User) -> Booking:
    """Admit a new booking for ``user`` or raise the first failing rule.

    Raises:
        BookingValidationError: missing/invalid membership tag or window.
        CooldownActiveError: the user's previous booking is too recent.
        ResourceUnavailableError: the court is taken for an overlapping window.
        CoachUnavailableError: the coach is taken for an overlapping window.
    """
    membership = _validate_membership(request.membership_status)
    window = _build_window(
        court_id=request.court_id,
        booking_date=request.booking_date,
        start_time=request.start_time,
        end_time=request.end_time,
        coach_id=request.coach_id,
    )

    await ensure_cooldown_elapsed(db, user.id, window.booking_date)

    if await check_resource_conflict(db, window) is not None:
        raise ResourceUnavailableError("Time slot not available")

    if window.coach_id:
        if await check_coach_conflict(db, window) is not None:
            raise CoachUnavailableError("Coach not available")
        await ensure_coach(db, window.coach_id, request.coach_name)

    booking = Booking(
        user_id=user.id,
        court_id=window.court_id,
        booking_date=window.booking_date,
        start_time=window.start_time,
        end_time=window.end_time,
        coach_id=window.coach_id,
        coach_name=request.coach_name if window.coach_id else None,
        membership_status=membership,
        status=BookingStatus.CONFIRMED.value,
        notes=request.notes,
    )
    await _flush_or_conflict(db, booking)

    booking = await _load_booking(db, booking.id)
    logger.info(
        "Booking %s created by user %s: court %s on %s %s-%s",
        booking.id,
        user.id,
        booking.court_id,
        booking.booking_date,
        booking.start_time,
        booking.end_time,
    )

    _queue_notice(db, "booking_created", notify_booking_created, booking)
    return booking


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


async def get_user_bookings(
    db: AsyncSession,
    user_id: uuid.UUID,
    upcoming_only: bool = True,
    today: date | None = None,
) -> list[Booking]:
    """The user's bookings, earliest first; ``upcoming_only`` keeps today onwards."""
    query = select(Booking).where(Booking.user_id == user_id)
    if upcoming_only:
        query = query.where(Booking.booking_date >= (today or utc_today()).isoformat())

    result = await db.execute(query.order_by(Booking.booking_date.asc(), Booking.start_time.asc()))
    return list(result.scalars().all())


async def get_booking_for_actor(db: AsyncSession, booking_id: uuid.UUID, actor: User) -> Booking:
    """Return a booking visible to ``actor``; others' bookings read as not found."""
    booking = await _load_booking(db, booking_id)
    if booking is None or not can_modify_booking(booking, actor.id, actor.is_admin):
        raise BookingNotFoundError("Booking not found")
    return booking


async def get_availability(db: AsyncSession, court_id: str, booking_date: date | str):
    """Occupied windows on a court for one day: ``id``, times, and owner only."""
    try:
        day = normalize_booking_date(booking_date)
    except ValueError as exc:
        raise BookingValidationError(str(exc), field="date") from None

    result = await db.execute(
        select(Booking.id, Booking.start_time, Booking.end_time, Booking.user_id)
        .where(
            Booking.court_id == court_id,
            Booking.booking_date == day,
            Booking.status != BookingStatus.CANCELLED.value,
        )
        .order_by(Booking.start_time.asc())
    )
    return list(result.all())


async def get_all_bookings(
    db: AsyncSession,
    date_from: date | str | None = None,
    date_to: date | str | None = None,
    court_id: str | None = None,
) -> list[Booking]:
    """Every booking (any owner, any status), newest first. Privileged callers only."""
    query = select(Booking)
    if court_id:
        query = query.where(Booking.court_id == court_id)
    try:
        if date_from:
            query = query.where(Booking.booking_date >= normalize_booking_date(date_from))
        if date_to:
            query = query.where(Booking.booking_date <= normalize_booking_date(date_to))
    except ValueError as exc:
        raise BookingValidationError(str(exc)) from None

    result = await db.execute(query.order_by(Booking.booking_date.desc(), Booking.start_time.desc()))
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Update / cancel / delete
# ---------------------------------------------------------------------------


async def update_booking(
    db: AsyncSession,
    booking_id: uuid.UUID,
    patch: BookingUpdate,
    actor_id: uuid.UUID,
    is_privileged: bool,
) -> Booking:
    """Apply the fields present in ``patch``.

    Any change to court, date, times or coach (or reinstating a cancelled
    booking) re-runs the conflict check against every other booking. The
    cooldown is not re-evaluated on update.
    """
    booking = await _get_booking_or_404(db, booking_id)
    ensure_can_modify_booking(booking, actor_id, is_privileged)

    changes = patch.changes()
    if "membership_status" in changes:
        changes["membership_status"] = _validate_membership(changes["membership_status"])

    effective = {field: changes.get(field, getattr(booking, field)) for field in _WINDOW_FIELDS}
    window = _build_window(**effective)
    effective_status = changes.get("status", booking.status)

    window_changed = any(field in changes and changes[field] != getattr(booking, field) for field in _WINDOW_FIELDS)
    reinstated = booking.is_cancelled and effective_status == BookingStatus.CONFIRMED.value

    if effective_status != BookingStatus.CANCELLED.value and (window_changed or reinstated):
        result = await check_conflict(db, window, exclude_booking_id=booking.id)
        result.raise_for_conflict()

    if window.coach_id and window.coach_id != booking.coach_id:
        coach = await ensure_coach(db, window.coach_id, changes.get("coach_name"))
        if "coach_name" not in changes:
            # The stored name belongs to the previous coach.
            changes["coach_name"] = coach.name if coach is not None else None
    elif window.coach_id is None and (booking.coach_name is not None or changes.get("coach_name") is not None):
        changes["coach_name"] = None

    for field, value in changes.items():
        setattr(booking, field, value)
    booking.updated_at = func.now()

    await _flush_or_conflict(db, booking)
    booking = await _load_booking(db, booking.id)
    logger.info("Booking %s updated by %s: %s", booking.id, actor_id, sorted(changes))
    return booking


async def cancel_booking(
    db: AsyncSession,
    booking_id: uuid.UUID,
    actor_id: uuid.UUID,
    is_privileged: bool,
) -> Booking:
    """Mark a booking cancelled. The row stays; it no longer blocks anyone."""
    booking = await _get_booking_or_404(db, booking_id)
    ensure_can_modify_booking(booking, actor_id, is_privileged)
    already_cancelled = booking.is_cancelled

    booking = await update_booking(
        db,
        booking_id,
        BookingUpdate(status=BookingStatus.CANCELLED),
        actor_id,
        is_privileged,
    )
    if not already_cancelled:
        logger.info("Booking %s cancelled by %s", booking.id, actor_id)
        _queue_notice(db, "booking_cancelled", notify_booking_cancelled, booking)
    return booking


async def delete_booking(
    db: AsyncSession,
    booking_id: uuid.UUID,
    actor_id: uuid.UUID,
    is_privileged: bool,
) -> None:
    """Remove a booking permanently."""
    booking = await _get_booking_or_404(db, booking_id)
    ensure_can_modify_booking(booking, actor_id, is_privileged)

    await db.delete(booking)
    await db.flush()
    logger.info("Booking %s deleted by %s", booking_id, actor_id)

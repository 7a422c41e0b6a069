"""Per-user cooldown between successive bookings."""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.errors import CooldownActiveError
from app.models.booking import Booking, BookingStatus
from app.scheduling.window import normalize_booking_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CooldownDecision:
    allowed: bool
    next_available_date: str | None = None


def _utc_midnight(value: str) -> datetime:
    d = date.fromisoformat(normalize_booking_date(value))
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)


def days_between(earlier: str, later: str) -> int:
    """Whole days from ``earlier`` to ``later``; negative when ``later`` is before."""
    return (_utc_midnight(later) - _utc_midnight(earlier)) // timedelta(days=1)


def evaluate_cooldown(
    last_booking_date: str | None,
    candidate_date: str,
    cooldown_days: int,
) -> CooldownDecision:
    """Decide whether ``candidate_date`` respects the cooldown after ``last_booking_date``.

    A candidate before the last booking gives a negative difference and is
    rejected like any other difference below ``cooldown_days``.
    """
    if last_booking_date is None:
        return CooldownDecision(allowed=True)

    if days_between(last_booking_date, candidate_date) < cooldown_days:
        next_available = _utc_midnight(last_booking_date) + timedelta(days=cooldown_days)
        return CooldownDecision(allowed=False, next_available_date=next_available.date().isoformat())
    return CooldownDecision(allowed=True)


async def get_most_recent_booking(
    db: AsyncSession,
    user_id: uuid.UUID,
    exclude_booking_id: uuid.UUID | None = None,
) -> Booking | None:
    """The user's latest non-cancelled booking by ``(booking_date, created_at)``."""
    query = select(Booking).where(
        Booking.user_id == user_id,
        Booking.status != BookingStatus.CANCELLED.value,
    )
    if exclude_booking_id is not None:
        query = query.where(Booking.id != exclude_booking_id)

    query = query.order_by(Booking.booking_date.desc(), Booking.created_at.desc()).limit(1)
    result = await db.execute(query)
    return result.scalars().first()


async def check_cooldown(
    db: AsyncSession,
    user_id: uuid.UUID,
    candidate_date: str,
    exclude_booking_id: uuid.UUID | None = None,
) -> CooldownDecision:
    last = await get_most_recent_booking(db, user_id, exclude_booking_id)
    return evaluate_cooldown(
        last.booking_date if last else None,
        normalize_booking_date(candidate_date),
        settings.booking_cooldown_days,
    )


async def ensure_cooldown_elapsed(
    db: AsyncSession,
    user_id: uuid.UUID,
    candidate_date: str,
) -> None:
    """Raise ``CooldownActiveError`` carrying the next permitted date."""
    decision = await check_cooldown(db, user_id, candidate_date)
    if decision.allowed:
        return

    logger.info(
        "Cooldown rejected booking for user %s on %s (next available %s)",
        user_id,
        candidate_date,
        decision.next_available_date,
    )
    raise CooldownActiveError(
        f"You must wait until {decision.next_available_date} before making another booking",
        next_available_date=decision.next_available_date,
    )

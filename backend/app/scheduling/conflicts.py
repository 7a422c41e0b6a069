"""Conflict detection across the court and coach dimensions."""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from app.errors import CoachUnavailableError, ResourceUnavailableError
from app.models.booking import Booking, BookingStatus
from app.scheduling.window import TimeWindow

logger = logging.getLogger(__name__)


@dataclass
class ConflictResult:
    """Outcome of a conflict check. ``None`` means the dimension is free."""

    resource_conflict: Booking | None = None
    coach_conflict: Booking | None = None

    @property
    def has_conflict(self) -> bool:
        return self.resource_conflict is not None or self.coach_conflict is not None

    def raise_for_conflict(self) -> None:
        """Raise the single most specific rejection, court before coach."""
        if self.resource_conflict is not None:
            raise ResourceUnavailableError("Time slot not available")
        if self.coach_conflict is not None:
            raise CoachUnavailableError("Coach not available")


async def find_overlapping_booking(
    db: AsyncSession,
    column: InstrumentedAttribute,
    value: str,
    window: TimeWindow,
    exclude_booking_id: uuid.UUID | None = None,
) -> Booking | None:
    """Return one non-cancelled booking on ``column == value`` overlapping ``window``."""
    query = select(Booking).where(
        column == value,
        Booking.booking_date == window.booking_date,
        Booking.status != BookingStatus.CANCELLED.value,
        Booking.start_time < window.end_time,
        Booking.end_time > window.start_time,
    )
    if exclude_booking_id is not None:
        query = query.where(Booking.id != exclude_booking_id)

    result = await db.execute(query.limit(1))
    return result.scalars().first()


async def check_resource_conflict(
    db: AsyncSession,
    window: TimeWindow,
    exclude_booking_id: uuid.UUID | None = None,
) -> Booking | None:
    conflict = await find_overlapping_booking(db, Booking.court_id, window.court_id, window, exclude_booking_id)
    if conflict is not None:
        logger.info(
            "Booking conflict detected: conflict_id=%s court_id=%s date=%s %s-%s",
            conflict.id,
            conflict.court_id,
            conflict.booking_date,
            conflict.start_time,
            conflict.end_time,
        )
    return conflict


async def check_coach_conflict(
    db: AsyncSession,
    window: TimeWindow,
    exclude_booking_id: uuid.UUID | None = None,
) -> Booking | None:
    if not window.coach_id:
        return None
    conflict = await find_overlapping_booking(db, Booking.coach_id, window.coach_id, window, exclude_booking_id)
    if conflict is not None:
        logger.info(
            "Coach conflict detected: conflict_id=%s coach_id=%s date=%s %s-%s",
            conflict.id,
            conflict.coach_id,
            conflict.booking_date,
            conflict.start_time,
            conflict.end_time,
        )
    return conflict


async def check_conflict(
    db: AsyncSession,
    window: TimeWindow,
    exclude_booking_id: uuid.UUID | None = None,
) -> ConflictResult:
    """Check both dimensions for ``window``.

    The coach dimension is only queried when ``window.coach_id`` is set.
    ``exclude_booking_id`` lets an update ignore the row being edited.

    This is a read; callers inserting afterwards rely on the partial unique
    indexes on ``bookings`` to catch identical-slot races.
    """
    return ConflictResult(
        resource_conflict=await check_resource_conflict(db, window, exclude_booking_id),
        coach_conflict=await check_coach_conflict(db, window, exclude_booking_id),
    )

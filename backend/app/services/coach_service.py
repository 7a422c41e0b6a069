"""Coach directory: listing and lazy provisioning from bookings."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.coach import Coach

logger = logging.getLogger(__name__)

# Seeded on first listing so clients can fetch coaches instead of hardcoding them.
DEFAULT_COACHES = (
    ("c1", "Mutika"),
    ("c2", "Seif"),
    ("c3", "Abdullah"),
    ("c4", "Malick"),
)


async def list_coaches(db: AsyncSession) -> list[Coach]:
    """Return all coaches, seeding the defaults when the directory is empty."""
    result = await db.execute(select(Coach).order_by(Coach.id))
    coaches = list(result.scalars().all())
    if coaches:
        return coaches

    defaults = [Coach(id=coach_id, name=name) for coach_id, name in DEFAULT_COACHES]
    try:
        async with db.begin_nested():
            db.add_all(defaults)
    except SQLAlchemyError:
        # Another request seeded concurrently; serve whatever is there now.
        logger.warning("Seeding default coaches failed", exc_info=True)
        result = await db.execute(select(Coach).order_by(Coach.id))
        return list(result.scalars().all())

    logger.info("Seeded %d default coaches", len(defaults))
    result = await db.execute(
        select(Coach).order_by(Coach.id).execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def get_coach(db: AsyncSession, coach_id: str) -> Coach | None:
    return await db.get(Coach, coach_id)


async def ensure_coach(db: AsyncSession, coach_id: str, name: str | None = None) -> Coach | None:
    """Create the coach if it does not exist yet.

    Never raises: a failure is logged and ``None`` returned, so the booking
    that referenced the coach goes through regardless.
    """
    try:
        existing = await db.get(Coach, coach_id)
        if existing is not None:
            return existing

        coach = Coach(id=coach_id, name=name or None)
        async with db.begin_nested():
            db.add(coach)
        logger.info("Auto-created coach %s (%s)", coach_id, name)
        return coach
    except SQLAlchemyError:
        logger.warning("Failed to ensure coach %s exists", coach_id, exc_info=True)
        return None

"""Per-session queue of booking notices, released only after commit.

Services enqueue a notice inside the request's transaction; ``get_db`` sends
the queue once ``commit()`` has succeeded and drops it on rollback, so no
player hears about a booking that was never stored.
"""

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_OUTBOX_KEY = "booking_notices"

# Notices are BookingNotice snapshots. No app.models imports here: app.database
# imports this module.
Dispatch = Callable[[Any], object]


def enqueue(db: AsyncSession, name: str, dispatch: Dispatch, notice: Any) -> None:
    db.info.setdefault(_OUTBOX_KEY, []).append((name, dispatch, notice))


def pending(db: AsyncSession) -> list[tuple[str, Dispatch, Any]]:
    return list(db.info.get(_OUTBOX_KEY, []))


def discard(db: AsyncSession) -> None:
    dropped = db.info.pop(_OUTBOX_KEY, [])
    if dropped:
        logger.info("Dropped %d booking notice(s) after rollback", len(dropped))


def send_committed(db: AsyncSession) -> None:
    """Hand queued notices to the dispatcher. Failures are logged, never raised."""
    for name, dispatch, notice in db.info.pop(_OUTBOX_KEY, []):
        try:
            dispatch(notice)
        except Exception:
            logger.exception("Could not dispatch %s notification for booking %s", name, notice.booking_id)

"""Fire-and-forget notification dispatch for booking mutations.

Callers hand over a ``BookingNotice`` snapshot and return immediately. The
send runs as a background task; its outcome never reaches the caller.
"""

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import asdict, dataclass

from app.config import settings
from app.models.booking import Booking
from app.models.user import User
from app.notifications.email import render, send_email

logger = logging.getLogger(__name__)

# Strong references so pending tasks are not garbage-collected mid-flight.
_pending: set[asyncio.Task] = set()


@dataclass(frozen=True)
class BookingNotice:
    """Plain snapshot of a booking and its owner, safe to use outside the session."""

    booking_id: str
    court_name: str
    booking_date: str
    start_time: str
    end_time: str
    coach_name: str
    membership_status: str
    notes: str
    user_name: str
    user_email: str | None
    user_phone: str

    @classmethod
    def from_booking(cls, booking: Booking, owner: User | None) -> "BookingNotice":
        return cls(
            booking_id=str(booking.id),
            court_name=booking.court_name or booking.court_id,
            booking_date=booking.booking_date,
            start_time=booking.start_time,
            end_time=booking.end_time,
            coach_name=booking.coach_name or booking.coach_id or "-",
            membership_status=booking.membership_status,
            notes=booking.notes or "-",
            user_name=(owner.full_name or owner.email) if owner else "player",
            user_email=owner.email if owner else None,
            user_phone=(owner.phone or "") if owner else "",
        )


async def _send_template(template: str, to: str, notice: BookingNotice) -> None:
    subject, body = render(template, **asdict(notice))
    await send_email(to, subject, body)


async def _run_safely(name: str, job: Awaitable[None]) -> None:
    try:
        await job
    except Exception:
        logger.exception("Notification '%s' failed", name)


def _dispatch(name: str, job: Awaitable[None]) -> asyncio.Task:
    task = asyncio.create_task(_run_safely(name, job))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task


def notify_booking_created(notice: BookingNotice) -> list[asyncio.Task]:
    """Confirmation to the owner plus a notice to the administrators."""
    tasks = []
    if notice.user_email:
        tasks.append(
            _dispatch(
                "booking_confirmation",
                _send_template("booking_confirmation", notice.user_email, notice),
            )
        )
    if settings.admin_email:
        tasks.append(
            _dispatch(
                "admin_booking_notice",
                _send_template("admin_booking_notice", settings.admin_email, notice),
            )
        )
    return tasks


def notify_booking_cancelled(notice: BookingNotice) -> list[asyncio.Task]:
    if not notice.user_email:
        return []
    return [
        _dispatch(
            "booking_cancellation",
            _send_template("booking_cancellation", notice.user_email, notice),
        )
    ]


async def drain_pending() -> None:
    """Wait for in-flight notifications (used on shutdown)."""
    if _pending:
        await asyncio.gather(*list(_pending), return_exceptions=True)

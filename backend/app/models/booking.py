"""Booking model: court reservations, optionally paired with a coach."""

import enum
import uuid

from sqlalchemy import ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class MembershipStatus(str, enum.Enum):
    MEMBER = "member"
    NON_MEMBER = "non_member"


_ACTIVE_ONLY = text("status != 'cancelled'")
_ACTIVE_COACHED_ONLY = text("status != 'cancelled' AND coach_id IS NOT NULL")


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation of one court for a half-open ``[start_time, end_time)`` window.

    ``booking_date`` is stored as a ``YYYY-MM-DD`` string and the times as
    zero-padded ``HH:MM`` strings, so lexical comparison equals chronological
    comparison. Cancelled rows are kept and ignored by conflict detection.
    """

    __tablename__ = "bookings"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    court_id: Mapped[str] = mapped_column(String(64), nullable=False)
    booking_date: Mapped[str] = mapped_column(String(10), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    coach_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    coach_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    membership_status: Mapped[str] = mapped_column(String(20), nullable=False)  # member, non_member
    status: Mapped[str] = mapped_column(
        String(20),
        default=BookingStatus.CONFIRMED.value,
        index=True,
    )  # confirmed, cancelled
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Catalog lookups are best-effort: a booking may reference a court that
    # the catalog no longer (or never) knew about.
    court: Mapped["Court | None"] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "Court",
        primaryjoin="foreign(Booking.court_id) == Court.id",
        viewonly=True,
        lazy="selectin",
    )
    owner: Mapped["User"] = relationship("User", viewonly=True, lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        Index("ix_bookings_court_date", "court_id", "booking_date"),
        Index("ix_bookings_coach_date", "coach_id", "booking_date"),
        Index(
            "uq_bookings_court_slot",
            "court_id",
            "booking_date",
            "start_time",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
        Index(
            "uq_bookings_coach_slot",
            "coach_id",
            "booking_date",
            "start_time",
            unique=True,
            postgresql_where=_ACTIVE_COACHED_ONLY,
            sqlite_where=_ACTIVE_COACHED_ONLY,
        ),
    )

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED.value

    @property
    def court_name(self) -> str | None:
        return self.court.name if self.court else None

    @property
    def court_color(self) -> str | None:
        return self.court.color if self.court else None

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, court_id={self.court_id!r}, date={self.booking_date}, "
            f"{self.start_time}-{self.end_time}, status={self.status})>"
        )

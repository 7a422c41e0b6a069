"""Time windows: a court, a calendar day, and a half-open ``[start, end)`` interval.

Dates travel as canonical ``YYYY-MM-DD`` strings and times as zero-padded
``HH:MM`` strings. Both normalizers run wherever a value enters storage or a
query, so string equality and ordering match calendar/clock ordering.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime

_TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def normalize_booking_date(value: date | datetime | str) -> str:
    """Return ``value`` as a ``YYYY-MM-DD`` string.

    Accepts ``date``/``datetime`` objects and ISO strings, including full
    timestamps such as ``2025-06-10T00:00:00Z`` (only the calendar part is
    kept; no timezone conversion is applied). Anything else, including a date
    followed by stray characters, is rejected.

    Raises:
        ValueError: If the value is not a valid calendar date.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValueError(f"invalid booking date: {value!r}")
    try:
        return datetime.fromisoformat(value.strip()).date().isoformat()
    except ValueError:
        raise ValueError(f"invalid booking date: {value!r}") from None


def normalize_time(value: str) -> str:
    """Validate an ``H:MM``/``HH:MM`` wall-clock time and zero-pad the hour."""
    match = _TIME_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"time must match HH:MM (00-23:00-59), got {value!r}")
    hour, minute = match.groups()
    return f"{int(hour):02d}:{minute}"


def windows_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """Half-open interval intersection; touching endpoints do not overlap."""
    return start_a < end_b and start_b < end_a


@dataclass(frozen=True)
class TimeWindow:
    """A candidate or stored reservation window."""

    court_id: str
    booking_date: str
    start_time: str
    end_time: str
    coach_id: str | None = None

    def __post_init__(self) -> None:
        if not self.start_time < self.end_time:
            raise ValueError("end_time must be after start_time")

    @classmethod
    def build(
        cls,
        court_id: str,
        booking_date: date | datetime | str,
        start_time: str,
        end_time: str,
        coach_id: str | None = None,
    ) -> "TimeWindow":
        """Normalize raw inputs into a window."""
        return cls(
            court_id=court_id,
            booking_date=normalize_booking_date(booking_date),
            start_time=normalize_time(start_time),
            end_time=normalize_time(end_time),
            coach_id=coach_id or None,
        )

    @classmethod
    def from_booking(cls, booking) -> "TimeWindow":
        return cls.build(
            booking.court_id,
            booking.booking_date,
            booking.start_time,
            booking.end_time,
            booking.coach_id,
        )

    def overlaps(self, other: "TimeWindow") -> bool:
        """True when both windows fall on the same day and intersect in time.

        The court/coach dimension is the caller's concern; this compares the
        temporal part only.
        """
        if self.booking_date != other.booking_date:
            return False
        return windows_overlap(self.start_time, self.end_time, other.start_time, other.end_time)

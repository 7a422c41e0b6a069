"""Tests for court and coach conflict detection."""

import random

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import CoachUnavailableError, ResourceUnavailableError
from app.scheduling.conflicts import ConflictResult, check_conflict
from app.scheduling.window import TimeWindow


def _window(start: str, end: str, court_id: str = "court-1", coach_id: str | None = None, day: str = "2025-06-10"):
    return TimeWindow.build(court_id, day, start, end, coach_id)


class TestResourceDimension:
    async def test_overlap_detected(self, db_session: AsyncSession, test_user, make_booking):
        existing = await make_booking(test_user, start_time="10:00", end_time="11:00")
        result = await check_conflict(db_session, _window("10:30", "11:30"))
        assert result.resource_conflict is not None
        assert result.resource_conflict.id == existing.id

    async def test_touching_endpoint_accepted(self, db_session: AsyncSession, test_user, make_booking):
        await make_booking(test_user, start_time="10:00", end_time="11:00")
        assert not (await check_conflict(db_session, _window("11:00", "12:00"))).has_conflict
        assert not (await check_conflict(db_session, _window("09:00", "10:00"))).has_conflict

    async def test_other_court_or_day_is_free(self, db_session: AsyncSession, test_user, make_booking):
        await make_booking(test_user, start_time="10:00", end_time="11:00")
        assert not (await check_conflict(db_session, _window("10:00", "11:00", court_id="court-2"))).has_conflict
        assert not (await check_conflict(db_session, _window("10:00", "11:00", day="2025-06-11"))).has_conflict

    async def test_cancelled_booking_never_conflicts(self, db_session: AsyncSession, test_user, make_booking):
        await make_booking(test_user, start_time="10:00", end_time="11:00", coach_id="c1", status="cancelled")
        result = await check_conflict(db_session, _window("10:00", "11:00", coach_id="c1"))
        assert not result.has_conflict

    async def test_excluded_booking_ignored(self, db_session: AsyncSession, test_user, make_booking):
        existing = await make_booking(test_user, start_time="10:00", end_time="11:00")
        result = await check_conflict(db_session, _window("10:15", "11:15"), exclude_booking_id=existing.id)
        assert not result.has_conflict

    async def test_randomized_against_single_booking(self, db_session: AsyncSession, test_user, make_booking):
        """Every candidate intersecting 10:00-11:00 is rejected; everything else passes."""
        await make_booking(test_user, start_time="10:00", end_time="11:00")
        rng = random.Random(42)
        for _ in range(60):
            start, end = sorted(rng.sample(range(8 * 60, 13 * 60), 2))
            candidate = _window(f"{start // 60:02d}:{start % 60:02d}", f"{end // 60:02d}:{end % 60:02d}")
            expected = start < 11 * 60 and 10 * 60 < end
            result = await check_conflict(db_session, candidate)
            assert (result.resource_conflict is not None) is expected


class TestCoachDimension:
    async def test_same_coach_on_other_court_conflicts(self, db_session: AsyncSession, test_user, make_booking):
        await make_booking(test_user, court_id="court-1", coach_id="c1")
        result = await check_conflict(db_session, _window("10:30", "11:30", court_id="court-2", coach_id="c1"))
        assert result.resource_conflict is None
        assert result.coach_conflict is not None

    async def test_coach_skipped_without_coach_id(self, db_session: AsyncSession, test_user, make_booking):
        await make_booking(test_user, court_id="court-1", coach_id="c1")
        result = await check_conflict(db_session, _window("10:30", "11:30", court_id="court-2"))
        assert not result.has_conflict

    async def test_different_coaches_same_court_still_rejected_by_court(
        self, db_session: AsyncSession, test_user, make_booking
    ):
        await make_booking(test_user, court_id="court-1", coach_id="c1")
        result = await check_conflict(db_session, _window("10:30", "11:30", court_id="court-1", coach_id="c2"))
        assert result.resource_conflict is not None
        assert result.coach_conflict is None


class TestConflictResult:
    def test_no_conflict_does_not_raise(self):
        ConflictResult().raise_for_conflict()

    def test_resource_reported_before_coach(self):
        result = ConflictResult(resource_conflict=object(), coach_conflict=object())
        with pytest.raises(ResourceUnavailableError):
            result.raise_for_conflict()

    def test_coach_only(self):
        with pytest.raises(CoachUnavailableError):
            ConflictResult(coach_conflict=object()).raise_for_conflict()

"""Tests for the layered availability engine."""

from datetime import date
from uuid import uuid4

import pytest

from storefront.modules.availability.engine import (
    AvailabilityEngine,
    AvailabilityWindow,
    Closed,
    LegacyRange,
    OverrideSchedule,
    WeeklySlots,
    clip_windows,
    is_within_windows,
    make_window,
    weekday_index,
)
from storefront.modules.availability.models import (
    BusinessHour,
    BusinessHourSlot,
    SpecialDay,
    SpecialDaySlot,
)
from tests.fakes import FakeAvailabilityStore


MONDAY = date(2024, 6, 10)


def minutes(hhmm: str) -> int:
    hours, mins = hhmm.split(":")
    return int(hours) * 60 + int(mins)


@pytest.fixture
def website_id():
    return uuid4()


@pytest.fixture
def store() -> FakeAvailabilityStore:
    return FakeAvailabilityStore()


@pytest.fixture
def engine(store: FakeAvailabilityStore) -> AvailabilityEngine:
    return AvailabilityEngine(store)


class TestAvailabilityWindow:
    """Tests for the half-open window type."""

    def test_half_open_boundaries(self):
        """Test 09:00 and 16:59 are inside 09:00-17:00 and 17:00 is not."""
        windows = [AvailabilityWindow(minutes("09:00"), minutes("17:00"))]

        assert is_within_windows(minutes("09:00"), windows) is True
        assert is_within_windows(minutes("16:59"), windows) is True
        assert is_within_windows(minutes("17:00"), windows) is False
        assert is_within_windows(minutes("08:59"), windows) is False

    @pytest.mark.parametrize(("start", "end"), [(600, 600), (700, 600), (-1, 10), (0, 1440)])
    def test_rejects_invalid_bounds(self, start, end):
        with pytest.raises(ValueError):
            AvailabilityWindow(start, end)

    def test_empty_windows_never_contain(self):
        assert is_within_windows(720, []) is False

    def test_make_window_drops_malformed(self):
        """Test malformed or empty ranges yield no window."""
        assert make_window("9h", "17:00") is None
        assert make_window("17:00", "09:00") is None
        assert make_window(None, "17:00") is None
        assert make_window("09:00:00", "17:00:30") == AvailabilityWindow(540, 1020)


class TestClipWindows:
    def test_clips_to_range(self):
        windows = [AvailabilityWindow(540, 780), AvailabilityWindow(960, 1200)]
        assert clip_windows(windows, 720, 1320) == [
            AvailabilityWindow(720, 780),
            AvailabilityWindow(960, 1200),
        ]

    def test_drops_windows_outside_range(self):
        windows = [AvailabilityWindow(540, 600)]
        assert clip_windows(windows, 720, 1320) == []


class TestWeekdayIndex:
    def test_monday_is_zero(self):
        assert weekday_index(MONDAY) == 0
        assert weekday_index(date(2024, 6, 16)) == 6


class TestLayerPrecedence:
    """Tests for the special day -> weekly slots -> legacy range chain."""

    @pytest.mark.asyncio
    async def test_closed_override_wins_over_weekly(self, engine, store, website_id):
        """Test a closed special day reports zero windows despite weekly slots."""
        store.add_weekly(website_id, [0], ("09:00", "13:00"))
        store.special_days.append(SpecialDay(website_id=website_id, day=MONDAY, is_open=False))

        schedule = await engine.resolve_schedule(website_id, MONDAY)

        assert isinstance(schedule, OverrideSchedule)
        assert await engine.get_open_windows(website_id, MONDAY) == []

    @pytest.mark.asyncio
    async def test_open_override_with_slots(self, engine, store, website_id):
        """Test override slots replace the weekly table and are sorted."""
        store.add_weekly(website_id, [0], ("09:00", "13:00"))
        store.special_days.append(
            SpecialDay(
                website_id=website_id,
                day=MONDAY,
                is_open=True,
                slots=[
                    SpecialDaySlot(open_time="18:00", close_time="22:00", sort_order=1),
                    SpecialDaySlot(open_time="10:00", close_time="12:00", sort_order=0),
                ],
            )
        )

        windows = await engine.get_open_windows(website_id, MONDAY)

        assert windows == [AvailabilityWindow(600, 720), AvailabilityWindow(1080, 1320)]

    @pytest.mark.asyncio
    async def test_open_override_without_slots_uses_range(self, engine, store, website_id):
        store.special_days.append(
            SpecialDay(
                website_id=website_id,
                day=MONDAY,
                is_open=True,
                open_time="11:00",
                close_time="15:00",
            )
        )

        assert await engine.get_open_windows(website_id, MONDAY) == [AvailabilityWindow(660, 900)]

    @pytest.mark.asyncio
    async def test_weekly_slots_win_over_legacy(self, engine, store, website_id):
        store.add_weekly(website_id, [0], ("09:00", "13:00"))
        store.business_hours.append(
            BusinessHour(
                website_id=website_id,
                day_of_week=0,
                is_open=True,
                open_time="08:00",
                close_time="23:00",
            )
        )

        schedule = await engine.resolve_schedule(website_id, MONDAY)

        assert isinstance(schedule, WeeklySlots)
        assert schedule.windows() == [AvailabilityWindow(540, 780)]

    @pytest.mark.asyncio
    async def test_legacy_range_used_without_slots(self, engine, store, website_id):
        store.business_hours.append(
            BusinessHour(
                website_id=website_id,
                day_of_week=0,
                is_open=True,
                open_time="08:00",
                close_time="14:00",
            )
        )

        schedule = await engine.resolve_schedule(website_id, MONDAY)

        assert isinstance(schedule, LegacyRange)
        assert schedule.windows() == [AvailabilityWindow(480, 840)]

    @pytest.mark.asyncio
    async def test_legacy_closed_day(self, engine, store, website_id):
        store.business_hours.append(
            BusinessHour(website_id=website_id, day_of_week=0, is_open=False)
        )

        assert isinstance(await engine.resolve_schedule(website_id, MONDAY), Closed)

    @pytest.mark.asyncio
    async def test_no_data_is_closed(self, engine, website_id):
        """Test a date with no configuration at any layer has no windows."""
        assert isinstance(await engine.resolve_schedule(website_id, MONDAY), Closed)
        assert await engine.get_open_windows(website_id, MONDAY) == []

    @pytest.mark.asyncio
    async def test_other_tenant_data_ignored(self, engine, store, website_id):
        store.add_weekly(uuid4(), [0], ("09:00", "13:00"))
        assert await engine.get_open_windows(website_id, MONDAY) == []


class TestWeeklySlots:
    @pytest.mark.asyncio
    async def test_malformed_slot_drops_only_that_window(self, engine, store, website_id):
        """Test one bad time string does not close the whole day."""
        store.add_weekly(website_id, [0], ("09:00", "13:00"), ("16:00", "nope"), ("18:00", "20:00"))

        windows = await engine.get_open_windows(website_id, MONDAY)

        assert windows == [AvailabilityWindow(540, 780), AvailabilityWindow(1080, 1200)]

    @pytest.mark.asyncio
    async def test_inactive_slots_ignored(self, engine, store, website_id):
        store.weekly_slots.append(
            BusinessHourSlot(
                website_id=website_id,
                day_of_week=0,
                open_time="09:00",
                close_time="13:00",
                sort_order=0,
                is_active=False,
            )
        )
        assert await engine.get_open_windows(website_id, MONDAY) == []

    def test_windows_follow_sort_order(self):
        slots = (
            BusinessHourSlot(open_time="16:00", close_time="20:00", sort_order=2),
            BusinessHourSlot(open_time="09:00", close_time="13:00", sort_order=1),
        )
        assert WeeklySlots(slots).windows() == [
            AvailabilityWindow(540, 780),
            AvailabilityWindow(960, 1200),
        ]


class TestSplitShiftScenario:
    """Open Mon-Fri 09:00-13:00 and 16:00-20:00, no override on 2024-06-10."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("requested", "accepted"),
        [("12:30", True), ("14:00", False), ("19:59", True), ("20:00", False)],
    )
    async def test_requests_against_split_shift(
        self, engine, store, website_id, requested, accepted
    ):
        store.add_weekly(website_id, range(0, 5), ("09:00", "13:00"), ("16:00", "20:00"))

        windows = await engine.get_open_windows(website_id, MONDAY)

        assert is_within_windows(minutes(requested), windows) is accepted

    @pytest.mark.asyncio
    async def test_weekend_closed(self, engine, store, website_id):
        store.add_weekly(website_id, range(0, 5), ("09:00", "13:00"), ("16:00", "20:00"))
        assert await engine.get_open_windows(website_id, date(2024, 6, 15)) == []

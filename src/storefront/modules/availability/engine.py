"""Open-window computation over layered opening-hours configuration.

For a given website and date exactly one layer is authoritative, tried
in this order:

1. a special-day override for that exact date,
2. the weekly slot table for that weekday,
3. the legacy single range for that weekday.

Layers are never merged. Each layer is turned into a schedule variant
(:class:`OverrideSchedule`, :class:`WeeklySlots`, :class:`LegacyRange`
or :class:`Closed`) by one link of the chain, and the first link that
produces a variant wins.
"""

from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol
from uuid import UUID

import structlog

from storefront.core.constants import MINUTES_PER_DAY
from storefront.core.utils.time import parse_time_to_minutes


logger = structlog.get_logger()


@dataclass(frozen=True, order=True)
class AvailabilityWindow:
    """Half-open opening interval ``[start, end)`` in minutes since midnight."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if not (0 <= self.start < self.end < MINUTES_PER_DAY):
            raise ValueError(f"invalid window [{self.start}, {self.end})")

    def contains(self, minutes: int) -> bool:
        return self.start <= minutes < self.end


def make_window(open_time: str | None, close_time: str | None) -> AvailabilityWindow | None:
    """Build a window from stored time strings.

    Returns:
        The window, or None when either time is malformed or the range
        is empty
    """
    start = parse_time_to_minutes(open_time)
    end = parse_time_to_minutes(close_time)
    if start is None or end is None or start >= end:
        logger.warning("availability_window_dropped", open_time=open_time, close_time=close_time)
        return None
    return AvailabilityWindow(start, end)


class _TimeRange(Protocol):
    open_time: str | None
    close_time: str | None


class _SortedTimeRange(_TimeRange, Protocol):
    sort_order: int


def _windows_from(ranges: Iterable[_TimeRange]) -> list[AvailabilityWindow]:
    windows = []
    for item in ranges:
        window = make_window(item.open_time, item.close_time)
        if window is not None:
            windows.append(window)
    return windows


def _by_sort_order(ranges: Iterable[_SortedTimeRange]) -> list[_SortedTimeRange]:
    # Stable, so equal sort keys keep their stored order
    return sorted(ranges, key=lambda item: item.sort_order)


@dataclass(frozen=True)
class OverrideSchedule:
    """Special-day override; solely decides the date."""

    is_open: bool
    slots: Sequence[_SortedTimeRange] = field(default_factory=tuple)
    open_time: str | None = None
    close_time: str | None = None

    def windows(self) -> list[AvailabilityWindow]:
        if not self.is_open:
            return []
        if self.slots:
            return _windows_from(_by_sort_order(self.slots))
        window = make_window(self.open_time, self.close_time)
        return [window] if window else []


@dataclass(frozen=True)
class WeeklySlots:
    """Weekly slot table entries for the weekday."""

    slots: Sequence[_SortedTimeRange]

    def windows(self) -> list[AvailabilityWindow]:
        return _windows_from(_by_sort_order(self.slots))


@dataclass(frozen=True)
class LegacyRange:
    """Single open/close range for the weekday."""

    open_time: str | None
    close_time: str | None

    def windows(self) -> list[AvailabilityWindow]:
        window = make_window(self.open_time, self.close_time)
        return [window] if window else []


@dataclass(frozen=True)
class Closed:
    """No layer has data for the date, or the legacy range is closed."""

    def windows(self) -> list[AvailabilityWindow]:
        return []


Schedule = OverrideSchedule | WeeklySlots | LegacyRange | Closed


class _SpecialDay(Protocol):
    is_open: bool
    open_time: str | None
    close_time: str | None
    slots: Sequence[_SortedTimeRange]


class _BusinessHour(Protocol):
    is_open: bool
    open_time: str | None
    close_time: str | None


class AvailabilityStore(Protocol):
    """Opening-hours source (normally :class:`AvailabilityRepository`)."""

    async def get_special_day(self, website_id: UUID, day: date) -> _SpecialDay | None: ...

    async def list_weekly_slots(
        self, website_id: UUID, weekday: int
    ) -> Sequence[_SortedTimeRange]: ...

    async def get_business_hour(self, website_id: UUID, weekday: int) -> _BusinessHour | None: ...


ScheduleLink = Callable[[UUID, date], Awaitable[Schedule | None]]


def weekday_index(day: date) -> int:
    """Monday=0 through Sunday=6, the index stored in the hours tables."""
    return day.weekday()


class AvailabilityEngine:
    """Compute open windows for a website and date.

    Usage:
        engine = AvailabilityEngine(AvailabilityRepository(session))
        windows = await engine.get_open_windows(tenant.id, date(2024, 6, 10))
        if not is_within_windows(750, windows):
            raise AvailabilityError()
    """

    def __init__(self, store: AvailabilityStore) -> None:
        self.store = store
        self.chain: list[ScheduleLink] = [
            self._special_day,
            self._weekly_slots,
            self._legacy_range,
        ]

    async def _special_day(self, website_id: UUID, day: date) -> Schedule | None:
        special = await self.store.get_special_day(website_id, day)
        if special is None:
            return None
        return OverrideSchedule(
            is_open=special.is_open,
            slots=tuple(special.slots),
            open_time=special.open_time,
            close_time=special.close_time,
        )

    async def _weekly_slots(self, website_id: UUID, day: date) -> Schedule | None:
        slots = await self.store.list_weekly_slots(website_id, weekday_index(day))
        return WeeklySlots(tuple(slots)) if slots else None

    async def _legacy_range(self, website_id: UUID, day: date) -> Schedule | None:
        hours = await self.store.get_business_hour(website_id, weekday_index(day))
        if hours is None or not hours.is_open:
            return Closed()
        return LegacyRange(hours.open_time, hours.close_time)

    async def resolve_schedule(self, website_id: UUID, day: date) -> Schedule:
        """Return the schedule variant of the first layer with data."""
        for link in self.chain:
            schedule = await link(website_id, day)
            if schedule is not None:
                return schedule
        return Closed()

    async def get_open_windows(self, website_id: UUID, day: date) -> list[AvailabilityWindow]:
        """Open windows for the date, in configured order."""
        schedule = await self.resolve_schedule(website_id, day)
        windows = schedule.windows()
        logger.debug(
            "availability_resolved",
            website_id=str(website_id),
            date=day.isoformat(),
            layer=type(schedule).__name__,
            windows=len(windows),
        )
        return windows


def is_within_windows(minutes: int, windows: Iterable[AvailabilityWindow]) -> bool:
    """Whether ``minutes`` falls inside any window (``start <= t < end``)."""
    return any(window.contains(minutes) for window in windows)


def clip_windows(
    windows: Iterable[AvailabilityWindow], start: int, end: int
) -> list[AvailabilityWindow]:
    """Intersect each window with ``[start, end)``, dropping empty results."""
    clipped = []
    for window in windows:
        lo, hi = max(window.start, start), min(window.end, end)
        if lo < hi:
            clipped.append(AvailabilityWindow(lo, hi))
    return clipped

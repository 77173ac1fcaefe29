"""
Calendar helpers for day, week and month windows.

Weeks run Sunday through Saturday. All ranges are inclusive of both ends.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, timedelta

DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class DateWindow:
    """Inclusive range of calendar dates."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError("Window end must not precede its start")

    @property
    def days(self) -> int:
        """Number of calendar days in the window."""
        return (self.end - self.start).days + 1

    @property
    def weeks(self) -> float:
        """Window length in weeks, not rounded."""
        return self.days / DAYS_PER_WEEK

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def overlaps(self, start: date, end: date) -> bool:
        return start <= self.end and end >= self.start

    def overlap_days(self, start: date, end: date) -> int:
        """Days shared between the window and ``[start, end]``."""
        if not self.overlaps(start, end):
            return 0
        return (min(end, self.end) - max(start, self.start)).days + 1

    def iter_days(self) -> Iterator[date]:
        return iter_days(self.start, self.end)

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield each date from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def is_business_day(day: date) -> bool:
    return day.weekday() < 5


def business_days_between(start: date, end: date) -> int:
    """Count weekdays in ``[start, end]``; zero when end precedes start."""
    if end < start:
        return 0
    full_weeks, remainder = divmod((end - start).days + 1, DAYS_PER_WEEK)
    count = full_weeks * 5
    for offset in range(remainder):
        if is_business_day(start + timedelta(days=full_weeks * DAYS_PER_WEEK + offset)):
            count += 1
    return count


def business_days(start: date, end: date) -> list[date]:
    return [day for day in iter_days(start, end) if is_business_day(day)]


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % DAYS_PER_WEEK)


def week_window(day: date) -> DateWindow:
    """Sunday-to-Saturday week containing ``day``."""
    start = week_start(day)
    return DateWindow(start, start + timedelta(days=DAYS_PER_WEEK - 1))


def month_window(day: date) -> DateWindow:
    """Calendar month containing ``day``."""
    last = calendar.monthrange(day.year, day.month)[1]
    return DateWindow(day.replace(day=1), day.replace(day=last))


def month_windows(start: date, end: date) -> list[DateWindow]:
    """Full calendar months touched by ``[start, end]``."""
    windows: list[DateWindow] = []
    current = start.replace(day=1)
    while current <= end:
        window = month_window(current)
        windows.append(window)
        current = window.end + timedelta(days=1)
    return windows


def week_windows(start: date, end: date) -> list[DateWindow]:
    """Sunday-started weeks touched by ``[start, end]``."""
    windows: list[DateWindow] = []
    current = week_start(start)
    while current <= end:
        windows.append(week_window(current))
        current += timedelta(days=DAYS_PER_WEEK)
    return windows

"""Tests for calendar helpers."""

from datetime import date

import pytest
from hypothesis import given
from hypothesis import strategies as st

from crewplan.domain.scheduling.value_objects.calendar import (
    DateWindow,
    business_days,
    business_days_between,
    iter_days,
    month_windows,
    week_start,
    week_window,
    week_windows,
)


class TestWeeks:
    @pytest.mark.parametrize(
        "day,expected",
        [
            (date(2024, 3, 3), date(2024, 3, 3)),  # Sunday
            (date(2024, 3, 4), date(2024, 3, 3)),
            (date(2024, 3, 9), date(2024, 3, 3)),  # Saturday
            (date(2024, 3, 10), date(2024, 3, 10)),
        ],
    )
    def test_week_starts_on_sunday(self, day, expected):
        assert week_start(day) == expected

    def test_week_window_is_sunday_to_saturday(self):
        window = week_window(date(2024, 3, 6))
        assert window.start == date(2024, 3, 3)
        assert window.end == date(2024, 3, 9)
        assert window.days == 7

    def test_week_windows_cover_range(self):
        windows = week_windows(date(2024, 3, 6), date(2024, 3, 12))
        assert [w.start for w in windows] == [date(2024, 3, 3), date(2024, 3, 10)]


class TestBusinessDays:
    def test_two_working_weeks(self):
        assert business_days_between(date(2024, 1, 8), date(2024, 1, 19)) == 10

    def test_weekend_only(self):
        assert business_days_between(date(2024, 3, 2), date(2024, 3, 3)) == 0

    def test_reversed_range(self):
        assert business_days_between(date(2024, 3, 5), date(2024, 3, 4)) == 0

    @given(
        st.dates(min_value=date(2020, 1, 1), max_value=date(2030, 1, 1)),
        st.integers(min_value=0, max_value=120),
    )
    def test_count_matches_enumeration(self, start, span):
        end = date.fromordinal(start.toordinal() + span)
        assert business_days_between(start, end) == len(business_days(start, end))


class TestWindows:
    def test_month_windows_include_whole_months(self):
        windows = month_windows(date(2024, 1, 15), date(2024, 3, 2))
        assert [(w.start, w.end) for w in windows] == [
            (date(2024, 1, 1), date(2024, 1, 31)),
            (date(2024, 2, 1), date(2024, 2, 29)),
            (date(2024, 3, 1), date(2024, 3, 31)),
        ]

    def test_overlap_days(self):
        window = DateWindow(date(2024, 3, 1), date(2024, 3, 10))
        assert window.overlap_days(date(2024, 3, 8), date(2024, 3, 20)) == 3
        assert window.overlap_days(date(2024, 3, 11), date(2024, 3, 20)) == 0

    def test_rejects_reversed_window(self):
        with pytest.raises(ValueError):
            DateWindow(date(2024, 3, 2), date(2024, 3, 1))

    def test_iter_days_inclusive(self):
        days = list(iter_days(date(2024, 2, 28), date(2024, 3, 1)))
        assert days == [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]

"""
Tests for relative date window resolution.

Run with: python -m pytest tests/test_date_windows.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, settings, strategies as st

from conftest import SATURDAY, WEDNESDAY
from eventscout.filtering import DateWindow, resolve_window, weekend_window
from eventscout.filtering.date_windows import CALENDAR, ROLLING, align_to
from eventscout.models import DateRange


FRIDAY_EVENING = datetime(2026, 10, 16, 18, 0)
SUNDAY_NIGHT = datetime(2026, 10, 18, 23, 59, 59)


class TestWeekendWindow:
    """Weekend resolution from different days of the week."""

    def test_from_wednesday(self):
        window = weekend_window(WEDNESDAY)
        assert window.start == FRIDAY_EVENING
        assert window.end == SUNDAY_NIGHT
        assert window.end_inclusive is True

    @pytest.mark.parametrize("now", [
        datetime(2026, 10, 16, 9, 0),
        SATURDAY,
        datetime(2026, 10, 18, 22, 0),
    ])
    def test_weekend_in_progress(self, now):
        """Friday, Saturday and Sunday all resolve to the current weekend."""
        window = weekend_window(now)
        assert window.start == FRIDAY_EVENING
        assert window.end == SUNDAY_NIGHT

    def test_from_monday_is_upcoming_weekend(self):
        window = weekend_window(datetime(2026, 10, 19, 8, 0))
        assert window.start == datetime(2026, 10, 23, 18, 0)
        assert window.end == datetime(2026, 10, 25, 23, 59, 59)

    def test_boundaries(self):
        window = weekend_window(WEDNESDAY)
        assert window.contains(FRIDAY_EVENING)
        assert window.contains(SUNDAY_NIGHT)
        assert not window.contains(FRIDAY_EVENING - timedelta(minutes=1))
        assert not window.contains(SUNDAY_NIGHT + timedelta(seconds=1))

    def test_keeps_timezone(self):
        now = WEDNESDAY.replace(tzinfo=timezone.utc)
        window = weekend_window(now)
        assert window.start.tzinfo is timezone.utc


class TestResolveWindow:

    def test_none_has_no_window(self):
        assert resolve_window(DateRange.NONE, WEDNESDAY) is None

    def test_today_is_next_24_hours(self):
        window = resolve_window(DateRange.TODAY, WEDNESDAY)
        assert window.start == WEDNESDAY
        assert window.end == WEDNESDAY + timedelta(days=1)
        assert not window.contains(WEDNESDAY - timedelta(minutes=1))

    def test_tomorrow_is_next_calendar_day(self):
        window = resolve_window(DateRange.TOMORROW, WEDNESDAY)
        assert window.start == datetime(2026, 10, 15)
        assert window.end == datetime(2026, 10, 16)
        assert window.contains(datetime(2026, 10, 15, 23, 30))
        assert not window.contains(datetime(2026, 10, 16))

    @pytest.mark.parametrize("date_range", [DateRange.THIS_WEEK, DateRange.NEXT_WEEK])
    def test_rolling_weeks(self, date_range):
        window = resolve_window(date_range, WEDNESDAY, ROLLING)
        assert window.start == WEDNESDAY
        assert window.end == WEDNESDAY + timedelta(days=7)

    def test_calendar_this_week_ends_monday(self):
        window = resolve_window(DateRange.THIS_WEEK, WEDNESDAY, CALENDAR)
        assert window.start == WEDNESDAY
        assert window.end == datetime(2026, 10, 19)

    def test_calendar_next_week_is_monday_to_monday(self):
        window = resolve_window(DateRange.NEXT_WEEK, WEDNESDAY, CALENDAR)
        assert window.start == datetime(2026, 10, 19)
        assert window.end == datetime(2026, 10, 26)


class TestAlignment:

    def test_naive_against_aware(self):
        reference = WEDNESDAY.replace(tzinfo=timezone.utc)
        aligned = align_to(datetime(2026, 10, 15, 9, 0), reference)
        assert aligned == datetime(2026, 10, 15, 9, 0, tzinfo=timezone.utc)

    def test_same_flavour_untouched(self):
        moment = datetime(2026, 10, 15, 9, 0)
        assert align_to(moment, WEDNESDAY) is moment

    def test_aware_against_naive_becomes_naive(self):
        aligned = align_to(datetime(2026, 10, 15, 9, 0, tzinfo=timezone.utc), WEDNESDAY)
        assert aligned.tzinfo is None


@given(now=st.datetimes(min_value=datetime(2000, 1, 1), max_value=datetime(2100, 1, 1)))
@settings(max_examples=100)
def test_weekend_window_shape(now):
    """
    Property: the weekend window always starts on a Friday at 18:00, ends two
    days later at 23:59:59 and never ends before ``now``'s day.
    """
    window = weekend_window(now)

    assert window.start.weekday() == 4
    assert (window.start.hour, window.start.minute) == (18, 0)
    assert window.end.date() - window.start.date() == timedelta(days=2)
    assert window.end.date() >= now.date()
    assert window.start.date() - now.date() <= timedelta(days=6)


@given(
    now=st.datetimes(min_value=datetime(2000, 1, 1), max_value=datetime(2100, 1, 1)),
    date_range=st.sampled_from([r for r in DateRange if r != DateRange.NONE]),
    week_window=st.sampled_from([ROLLING, CALENDAR])
)
@settings(max_examples=100)
def test_windows_are_well_formed(now, date_range, week_window):
    """
    Property: every resolved window has start before end.
    """
    window = resolve_window(date_range, now, week_window)

    assert isinstance(window, DateWindow)
    assert window.start < window.end

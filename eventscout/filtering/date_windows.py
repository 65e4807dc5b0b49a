"""
Date window resolution for relative date ranges.

Turns a DateRange into a concrete [start, end] interval anchored on a
reference "now".
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Optional

from eventscout.models import DateRange

ROLLING = "rolling"
CALENDAR = "calendar"

FRIDAY = 4
WEEKEND_START = time(18, 0)
WEEKEND_END = time(23, 59, 59)


@dataclass(frozen=True)
class DateWindow:
    """Interval a candidate start date must fall in.

    Attributes:
        start: Inclusive lower bound
        end: Upper bound
        end_inclusive: Whether ``end`` itself is inside the window
    """
    start: datetime
    end: datetime
    end_inclusive: bool = False

    def contains(self, moment: datetime) -> bool:
        moment = align_to(moment, self.start)
        if moment < self.start:
            return False
        if self.end_inclusive:
            return moment <= self.end
        return moment < self.end


def align_to(moment: datetime, reference: datetime) -> datetime:
    """Give ``moment`` the same naive/aware flavour as ``reference``.

    Naive moments are assumed to be in the reference's timezone; aware
    moments compared against a naive reference are converted to local time.
    """
    if (moment.tzinfo is None) == (reference.tzinfo is None):
        return moment
    if reference.tzinfo is not None:
        return moment.replace(tzinfo=reference.tzinfo)
    return moment.astimezone().replace(tzinfo=None)


def _midnight(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min, tzinfo=moment.tzinfo)


def _next_monday(now: datetime) -> datetime:
    return _midnight(now) + timedelta(days=7 - now.weekday())


def weekend_window(now: datetime) -> DateWindow:
    """Friday 18:00 through Sunday 23:59:59 of the current or upcoming weekend.

    Friday, Saturday and Sunday resolve to the weekend already in progress.
    """
    friday = now.date() + timedelta(days=FRIDAY - now.weekday())
    start = datetime.combine(friday, WEEKEND_START, tzinfo=now.tzinfo)
    end = datetime.combine(friday + timedelta(days=2), WEEKEND_END, tzinfo=now.tzinfo)
    return DateWindow(start=start, end=end, end_inclusive=True)


def resolve_window(
    date_range: DateRange,
    now: datetime,
    week_window: str = ROLLING
) -> Optional[DateWindow]:
    """
    Resolve a relative date range against ``now``.

    Args:
        date_range: Range requested by the FilterSpec
        now: Reference moment
        week_window: ``rolling`` (next 7 days) or ``calendar`` (Monday based
            weeks) interpretation of this_week/next_week

    Returns:
        The window, or None when the range imposes no constraint
    """
    if date_range == DateRange.TODAY:
        return DateWindow(start=now, end=now + timedelta(days=1))

    if date_range == DateRange.TOMORROW:
        start = _midnight(now) + timedelta(days=1)
        return DateWindow(start=start, end=start + timedelta(days=1))

    if date_range == DateRange.THIS_WEEKEND:
        return weekend_window(now)

    if date_range == DateRange.THIS_WEEK:
        if week_window == CALENDAR:
            return DateWindow(start=now, end=_next_monday(now))
        return DateWindow(start=now, end=now + timedelta(days=7))

    if date_range == DateRange.NEXT_WEEK:
        if week_window == CALENDAR:
            start = _next_monday(now)
            return DateWindow(start=start, end=start + timedelta(days=7))
        return DateWindow(start=now, end=now + timedelta(days=7))

    return None

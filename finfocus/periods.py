"""Utilities for working with reporting periods."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Tuple

_TICK = timedelta(microseconds=1)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def week_range(now: datetime) -> Tuple[datetime, datetime]:
    """Monday 00:00 through Sunday 23:59:59.999999 of the week containing ``now``."""

    start = start_of_day(now) - timedelta(days=now.weekday())
    return start, start + timedelta(days=7) - _TICK


def month_range(now: datetime) -> Tuple[datetime, datetime]:
    start = start_of_day(now).replace(day=1)
    if start.month == 12:
        following = start.replace(year=start.year + 1, month=1)
    else:
        following = start.replace(month=start.month + 1)
    return start, following - _TICK


def year_range(now: datetime) -> Tuple[datetime, datetime]:
    start = start_of_day(now).replace(month=1, day=1)
    return start, start.replace(year=start.year + 1) - _TICK


def last_month_range(today: date | None = None) -> Tuple[date, date]:
    """Return the first and last day of the calendar month before ``today``."""

    today = today or date.today()
    first_of_this_month = today.replace(day=1)
    last_day_previous_month = first_of_this_month - timedelta(days=1)
    return last_day_previous_month.replace(day=1), last_day_previous_month


class TimePeriod(Enum):
    THIS_WEEK = "This Week"
    THIS_MONTH = "This Month"
    THIS_YEAR = "This Year"
    ALL = "All Time"

    def date_range(self, now: datetime | None = None) -> Tuple[datetime, datetime]:
        now = now or datetime.now()
        if self is TimePeriod.THIS_WEEK:
            return week_range(now)
        if self is TimePeriod.THIS_MONTH:
            return month_range(now)
        if self is TimePeriod.THIS_YEAR:
            return year_range(now)
        return datetime.min, datetime.max

"""
Time helpers.

Timestamps are stored as naive UTC datetimes. Calendar-day decisions
(streak days, workout days, freeze weeks) are made in the gym's local
time zone, configured by GYM_TIMEZONE.
"""
from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from typing import Optional, Tuple

import pytz

from fitclub.config import settings


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, matching how rows are stored."""
    return datetime.now(dt_timezone.utc).replace(tzinfo=None)


def gym_timezone():
    return pytz.timezone(settings.GYM_TIMEZONE)


def local_date(moment_utc: datetime) -> date:
    """Calendar date of a naive UTC timestamp in the gym's time zone."""
    return pytz.utc.localize(moment_utc).astimezone(gym_timezone()).date()


def local_midnight_utc(day: date) -> datetime:
    """Naive UTC timestamp of 00:00 local time on `day`."""
    local = gym_timezone().localize(datetime.combine(day, time.min))
    return local.astimezone(pytz.utc).replace(tzinfo=None)


def week_start(day: date) -> date:
    """Monday of the ISO week containing `day`."""
    return day - timedelta(days=day.weekday())


def month_bounds(moment_utc: datetime) -> Tuple[datetime, datetime]:
    """UTC bounds [start, end) of the local calendar month containing `moment_utc`."""
    today = local_date(moment_utc)
    first = today.replace(day=1)
    if first.month == 12:
        next_first = first.replace(year=first.year + 1, month=1)
    else:
        next_first = first.replace(month=first.month + 1)
    return local_midnight_utc(first), local_midnight_utc(next_first)


def hours_between(start: Optional[datetime], end: datetime) -> float:
    if start is None:
        return 0.0
    return (end - start).total_seconds() / 3600


def hours_since_day_ended(day: date, now: datetime) -> float:
    """Hours elapsed since the end (local midnight) of calendar day `day`."""
    return hours_between(local_midnight_utc(day + timedelta(days=1)), now)


def floor_minutes(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)

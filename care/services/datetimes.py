"""
Date and time helpers for appointment input and calendar windows.

Dates are entered day-first (``TT.MM.JJJJ``) and times as 24-hour
``HH:mm``.  All instants handled here are timezone-aware; calendar
questions (which day, which hour, which month) are answered in the
session timezone passed in by the caller.
"""
from __future__ import annotations

import calendar
import re
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional, Union

from django.utils import timezone
from django.utils.dateparse import parse_datetime

DATE_RE = re.compile(r'^(\d{2})\.(\d{2})\.(\d{4})$')
TIME_RE = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)$')

END_OF_DAY = time(23, 59, 59, 999000)

DateLike = Union[date, datetime]


def session_tz(tz: Optional[tzinfo] = None) -> tzinfo:
    return tz or timezone.get_current_timezone()


def parse_german_date(value: Optional[str]) -> Optional[date]:
    """Parse ``DD.MM.YYYY`` into a date, or return ``None``.

    The parsed date is re-derived into day/month/year and compared with
    the input, so non-existent dates such as ``31.02.2024`` are rejected
    instead of rolled over.
    """
    m = DATE_RE.match((value or '').strip())
    if not m:
        return None
    day, month, year = (int(g) for g in m.groups())
    try:
        parsed = date(year, month, day)
    except ValueError:
        return None
    if (parsed.day, parsed.month, parsed.year) != (day, month, year):
        return None
    return parsed


def is_valid_time(value: Optional[str]) -> bool:
    return bool(TIME_RE.match(value or ''))


def combine(day: date, hhmm: str, tz: Optional[tzinfo] = None) -> datetime:
    """Build the aware instant for ``day`` at ``HH:mm`` in the session zone."""
    hour, minute = (int(p) for p in hhmm.split(':'))
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=session_tz(tz))


def parse_instant(value, tz: Optional[tzinfo] = None) -> datetime:
    """Accept a datetime or an ISO-8601 string and return an aware datetime.

    Naive values are interpreted in the session timezone.  Raises
    ``ValueError`` for anything that is not a timestamp.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = parse_datetime(value.strip())
        if dt is None:
            raise ValueError(f"not an ISO-8601 timestamp: {value!r}")
    else:
        raise ValueError(f"not a timestamp: {value!r}")
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt, session_tz(tz))
    return dt


def local_date(value: DateLike, tz: Optional[tzinfo] = None) -> date:
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = value.astimezone(session_tz(tz))
        return value.date()
    return value


def week_bounds(ref: DateLike, tz: Optional[tzinfo] = None) -> tuple[datetime, datetime]:
    """Monday 00:00:00.000 and Sunday 23:59:59.999 of the week holding ``ref``.

    Sunday counts as day 7, so a Sunday reference belongs to the week
    that started six days earlier.
    """
    tz = session_tz(tz)
    day = local_date(ref, tz)
    monday = day - timedelta(days=day.isoweekday() - 1)
    sunday = monday + timedelta(days=6)
    return (
        datetime.combine(monday, time.min, tzinfo=tz),
        datetime.combine(sunday, END_OF_DAY, tzinfo=tz),
    )


def days_of_week(ref: DateLike, tz: Optional[tzinfo] = None) -> list[date]:
    day = local_date(ref, tz)
    monday = day - timedelta(days=day.isoweekday() - 1)
    return [monday + timedelta(days=i) for i in range(7)]


def add_months(day: date, months: int) -> date:
    """Shift by whole calendar months, clamping the day of month."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last))

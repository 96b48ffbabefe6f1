"""Local calendar-date helpers.

Dates travel through the system as ``YYYY-MM-DD`` strings in the user's
local calendar; these helpers convert and shift them without touching UTC.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Iterator

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
SHORT_DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
SHORT_MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def parse_date(s: str) -> date | None:
    """Parse a canonical YYYY-MM-DD string, returning None for anything else."""
    try:
        d = date.fromisoformat(s)
    except (TypeError, ValueError):
        return None
    return d if d.isoformat() == s else None


def js_weekday(d: date) -> int:
    """Day of week with Sunday = 0 ... Saturday = 6."""
    return (d.weekday() + 1) % 7


def shift_days(d: date, days: int) -> date:
    return d + timedelta(days=days)


def shift_months(d: date, months: int) -> date:
    """Move by calendar months, clamping to the last valid day (Mar 31 - 1 -> Feb 28/29)."""
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last_day))


def shift_years(d: date, years: int) -> date:
    """Move by whole years; Feb 29 lands on Feb 28 in non-leap targets."""
    return shift_months(d, years * 12)


def week_start(d: date, week_start_day: int = 0) -> date:
    """First day of the week containing *d* (0 = Sunday start, 1 = Monday start)."""
    back = (js_weekday(d) - week_start_day + 7) % 7
    return d - timedelta(days=back)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def days_inclusive(start: date, end: date) -> int:
    """Number of calendar days in [start, end]; 0 for an empty range."""
    return max(0, (end - start).days + 1)


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)

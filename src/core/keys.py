"""Period keys — the only index space for day/week/month/year stores.

Two dates in the same Sunday-start week, month or year always map to the
same key. All dates are plain local calendar dates; no time zones.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Literal

View = Literal["day", "week", "month", "year"]


def weekday_index(d: date) -> int:
    """Weekday with 0 = Sunday .. 6 = Saturday."""
    return (d.weekday() + 1) % 7


def date_key(d: date) -> str:
    """YYYY-MM-DD, zero-padded."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_date_key(key: str) -> date:
    """Inverse of date_key. Raises ValueError on malformed input."""
    return date.fromisoformat(key)


def week_start(d: date) -> date:
    return d - timedelta(days=weekday_index(d))


def week_days(d: date) -> list[date]:
    """The seven dates (Sunday..Saturday) of the week containing `d`."""
    start = week_start(d)
    return [start + timedelta(days=i) for i in range(7)]


def week_key(d: date) -> str:
    """Date key of that week's Sunday."""
    return date_key(week_start(d))


def month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def year_key(d: date) -> str:
    return str(d.year)


def period_key(view: View, d: date) -> str:
    if view == "day":
        return date_key(d)
    if view == "week":
        return week_key(d)
    if view == "month":
        return month_key(d)
    if view == "year":
        return year_key(d)
    raise ValueError(f"Unknown view: {view!r}")


def days_in_month(year: int, month: int) -> int:
    """Number of days in `month` (1..12)."""
    return calendar.monthrange(year, month)[1]


def navigate(d: date, view: View, offset: int) -> date:
    """Move `d` by `offset` days/weeks/months/years.

    Month moves keep the day of month when possible and clamp it to the
    target month's length otherwise (Jan 31 + 1 month -> Feb 28/29).
    """
    if view == "day":
        return d + timedelta(days=offset)
    if view == "week":
        return d + timedelta(weeks=offset)
    if view == "month":
        month_index = d.month - 1 + offset
        year = d.year + month_index // 12
        month = month_index % 12 + 1
        return date(year, month, min(d.day, days_in_month(year, month)))
    if view == "year":
        year = d.year + offset
        return date(year, d.month, min(d.day, days_in_month(year, d.month)))
    raise ValueError(f"Unknown view: {view!r}")

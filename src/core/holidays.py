"""Holiday calendar builder.

Fetches public holidays for a year from a remote endpoint and merges in a
locally computed set of US observances (fixed dates, nth weekday of a month,
last weekday of a month and Easter-relative days).

Gracefully degrades: any remote failure (network, non-2xx, malformed body)
falls back to the local set alone plus a user-facing warning. The holiday
set is never empty.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta

import httpx
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from src.core.keys import date_key, days_in_month, weekday_index

logger = logging.getLogger(__name__)

FALLBACK_WARNING = (
    "Could not fetch holidays. Please check your network connection. "
    "Showing a limited set of holidays."
)


@dataclass(frozen=True)
class Holiday:
    name: str
    date: str   # YYYY-MM-DD


@dataclass
class HolidayResult:
    """Outcome of a build: the merged map, and a warning when remote failed."""

    holidays: dict[str, list[Holiday]]
    warning: str | None = None

    @property
    def used_fallback(self) -> bool:
        return self.warning is not None


class RemoteHoliday(BaseModel):
    """One record from the public holiday API. Extra fields are ignored."""

    day: date = Field(alias="date")
    name: str


_REMOTE_LIST = TypeAdapter(list[RemoteHoliday])


# ---------------------------------------------------------------------------
# Date arithmetic
# ---------------------------------------------------------------------------


def easter_sunday(year: int) -> date:
    """Gregorian Easter Sunday (anonymous Gregorian algorithm)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def nth_weekday(n: int, weekday: int, month: int, year: int) -> date:
    """The n-th `weekday` (0 = Sunday) of `month` (1..12)."""
    first = date(year, month, 1)
    offset = (weekday - weekday_index(first)) % 7
    return first + timedelta(days=offset + (n - 1) * 7)


def last_weekday(weekday: int, month: int, year: int) -> date:
    """The last `weekday` (0 = Sunday) of `month` (1..12)."""
    last = date(year, month, days_in_month(year, month))
    return last - timedelta(days=(weekday_index(last) - weekday) % 7)


# ---------------------------------------------------------------------------
# Local set
# ---------------------------------------------------------------------------


def computed_holidays(year: int) -> list[Holiday]:
    """The 22 locally computed observances for `year`, in calendar order."""
    easter = easter_sunday(year)
    thanksgiving = nth_weekday(4, 4, 11, year)

    def fixed(month: int, day: int) -> str:
        return date_key(date(year, month, day))

    return [
        Holiday("Martin Luther King, Jr. Day", date_key(nth_weekday(3, 1, 1, year))),
        Holiday("Groundhog Day", fixed(2, 2)),
        Holiday("Valentine's Day", fixed(2, 14)),
        Holiday("Presidents Day", date_key(nth_weekday(3, 1, 2, year))),
        Holiday("St. Patrick's Day", fixed(3, 17)),
        Holiday("April Fools' Day", fixed(4, 1)),
        Holiday("Good Friday", date_key(easter - timedelta(days=2))),
        Holiday("Easter Sunday", date_key(easter)),
        Holiday("Earth Day", fixed(4, 22)),
        Holiday("Cinco de Mayo", fixed(5, 5)),
        Holiday("Mother's Day", date_key(nth_weekday(2, 0, 5, year))),
        Holiday("Memorial Day", date_key(last_weekday(1, 5, year))),
        Holiday("Flag Day", fixed(6, 14)),
        Holiday("Father's Day", date_key(nth_weekday(3, 0, 6, year))),
        Holiday("Labor Day", date_key(nth_weekday(1, 1, 9, year))),
        Holiday("Patriot Day", fixed(9, 11)),
        Holiday("Indigenous Peoples' Day", date_key(nth_weekday(2, 1, 10, year))),
        Holiday("Halloween", fixed(10, 31)),
        Holiday("Thanksgiving Day", date_key(thanksgiving)),
        Holiday("Black Friday", date_key(thanksgiving + timedelta(days=1))),
        Holiday("Christmas Eve", fixed(12, 24)),
        Holiday("New Year's Eve", fixed(12, 31)),
    ]


def merge_holidays(
    remote: list[Holiday], local: list[Holiday],
) -> dict[str, list[Holiday]]:
    """Group by date: remote first, then local entries whose exact name is
    not already present on that date. Different names may share a date."""
    merged: dict[str, list[Holiday]] = {}
    for holiday in remote:
        merged.setdefault(holiday.date, []).append(holiday)
    for holiday in local:
        existing = merged.setdefault(holiday.date, [])
        if not any(h.name == holiday.name for h in existing):
            existing.append(holiday)
    return merged


# ---------------------------------------------------------------------------
# Remote fetch
# ---------------------------------------------------------------------------


def parse_remote_holidays(payload: object) -> list[Holiday]:
    """Validate an untrusted API body. Raises ValidationError if malformed."""
    records = _REMOTE_LIST.validate_python(payload)
    return [Holiday(name=r.name, date=date_key(r.day)) for r in records]


async def fetch_remote_holidays(
    year: int,
    country_code: str,
    base_url: str,
    timeout: float,
) -> list[Holiday]:
    """GET {base_url}/{year}/{country_code}. Raises on any failure."""
    url = f"{base_url.rstrip('/')}/{year}/{country_code}"
    async with httpx.AsyncClient(timeout=timeout) as client:
        resp = await client.get(url)
        resp.raise_for_status()
        data = resp.json()
    return parse_remote_holidays(data)


async def build_holidays(
    year: int,
    country_code: str | None = None,
    base_url: str | None = None,
    timeout: float | None = None,
) -> HolidayResult:
    """Build the merged holiday map for `year`. Never raises."""
    from src.config import settings

    local = computed_holidays(year)
    try:
        remote = await fetch_remote_holidays(
            year,
            country_code or settings.HOLIDAY_COUNTRY_CODE,
            base_url or settings.HOLIDAY_API_URL,
            timeout if timeout is not None else settings.HOLIDAY_TIMEOUT_SECONDS,
        )
    except (httpx.HTTPError, ValidationError, ValueError) as exc:
        logger.warning("Holiday fetch for %d failed, using local set: %s", year, exc)
        return HolidayResult(holidays=merge_holidays([], local), warning=FALLBACK_WARNING)

    logger.info("Fetched %d remote holidays for %d", len(remote), year)
    return HolidayResult(holidays=merge_holidays(remote, local))


class HolidayCalendar:
    """Builds holidays once per year and caches successful results."""

    def __init__(self, country_code: str | None = None) -> None:
        self._country_code = country_code
        self._cache: dict[int, HolidayResult] = {}

    def cached(self, year: int) -> dict[str, list[Holiday]] | None:
        result = self._cache.get(year)
        return result.holidays if result else None

    async def for_year(self, year: int) -> HolidayResult:
        if year in self._cache:
            return self._cache[year]
        result = await build_holidays(year, country_code=self._country_code)
        if not result.used_fallback:
            self._cache[year] = result
        return result


def holidays_for_date(holidays: dict[str, list[Holiday]] | None, d: date) -> list[Holiday]:
    return list((holidays or {}).get(date_key(d), []))

"""Calendar bucket keys (day / week / month / quarter / year).

Formats::

    day      YYYY-MM-DD
    week     YYYY-Www   (ISO-8601, the year is the year of the week's Thursday)
    month    YYYY-MM
    quarter  YYYY-Qn
    year     YYYY

Pure functions: callers localize aware datetimes before asking for a key.
Inverse operations return naive ``[start, end]`` datetimes and raise
``InvalidPeriodKey`` on anything they cannot parse.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

DAY = "day"
WEEK = "week"
MONTH = "month"
QUARTER = "quarter"
YEAR = "year"
GRANULARITIES = (DAY, WEEK, MONTH, QUARTER, YEAR)

_KEY_PATTERNS = {
    DAY: re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"),
    WEEK: re.compile(r"^(\d{4})-W(\d{2})$"),
    MONTH: re.compile(r"^(\d{4})-(\d{2})$"),
    QUARTER: re.compile(r"^(\d{4})-Q([1-4])$"),
    YEAR: re.compile(r"^(\d{4})$"),
}

_END_OF_DAY = time(23, 59, 59, 999999)


class InvalidPeriodKey(ValueError):
    """Raised when a period key string is malformed or names an impossible period."""


@dataclass(frozen=True)
class PeriodKeys:
    day: str
    week: str
    month: str
    quarter: str
    year: str

    def for_granularity(self, granularity: str) -> str:
        if granularity not in GRANULARITIES:
            raise ValueError(f"Unknown granularity: {granularity!r}")
        return getattr(self, granularity)


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


# ---------------------------------------------------------------------------
# Forward: timestamp -> key
# ---------------------------------------------------------------------------

def iso_week(value: date | datetime) -> tuple[int, int]:
    """Return ``(iso_year, iso_week)``.

    The date is shifted to the Thursday of its week (Monday=1 ... Sunday=7);
    the week number counts 7-day blocks from January 1st of that Thursday's year.
    """
    day = _as_date(value)
    thursday = day + timedelta(days=4 - day.isoweekday())
    days_since_jan1 = (thursday - date(thursday.year, 1, 1)).days
    return thursday.year, math.ceil((days_since_jan1 + 1) / 7)


def day_key(value: date | datetime) -> str:
    return _as_date(value).strftime("%Y-%m-%d")


def week_key(value: date | datetime) -> str:
    year, week = iso_week(value)
    return f"{year}-W{week:02d}"


def month_key(value: date | datetime) -> str:
    day = _as_date(value)
    return f"{day.year}-{day.month:02d}"


def quarter_key(value: date | datetime) -> str:
    day = _as_date(value)
    return f"{day.year}-Q{math.ceil(day.month / 3)}"


def year_key(value: date | datetime) -> str:
    return f"{_as_date(value).year}"


def period_keys(value: date | datetime) -> PeriodKeys:
    """All five bucket keys for one timestamp."""
    return PeriodKeys(
        day=day_key(value),
        week=week_key(value),
        month=month_key(value),
        quarter=quarter_key(value),
        year=year_key(value),
    )


def previous_month_key(value: date | datetime) -> str:
    first = _as_date(value).replace(day=1)
    return month_key(first - timedelta(days=1))


def previous_quarter_key(value: date | datetime) -> str:
    day = _as_date(value)
    quarter = math.ceil(day.month / 3)
    if quarter == 1:
        return f"{day.year - 1}-Q4"
    return f"{day.year}-Q{quarter - 1}"


def previous_week_key(value: date | datetime) -> str:
    return week_key(_as_date(value) - timedelta(days=7))


# ---------------------------------------------------------------------------
# Inverse: key -> [start, end]
# ---------------------------------------------------------------------------

def weeks_in_year(year: int) -> int:
    """52 or 53: December 28th always falls in the last ISO week."""
    return iso_week(date(year, 12, 28))[1]


def _match(granularity: str, key: str) -> re.Match:
    if not isinstance(key, str):
        raise InvalidPeriodKey(f"Period key must be a string, got {type(key).__name__}")
    match = _KEY_PATTERNS[granularity].match(key)
    if match is None:
        raise InvalidPeriodKey(f"Invalid {granularity} key: {key!r}")
    return match


def validate_key(granularity: str, key: str) -> str:
    """Return ``key`` unchanged if it denotes a real period, else raise."""
    if granularity not in _KEY_PATTERNS:
        raise InvalidPeriodKey(f"Unknown granularity: {granularity!r}")
    period_range(granularity, key)
    return key


def _bounds(first: date, last: date) -> tuple[datetime, datetime]:
    return datetime.combine(first, time.min), datetime.combine(last, _END_OF_DAY)


def day_range(key: str) -> tuple[datetime, datetime]:
    match = _match(DAY, key)
    try:
        day = date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError as exc:
        raise InvalidPeriodKey(f"Invalid day key: {key!r}") from exc
    return _bounds(day, day)


def week_range(key: str) -> tuple[datetime, datetime]:
    """``YYYY-Www`` -> Monday 00:00 .. Sunday 23:59:59.999999.

    Week 1 is the week holding January 4th.
    """
    match = _match(WEEK, key)
    year, week = int(match.group(1)), int(match.group(2))
    if year < 1 or week < 1 or week > weeks_in_year(year):
        raise InvalidPeriodKey(f"Invalid week key: {key!r}")
    jan4 = date(year, 1, 4)
    monday = jan4 - timedelta(days=jan4.isoweekday() - 1) + timedelta(weeks=week - 1)
    return _bounds(monday, monday + timedelta(days=6))


def _month_bounds(year: int, first_month: int, last_month: int) -> tuple[datetime, datetime]:
    first = date(year, first_month, 1)
    if last_month == 12:
        last = date(year, 12, 31)
    else:
        last = date(year, last_month + 1, 1) - timedelta(days=1)
    return _bounds(first, last)


def month_range(key: str) -> tuple[datetime, datetime]:
    match = _match(MONTH, key)
    year, month = int(match.group(1)), int(match.group(2))
    if year < 1 or not 1 <= month <= 12:
        raise InvalidPeriodKey(f"Invalid month key: {key!r}")
    return _month_bounds(year, month, month)


def quarter_range(key: str) -> tuple[datetime, datetime]:
    match = _match(QUARTER, key)
    year, quarter = int(match.group(1)), int(match.group(2))
    if year < 1:
        raise InvalidPeriodKey(f"Invalid quarter key: {key!r}")
    return _month_bounds(year, quarter * 3 - 2, quarter * 3)


def year_range(key: str) -> tuple[datetime, datetime]:
    year = int(_match(YEAR, key).group(1))
    if year < 1:
        raise InvalidPeriodKey(f"Invalid year key: {key!r}")
    return _bounds(date(year, 1, 1), date(year, 12, 31))


_RANGES = {
    DAY: day_range,
    WEEK: week_range,
    MONTH: month_range,
    QUARTER: quarter_range,
    YEAR: year_range,
}


def period_range(granularity: str, key: str) -> tuple[datetime, datetime]:
    try:
        resolver = _RANGES[granularity]
    except KeyError as exc:
        raise InvalidPeriodKey(f"Unknown granularity: {granularity!r}") from exc
    return resolver(key)

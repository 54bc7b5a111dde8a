"""UTC datetime and calendar-date utilities."""

import calendar
from datetime import date, datetime, timedelta, timezone
from typing import Iterator

from stay_sync.config import PROPERTY_TZ


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    This function should be used instead of datetime.now() or datetime.utcnow()
    to ensure all timestamps are timezone-aware and stored in UTC.

    Returns:
        Timezone-aware datetime in UTC

    Example:
        >>> now = utc_now()
        >>> now.tzinfo is not None
        True
    """
    return datetime.now(timezone.utc)


def property_today() -> date:
    """Today's date at the property (PROPERTY_TIMEZONE), which is what arrivals are keyed on."""
    return datetime.now(PROPERTY_TZ).date()


def iter_dates(start: date, end: date) -> Iterator[date]:
    """
    Yield every date in the half-open range [start, end).

    Example:
        >>> list(iter_dates(date(2024, 5, 10), date(2024, 5, 12)))
        [datetime.date(2024, 5, 10), datetime.date(2024, 5, 11)]
    """
    current = start
    while current < end:
        yield current
        current += timedelta(days=1)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """
    Return the half-open [first day, first day of next month) range for a month.

    Example:
        >>> month_bounds(2024, 2)
        (datetime.date(2024, 2, 1), datetime.date(2024, 3, 1))
    """
    _, days_in_month = calendar.monthrange(year, month)
    first = date(year, month, 1)
    return first, first + timedelta(days=days_in_month)


def covers(check_in: date, check_out: date, day: date) -> bool:
    """True if `day` falls inside the stay [check_in, check_out). Check-out day is free."""
    return check_in <= day < check_out


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from stores that drop tzinfo (SQLite)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

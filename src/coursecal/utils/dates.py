"""Date-only and time-of-day parsing helpers.

All calendar arithmetic works on ``datetime.date`` values, never on local
clock time, so a day boundary cannot drift with the host timezone.
"""

import datetime
import re
from collections.abc import Iterator

from ..const import WEEKDAYS

_TIME_RE = re.compile(r"^(\d{2}):(\d{2})(?::(\d{2}))?$")


def parse_date(value) -> datetime.date | None:
    """Parse a ``YYYY-MM-DD`` string (or date/datetime) into a date.

    Returns None for anything that is not a valid calendar date.
    """
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def parse_time(value) -> datetime.time | None:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into a time, None if malformed."""
    if isinstance(value, datetime.time):
        return value
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    hour, minute, second = match.groups()
    try:
        return datetime.time(int(hour), int(minute), int(second or 0))
    except ValueError:
        return None


def parse_datetime(value) -> datetime.datetime | None:
    """Parse an ISO 8601 date-time string or datetime, None if invalid."""
    if isinstance(value, datetime.datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        # Handle timezone offset
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None


def combine(day, time_of_day) -> datetime.datetime | None:
    """Combine a date and a time-of-day into a naive date-time."""
    parsed_day = parse_date(day)
    parsed_time = parse_time(time_of_day)
    if parsed_day is None or parsed_time is None:
        return None
    return datetime.datetime.combine(parsed_day, parsed_time)


def iter_dates(start: datetime.date, end: datetime.date) -> Iterator[datetime.date]:
    """Yield every date from start to end inclusive."""
    current = start
    one_day = datetime.timedelta(days=1)
    while current <= end:
        yield current
        current += one_day


def weekday_name(day: datetime.date) -> str:
    """Return the three-letter weekday name used in course hours (``Sun``..``Sat``)."""
    return WEEKDAYS[day.isoweekday() % 7]

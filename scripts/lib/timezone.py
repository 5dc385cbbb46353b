"""
Agency-time date helpers.

The agency operates on Central Time, so "today", the 6 PM entry lock and
report date ranges are all computed in America/Chicago regardless of where
the server or the user is. Each helper takes an optional ``now`` so callers
and tests can pin the clock.
"""
from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from scripts.lib.errors import InvalidDateRangeError
from scripts.lib.logger import setup_logger

logger = setup_logger(__name__)

CT_TIMEZONE = "America/Chicago"
CT = ZoneInfo(CT_TIMEZONE)

DATE_FORMAT = "%Y-%m-%d"
ENTRY_LOCK_TIME = time(18, 0, 0)

# Go-live day: entries made on 2025-09-03 belonged to the 2nd.
GO_LIVE_DATE = "2025-09-03"
GO_LIVE_ENTRY_DATE = "2025-09-02"


def now_ct(now: Optional[datetime] = None) -> datetime:
    """Current instant (or ``now``) expressed in Central Time."""
    if now is None:
        return datetime.now(CT)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(CT)


def today(now: Optional[datetime] = None) -> str:
    return now_ct(now).strftime(DATE_FORMAT)


def yesterday(now: Optional[datetime] = None) -> str:
    return (now_ct(now).date() - timedelta(days=1)).strftime(DATE_FORMAT)


def _to_ct_datetime(value: str) -> datetime:
    """Parse an ISO date/datetime string; naive values are read as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(CT)


def format_ct_date(value: str) -> str:
    """'2025-09-02T15:00:00Z' -> '9/2/2025'."""
    dt = _to_ct_datetime(value)
    return f"{dt.month}/{dt.day}/{dt.year}"


def format_ct_datetime(value: str) -> str:
    """'2025-09-02T23:05:00Z' -> '9/2/2025 6:05 PM'."""
    dt = _to_ct_datetime(value)
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    return f"{dt.month}/{dt.day}/{dt.year} {hour}:{dt.minute:02d} {meridiem}"


def is_today(date_str: str, now: Optional[datetime] = None) -> bool:
    return date_str.split("T")[0] == today(now)


def is_past_6pm(date_str: str, now: Optional[datetime] = None) -> bool:
    """
    True once 18:00 CT on ``date_str`` has passed.

    Malformed input never locks an entry: any parse failure returns False.
    """
    try:
        day = datetime.strptime(date_str.split("T")[0], DATE_FORMAT).date()
        lock_at = datetime.combine(day, ENTRY_LOCK_TIME, tzinfo=CT)
        return now_ct(now) > lock_at
    except (AttributeError, TypeError, ValueError) as e:
        logger.warning("Could not evaluate entry lock for %r: %s", date_str, e)
        return False


def get_default_entry_date(now: Optional[datetime] = None) -> str:
    ct_date = today(now)
    if ct_date == GO_LIVE_DATE:
        return GO_LIVE_ENTRY_DATE
    return ct_date


def parse_date(value: str) -> date:
    return datetime.strptime(value, DATE_FORMAT).date()


def parse_date_range(from_date: str, to_date: str) -> Tuple[date, date]:
    """
    Validate an inclusive 'YYYY-MM-DD' range.

    Raises:
        InvalidDateRangeError: malformed dates or from_date after to_date.
    """
    try:
        start = parse_date(from_date)
        end = parse_date(to_date)
    except (TypeError, ValueError) as e:
        raise InvalidDateRangeError(from_date, to_date, str(e)) from e
    if start > end:
        raise InvalidDateRangeError(from_date, to_date, "from_date is after to_date")
    return start, end


def month_range(year: int, month: Optional[int] = None) -> Tuple[str, str]:
    """First and last day of a month, or of the whole year when month is None."""
    if month is None:
        return f"{year}-01-01", f"{year}-12-31"
    last_day = calendar.monthrange(year, month)[1]
    return f"{year}-{month:02d}-01", f"{year}-{month:02d}-{last_day:02d}"

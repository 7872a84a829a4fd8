"""Build TimeRange windows from route parameters."""

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import InvalidRange
from ..models.common import TimeRange

# Relative windows served under /timelapse/<name>/
RELATIVE_WINDOWS = {
    "24": timedelta(hours=24),
    "48": timedelta(hours=48),
    "1w": timedelta(weeks=1),
}

_ISO_WEEK = re.compile(r"^(\d{4})-?W(\d{2})$")


def load_zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e


def floor_now(now: Optional[datetime] = None, granularity_seconds: int = 60) -> datetime:
    """Current UTC time floored to ``granularity_seconds``."""
    now = now or datetime.now(tz=timezone.utc)
    seconds = int(now.timestamp())
    return datetime.fromtimestamp(seconds - seconds % granularity_seconds, tz=timezone.utc)


def last_window(
    duration: timedelta,
    now: Optional[datetime] = None,
    granularity_seconds: int = 60,
) -> TimeRange:
    end = floor_now(now, granularity_seconds)
    return TimeRange(start=end - duration, end=end)


def relative_window(
    name: str,
    now: Optional[datetime] = None,
    granularity_seconds: int = 60,
) -> TimeRange:
    duration = RELATIVE_WINDOWS.get(name)
    if duration is None:
        raise InvalidRange(f"Unknown window: {name}")
    return last_window(duration, now, granularity_seconds)


def calendar_day(value: str, zone: tzinfo) -> TimeRange:
    """Local midnight of ``value`` (YYYY-MM-DD) to the next local midnight."""
    try:
        day = datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as e:
        raise InvalidRange(f"Invalid day: {value}") from e
    return _local_span(day, day + timedelta(days=1), zone)


def iso_week(value: str, zone: tzinfo) -> TimeRange:
    """Monday to Monday of an ISO week written ``YYYY-Www``."""
    match = _ISO_WEEK.match(value)
    if not match:
        raise InvalidRange(f"Invalid week: {value}")
    try:
        monday = date.fromisocalendar(int(match.group(1)), int(match.group(2)), 1)
    except ValueError as e:
        raise InvalidRange(f"Invalid week: {value}") from e
    return _local_span(monday, monday + timedelta(weeks=1), zone)


def explicit(start: str, end: str, zone: tzinfo) -> TimeRange:
    """Window between two ISO-8601 instants; naive values are read in ``zone``."""
    return TimeRange(start=_parse_instant(start, zone), end=_parse_instant(end, zone))


def _parse_instant(value: str, zone: tzinfo) -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise InvalidRange(f"Invalid timestamp: {value}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone)
    return parsed


def _local_span(first: date, after: date, zone: tzinfo) -> TimeRange:
    return TimeRange(
        start=datetime.combine(first, time.min, tzinfo=zone),
        end=datetime.combine(after, time.min, tzinfo=zone),
    )

"""Date and time helpers shared by the task model and repository."""

from __future__ import annotations

import re
from datetime import UTC, date, datetime

LEGACY_TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def now_iso() -> str:
    """Get current timestamp in ISO format (UTC)."""
    return datetime.now(UTC).isoformat()


def today() -> date:
    """Current calendar date in the local timezone."""
    return datetime.now().astimezone().date()


def date_prefix(day: date) -> str:
    """Format a date as the ``yyyyMMdd`` task id prefix."""
    return day.strftime("%Y%m%d")


def date_key(day: date) -> str:
    """Format a date as ``yyyy-MM-dd`` for matching stored start times."""
    return day.isoformat()


def parse_iso_datetime(value: str) -> datetime | None:
    """Parse an ISO-8601 datetime string, returning None when it is not one."""
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def parse_task_time(value: str, *, on: date | None = None) -> datetime | None:
    """Parse a stored start/end time.

    ISO-8601 first; legacy ``HH:mm`` values are read as that time on ``on``
    (default: today, local). Empty or unparseable values give None.
    """
    if not value:
        return None

    parsed = parse_iso_datetime(value)
    if parsed is not None:
        return parsed

    match = LEGACY_TIME_PATTERN.match(value.strip())
    if match is None:
        return None

    day = on or today()
    local = datetime(day.year, day.month, day.day, int(match.group(1)), int(match.group(2)))
    return local.astimezone()


def to_aware(value: datetime) -> datetime:
    """Attach the local timezone to naive datetimes."""
    if value.tzinfo is None:
        return value.astimezone()
    return value

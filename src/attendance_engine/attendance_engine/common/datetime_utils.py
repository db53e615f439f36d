from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterator
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 timestamp. Naive values are taken as UTC."""
    if not value:
        raise ValidationError("timestamp is required")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid timestamp {value!r}")
    return ensure_aware(parsed)


def ensure_aware(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


def now_utc() -> datetime:
    """Current server time.

    Note: Wrapped so tests can patch/mock it easily.
    """
    return datetime.now(timezone.utc)


def resolve_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown time zone {name!r}")


def to_local(instant: datetime, tz: ZoneInfo) -> datetime:
    return ensure_aware(instant).astimezone(tz)


def local_date(instant: datetime, tz: ZoneInfo) -> date:
    """Calendar date of the instant in the given zone."""
    return to_local(instant, tz).date()


def minute_of_day(instant: datetime, tz: ZoneInfo) -> int:
    local = to_local(instant, tz)
    return local.hour * 60 + local.minute


def parse_hhmm(value: str) -> int:
    """'HH:MM' -> minutes since midnight."""
    try:
        parsed = datetime.strptime(value.strip(), "%H:%M").time()
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid time {value!r}, expected HH:MM")
    return parsed.hour * 60 + parsed.minute


def date_key(work_date: date) -> str:
    return work_date.strftime("%Y-%m-%d")


def parse_month_key(month: str) -> tuple[date, date]:
    """'YYYY-MM' -> (first day, first day of next month)."""
    try:
        first = datetime.strptime(month, "%Y-%m").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid month {month!r}, expected YYYY-MM")
    if first.month == 12:
        return first, date(first.year + 1, 1, 1)
    return first, date(first.year, first.month + 1, 1)


def month_key(value: date) -> str:
    return value.strftime("%Y-%m")


def previous_month_key(today: date) -> str:
    last_of_previous = today.replace(day=1) - timedelta(days=1)
    return month_key(last_of_previous)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Every calendar day in [start, end]."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)

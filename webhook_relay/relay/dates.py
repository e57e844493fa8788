"""Calendar-day windows in the relay's fixed reporting timezone."""

import re
from datetime import date, datetime, time, timedelta, timezone

from webhook_relay.relay.errors import InvalidDateError
from webhook_relay.stores.models import utc_now

TODAY = "today"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def local_zone(offset_hours: int) -> timezone:
    """Fixed-offset timezone, e.g. UTC+7."""
    return timezone(timedelta(hours=offset_hours))


def parse_day(value: str | None, offset_hours: int, now: datetime | None = None) -> date:
    """Resolve a date parameter to a calendar day in the local zone.

    Args:
        value: "today", None/empty (same as today) or YYYY-MM-DD
        offset_hours: Local zone offset from UTC
        now: Reference instant for "today" (defaults to the current time)

    Raises:
        InvalidDateError: If value is malformed
    """
    if not value or value == TODAY:
        reference = now or utc_now()
        return reference.astimezone(local_zone(offset_hours)).date()

    message = f"Invalid date: {value!r} (expected 'today' or YYYY-MM-DD)"
    if not _DATE_RE.match(value):
        raise InvalidDateError(message)
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise InvalidDateError(message) from e


def day_window(day: date, offset_hours: int) -> tuple[datetime, datetime]:
    """Half-open [start, end) window covering one local calendar day, in UTC."""
    start = datetime.combine(day, time.min, tzinfo=local_zone(offset_hours))
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def resolve_window(
    value: str | None,
    offset_hours: int,
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """Parse a date parameter and return its UTC window."""
    return day_window(parse_day(value, offset_hours, now), offset_hours)


def local_hhmm(instant: datetime, offset_hours: int) -> str:
    """Wall-clock HH:MM of an instant in the local zone."""
    return instant.astimezone(local_zone(offset_hours)).strftime("%H:%M")

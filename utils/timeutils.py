"""Instant parsing and formatting shared by the API and the store."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.exceptions import ConfigurationError, InvalidTimestampError

Instant = Union[datetime, str]

END_OF_DAY = time(23, 59, 59, 999000)


def utcnow() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_instant(value: Instant) -> datetime:
    """Interpret ``value`` as an aware UTC instant.

    Accepts aware or naive datetimes (naive values are taken as UTC, which is
    how the store writes them) and ISO-8601 strings, including the ``Z``
    suffix produced by JavaScript clients.

    Raises:
        InvalidTimestampError: If the value cannot be interpreted
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidTimestampError("Empty timestamp")
        if text[-1] in "zZ":
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidTimestampError(f"Unparseable timestamp: {value!r}") from exc
    else:
        raise InvalidTimestampError(f"Unsupported timestamp type: {type(value).__name__}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_optional_instant(value: Optional[str]) -> Optional[datetime]:
    if value is None or not value.strip():
        return None
    return parse_instant(value)


def end_of_day(value: datetime) -> datetime:
    """Last millisecond of the calendar day of ``value`` (in its own zone)."""
    return datetime.combine(value.date(), END_OF_DAY, tzinfo=value.tzinfo)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """Format an instant like ``Date.toISOString``: millisecond precision, ``Z``."""
    if value is None:
        return None
    utc_value = parse_instant(value)
    return utc_value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def resolve_timezone(name: str) -> ZoneInfo:
    """Resolve an IANA zone name, failing loudly on typos in configuration."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone: {name!r}") from exc


def start_of_today(tz: timezone | ZoneInfo = timezone.utc) -> datetime:
    today: date = datetime.now(tz).date()
    return datetime.combine(today, time.min, tzinfo=tz)

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import DAY_KEY_FORMAT, DEFAULT_TIMEZONE, WEEKDAY_NAMES
from ..core.exceptions import ValidationError

Instant = Union[str, datetime]


def get_zone(name: Optional[str]) -> tzinfo:
    """Resolve an IANA zone name, falling back to the default zone."""
    try:
        return ZoneInfo(name or DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown time zone: {name!r}")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD (or a full ISO timestamp) into a date."""
    try:
        return datetime.strptime(value[:10], DAY_KEY_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r}")


def parse_iso_datetime(value: Instant, tz: tzinfo) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive values are interpreted as wall-clock time in ``tz``.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"Invalid timestamp: {value!r}")
    else:
        raise ValidationError(f"Invalid timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return to_utc(parsed)


def to_utc(value: datetime) -> datetime:
    """Same instant in UTC."""
    return value.astimezone(timezone.utc)


def to_local(value: datetime, tz: tzinfo) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def local_date(value: Union[date, datetime], tz: tzinfo) -> date:
    """Calendar day of ``value`` as seen in ``tz``."""
    if isinstance(value, datetime):
        return to_local(value, tz).date()
    return value


def day_key(value: Union[date, datetime, str], tz: tzinfo) -> str:
    """Normalize a date-ish value to a local ``YYYY-MM-DD`` key."""
    if isinstance(value, str):
        if len(value.strip()) == 10:
            return parse_iso_date(value).strftime(DAY_KEY_FORMAT)
        value = parse_iso_datetime(value, tz)
    return local_date(value, tz).strftime(DAY_KEY_FORMAT)


def weekday_name(value: date) -> str:
    return WEEKDAY_NAMES[value.weekday()]


def to_utc_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def now_utc() -> datetime:
    """Current time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)

"""
Timestamp helpers shared by builders and services.

Every timestamp leaving the core is an ISO-8601 UTC string with
millisecond precision and a ``Z`` suffix, e.g. ``2024-03-01T00:00:00.000Z``.
Naive inputs are interpreted as UTC; date-only inputs as UTC midnight.
"""

from datetime import date, datetime, time, timezone
from typing import Union

TimestampInput = Union[str, datetime, date]


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: TimestampInput) -> datetime:
    """
    Parse a timestamp into an aware UTC datetime.

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Invalid timestamp: empty string")
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError as e:
        raise ValueError(f"Invalid timestamp: {value!r} is out of range") from e


def to_iso(value: datetime) -> str:
    """Render an aware (or UTC-naive) datetime as ISO-8601 UTC with a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    rendered = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return rendered.replace("+00:00", "Z")


def coerce_iso(value: TimestampInput) -> str:
    """Parse then render; parser failures propagate as ValueError."""
    return to_iso(parse_timestamp(value))

"""
Timestamp handling for reading payloads.

Payload keys use the fixed layout ``YYYY.MM.DD - HH:MM:SS`` in wall-clock
time. Instants are plain integers (seconds since the epoch).
"""

from datetime import datetime, tzinfo
from typing import Optional

from .exceptions import MalformedTimestamp

SEPARATOR = " - "
HOUR = 60 * 60  # [s]


def _split_fields(part: str, sep: str, text: str, what: str) -> list[int]:
    fields = part.split(sep)
    if len(fields) != 3:
        raise MalformedTimestamp(text, f"expected 3 {what} fields, got {len(fields)}")
    if not all(f.isdigit() and f.isascii() for f in fields):
        raise MalformedTimestamp(text, f"non-numeric {what} field")
    return [int(f) for f in fields]


def parse_time(text: str, tz: Optional[tzinfo] = None) -> int:
    """Parse a ``YYYY.MM.DD - HH:MM:SS`` timestamp into epoch seconds.

    Args:
        text: Timestamp text
        tz: Zone of the wall-clock time; None means the local zone

    Returns:
        Epoch seconds, second precision

    Raises:
        MalformedTimestamp: If the layout or the calendar date is invalid
    """
    if not isinstance(text, str):
        raise MalformedTimestamp(repr(text), "not a string")

    parts = text.split(SEPARATOR)
    if len(parts) != 2:
        raise MalformedTimestamp(text, f"missing {SEPARATOR.strip()!r} separator")

    year, month, day = _split_fields(parts[0], ".", text, "date")
    hour, minute, second = _split_fields(parts[1], ":", text, "time")

    try:
        return int(datetime(year, month, day, hour, minute, second, tzinfo=tz).timestamp())
    except (ValueError, OverflowError, OSError) as e:
        raise MalformedTimestamp(text, str(e)) from e


def format_time(instant: int, tz: Optional[tzinfo] = None) -> str:
    """Format epoch seconds back into the payload layout."""
    return datetime.fromtimestamp(instant, tz).strftime("%Y.%m.%d - %H:%M:%S")


def last_round_hour(instant: int) -> int:
    """Floor an instant to the last round hour."""
    return (instant // HOUR) * HOUR


def format_clock(instant: int, tz: Optional[tzinfo] = None) -> str:
    """Format an instant as a zero-padded ``HH:MM`` clock label."""
    dt = datetime.fromtimestamp(instant, tz)
    return f"{dt.hour:02d}:{dt.minute:02d}"

"""
Timestamp helpers.

Rows store epoch milliseconds; the wire carries ISO-8601 strings.
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Optional

from sociate.errors import ValidationError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def to_iso(ms: Optional[int]) -> Optional[str]:
    """
    Convert epoch milliseconds to a UTC ISO-8601 string.

    Args:
        ms: Epoch milliseconds (None passes through)

    Returns:
        String like ``2024-05-01T12:00:00.000Z``
    """
    if ms is None:
        return None
    seconds, millis = divmod(int(ms), 1000)
    dt = EPOCH + timedelta(seconds=seconds)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{millis:03d}Z"


def parse_iso_to_ms(value: str) -> int:
    """
    Parse a pagination cursor into epoch milliseconds.

    Accepts ISO-8601 (``Z`` or explicit offset; naive values are UTC) or a
    raw epoch-millisecond integer string.

    Raises:
        ValidationError: if the value cannot be parsed
    """
    raw = (value or "").strip()
    if not raw:
        raise ValidationError("Invalid timestamp")
    if raw.lstrip("-").isdigit():
        return int(raw)
    if raw.endswith("Z") or raw.endswith("z"):
        raw = raw[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"Invalid timestamp: {value}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - EPOCH) // timedelta(milliseconds=1)

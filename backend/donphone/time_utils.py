from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """
    Server-side 'now' in UTC (aware, millisecond precision).

    Documents are persisted with millisecond timestamps, so 'now' is truncated
    to the same precision to keep stored values equal to in-memory ones.
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def ensure_utc(dt: datetime) -> datetime:
    """Return dt as an aware UTC datetime. Naive values are interpreted as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string and normalize to aware UTC.

    - None / "" -> None
    - "YYYY-MM-DD" and "YYYY-MM-DDTHH:MM" (naive) are interpreted as UTC
    - "...Z" or "...+/-HH:MM" is converted to UTC
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    return ensure_utc(datetime.fromisoformat(s))


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with milliseconds and trailing 'Z'
    (2024-05-01T13:45:10.123Z). If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    return ensure_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def end_of_day(dt: datetime) -> datetime:
    """Last representable millisecond of dt's calendar day."""
    return dt.replace(hour=23, minute=59, second=59, microsecond=999000)

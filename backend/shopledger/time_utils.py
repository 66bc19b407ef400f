from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Union


def utcnow() -> datetime:
    """Ledger clock: current UTC time, naive, microsecond precision."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Read a timestamp back from JSON (snapshots, API payloads).

    - None / "" -> None
    - naive values are taken as UTC
    - "...Z" and "+HH:MM" offsets are converted to UTC, then made naive

    Raises TypeError for non-string input and ValueError for malformed text.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
    else:
        raise TypeError(f"expected an ISO-8601 string, got {type(value).__name__}")

    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    ISO-8601 with a trailing 'Z'. Microseconds are kept so ledger order
    survives an export/import cycle.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")

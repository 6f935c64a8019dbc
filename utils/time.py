"""Time utilities: timezone-aware helpers and ISO formatting/parsing.

All timestamps stored by the turn engine are UTC.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional


def now_utc() -> datetime:
    """Return current UTC datetime with tzinfo set."""
    return datetime.now(timezone.utc)


def seconds_from(start: datetime, seconds: float) -> datetime:
    """Return `start` shifted forward by `seconds`."""
    return start + timedelta(seconds=seconds)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime to ISO8601 string (None passes through)."""
    if dt is None:
        return None
    return dt.isoformat()


def parse_iso(s: Optional[str]) -> Optional[datetime]:
    """Parse an ISO8601 string into a timezone-aware datetime when possible.

    Naive values are assumed to be UTC. Returns None on obvious parse failures.
    """
    if not s:
        return None
    try:
        # Python's fromisoformat handles most variants; tolerate trailing Z.
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        parsed = datetime.fromisoformat(s)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed

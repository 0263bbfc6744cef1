"""Time utilities shared by normalizers and aggregation.

- parse_timestamp: coerce stored timestamp values to aware UTC datetimes
- Window: half-open [start, end) time range
- trailing_days: the common "last N days" window
- month_key: YYYY-MM partition key
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

MONTH_KEY_RE = re.compile(r"^(\d{4}-\d{2})_")


def parse_timestamp(value: Any) -> datetime | None:
    """Coerce a stored timestamp into an aware UTC datetime.

    Accepts datetime objects (Firestore returns a datetime subclass),
    ISO-8601 strings with or without a trailing "Z", epoch seconds, and
    protobuf-style objects exposing ToDatetime()/to_datetime().
    Naive values are treated as UTC. Unparseable values return None.

    Args:
        value: Raw value read from a document.

    Returns:
        Aware datetime in UTC, or None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        # Out-of-range values (epoch milliseconds, NaN) are unparseable
        try:
            parsed = datetime.fromtimestamp(value, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return None
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    elif hasattr(value, "to_datetime"):
        parsed = value.to_datetime()
    elif hasattr(value, "ToDatetime"):
        parsed = value.ToDatetime()
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class Window:
    """Half-open time range [start, end).

    A missing bound is unbounded on that side.
    """

    start: datetime | None = None
    end: datetime | None = None

    def contains(self, when: datetime | None) -> bool:
        """Check whether a timestamp falls inside the window.

        Records without a timestamp are outside every window.
        """
        if when is None:
            return False
        if self.start is not None and when < self.start:
            return False
        if self.end is not None and when >= self.end:
            return False
        return True


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def trailing_days(days: int, now: datetime | None = None) -> Window:
    """Build the window covering the last `days` days up to now.

    The end bound is left open so records stamped "now" still count.
    """
    if now is None:
        now = utc_now()
    return Window(start=now - timedelta(days=days))


def month_key(when: datetime) -> str:
    """Return the YYYY-MM partition key for a datetime."""
    return f"{when.year:04d}-{when.month:02d}"


def month_from_doc_id(doc_id: str) -> str | None:
    """Extract the YYYY-MM partition from a document id like '2025-11_abc'."""
    match = MONTH_KEY_RE.match(doc_id)
    return match.group(1) if match else None

"""
Timestamp helpers: framework-agnostic.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def epoch_ms(seconds: float) -> int:
    """Convert epoch seconds (as returned by ``time.time()``) to milliseconds."""
    return int(seconds * 1000)


def to_iso_millis(ms: int) -> str:
    """Format epoch milliseconds as ISO 8601 UTC with a ``Z`` suffix.

    >>> to_iso_millis(0)
    '1970-01-01T00:00:00.000Z'
    """
    dt = datetime.fromtimestamp(ms // 1000, tz=timezone.utc) + timedelta(
        milliseconds=ms % 1000
    )
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")

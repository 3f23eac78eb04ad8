"""
Millisecond timestamp helpers shared by the analytics engines.
"""

import time
from datetime import datetime, timezone

MS_PER_HOUR = 3_600_000
MS_PER_DAY = 86_400_000


def now_timestamp() -> int:
    """Wall-clock time in epoch milliseconds. The analyzer's default clock."""
    return time.time_ns() // 1_000_000


def timestamp_to_datetime(ts_ms: int) -> datetime:
    """
    Epoch milliseconds as an aware UTC datetime.

    Example:
        >>> timestamp_to_datetime(1704067200000)
        datetime.datetime(2024, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)
    """
    return datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc)


def day_bucket(ts_ms: int) -> int:
    """UTC calendar day of a ms timestamp, counted from the epoch."""
    return ts_ms // MS_PER_DAY

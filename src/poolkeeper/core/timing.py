"""UTC time helpers.

SQLite drops tzinfo on DateTime columns, so values are stored as naive UTC
and localized again on the way out.
"""

import threading
from datetime import datetime, timedelta

import pytz

UTC = pytz.utc
EPOCH = UTC.localize(datetime(1970, 1, 1))
ONE_MS = timedelta(milliseconds=1)


def now_utc() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    """Convert a datetime to aware UTC. Naive values are assumed to be UTC."""
    if dt.tzinfo is None:
        return UTC.localize(dt)
    return dt.astimezone(UTC)


def to_naive_utc(dt: datetime) -> datetime:
    """Convert a datetime to naive UTC for storage."""
    return to_utc(dt).replace(tzinfo=None)


def to_epoch_ms(dt: datetime) -> int:
    """Milliseconds since the Unix epoch, computed without float rounding."""
    return (to_utc(dt) - EPOCH) // ONE_MS


def from_epoch_ms(ms: int) -> datetime:
    """Aware UTC datetime for a millisecond epoch timestamp."""
    return EPOCH + timedelta(milliseconds=ms)


class MillisecondStamper:
    """
    Issues strictly increasing millisecond timestamps.

    Two stamps taken in the same millisecond are pushed apart by one, so ids
    derived from them stay unique within the process.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_ms = 0

    def stamp(self, now: datetime) -> int:
        with self._lock:
            ms = max(to_epoch_ms(now), self._last_ms + 1)
            self._last_ms = ms
            return ms

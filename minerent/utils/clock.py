"""Injectable clocks, so accrual can be pinned to synthetic instants in tests."""
import threading
from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SystemClock:
    """Wall clock, always timezone-aware UTC."""

    def now(self) -> datetime:
        return utcnow()


class FrozenClock:
    """
    A clock that only moves when told to.
    Naive datetimes are taken as UTC.
    """

    def __init__(self, start: datetime = None):
        self._lock = threading.Lock()
        self._now = _aware(start or utcnow())

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def set(self, when: datetime) -> None:
        with self._lock:
            self._now = _aware(when)

    def advance(self, delta: timedelta = None, **kwargs) -> datetime:
        """Move forward by `delta` or by timedelta(**kwargs); return the new instant."""
        step = delta if delta is not None else timedelta(**kwargs)
        with self._lock:
            self._now = self._now + step
            return self._now


def _aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt

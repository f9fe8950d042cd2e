"""
Monotonic timestamp source.

Record timestamps and event timestamps come from one clock per registry.
The wall clock may step backwards (NTP adjustments); this clock never does.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Callable


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MonotonicClock:
    """
    Non-decreasing UTC clock.

    Example:
        clock = MonotonicClock()
        a = clock.now()
        b = clock.now()
        assert b >= a
    """

    def __init__(self, source: Callable[[], datetime] | None = None) -> None:
        self._source = source or utc_now
        self._last: datetime | None = None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        current = self._source()
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)

        with self._lock:
            if self._last is not None and current < self._last:
                current = self._last
            self._last = current
            return current

    @property
    def last(self) -> datetime | None:
        """Most recent timestamp handed out, if any."""
        return self._last

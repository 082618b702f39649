"""Clock abstraction so test durations can be checked deterministically."""

import time
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol


class Clock(Protocol):
    def monotonic(self) -> float:
        """Seconds on a clock that never goes backwards. Used for durations."""
        ...

    def now(self) -> datetime:
        """Current wall-clock time. Used for task start and end times."""
        ...


class SystemClock:
    """Default clock backed by the time module."""

    def monotonic(self) -> float:
        return time.monotonic()

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock:
    """Clock that only moves when advance() is called.

    Example:
        clock = ManualClock()
        clock.advance(1.5)
        clock.monotonic()  # 1.5
    """

    def __init__(self, start: float = 0.0, epoch: Optional[datetime] = None):
        self._current = start
        self._epoch = epoch or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._start = start

    def monotonic(self) -> float:
        return self._current

    def now(self) -> datetime:
        return self._epoch + timedelta(seconds=self._current - self._start)

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError(f"Cannot advance clock by negative amount: {seconds}")
        self._current += seconds

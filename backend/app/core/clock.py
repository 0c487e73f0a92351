"""Injectable source of the current time."""

from datetime import datetime, timezone
from typing import Protocol


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how the tables store datetimes."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Clock(Protocol):
    """Anything that can tell the current time."""

    def now(self) -> datetime: ...


class SystemClock:
    """Clock backed by the system wall time."""

    def now(self) -> datetime:
        return utcnow()


def get_clock() -> Clock:
    """Dependency that provides the request clock."""
    return SystemClock()

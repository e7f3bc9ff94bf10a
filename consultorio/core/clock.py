"""Injectable source of the current date and time."""

import time
from datetime import date, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the local date/time and a monotonic reading."""

    def now(self) -> datetime: ...

    def monotonic(self) -> float: ...


class SystemClock:
    """Wall clock of the local zone."""

    def now(self) -> datetime:
        return datetime.now()

    def monotonic(self) -> float:
        return time.monotonic()


class FixedClock:
    """Manually driven clock for tests and replays."""

    def __init__(self, current: datetime):
        self._current = current
        self._monotonic = 0.0

    def now(self) -> datetime:
        return self._current

    def monotonic(self) -> float:
        return self._monotonic

    def set(self, current: datetime) -> None:
        self._current = current

    def advance(self, seconds: float) -> None:
        """Move both the wall clock and the monotonic reading forward."""
        self._current += timedelta(seconds=seconds)
        self._monotonic += seconds


def to_iso_date(value: date) -> str:
    """Format a date as ``YYYY-MM-DD``."""
    return value.strftime("%Y-%m-%d")


def today_string(clock: Clock) -> str:
    return to_iso_date(clock.now().date())


def tomorrow_string(clock: Clock) -> str:
    return to_iso_date(clock.now().date() + timedelta(days=1))


def current_time_string(clock: Clock) -> str:
    """Current local time with minute precision, ``HH:MM``."""
    return clock.now().strftime("%H:%M")


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"

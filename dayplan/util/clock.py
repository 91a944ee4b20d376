"""Wall-clock capability.

The engine only reads the time of day when an activity is explicitly started
"now"; everything else is a pure function of the schedule. Code that needs the
time takes a Clock so tests can pin it with FixedClock.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional, Protocol

from .tz import minute_of_day, normalize_tz_name, resolve_tz


class Clock(Protocol):
    def now(self) -> dt.datetime: ...


class SystemClock:
    def __init__(self, tz: Optional[str] = "local") -> None:
        self.tz_name = normalize_tz_name(tz)
        self._tzinfo = resolve_tz(self.tz_name)

    def now(self) -> dt.datetime:
        return dt.datetime.now(tz=self._tzinfo)

    def __repr__(self) -> str:
        return f"SystemClock(tz={self.tz_name!r})"


class FixedClock:
    """Clock pinned to one instant; `set()` moves it."""

    def __init__(self, when: dt.datetime) -> None:
        self._when = when

    def now(self) -> dt.datetime:
        return self._when

    def set(self, when: dt.datetime) -> None:
        self._when = when

    @classmethod
    def at(cls, hhmm: str, day: dt.date = dt.date(2024, 1, 15)) -> "FixedClock":
        hh, mm = (int(p) for p in hhmm.split(":", 1))
        return cls(dt.datetime(day.year, day.month, day.day, hh, mm))

    def __repr__(self) -> str:
        return f"FixedClock({self._when.isoformat()})"


def now_minutes(clock: Clock) -> int:
    return minute_of_day(clock.now())


def today(clock: Clock) -> dt.date:
    return clock.now().date()

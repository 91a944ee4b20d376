# dayplan/model.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import ValidationError
from .util.timeparse import format_hhmm, hhmm_to_minutes, wrap_minutes

DEFAULT_START_MIN = 9 * 60
DEFAULT_DAY_LENGTH_MIN = 7 * 60


@dataclass(frozen=True)
class ActivityFields:
    """Descriptor fields of an activity (what a document stores and a command restores)."""

    name: str
    length: int
    start_abs: int
    fixed: bool
    rigid: bool


@dataclass
class Activity:
    """One scheduled item.

    `name`, `length`, `start_abs`, `fixed` and `rigid` are descriptor fields.
    `frozen`, `frozen_length` and `actual` are derived by Schedule.recompute_durations;
    `start_abs` of a flexible activity is derived by Schedule.recompute_start_times.
    """

    name: str
    length: int
    start_abs: int = DEFAULT_START_MIN
    fixed: bool = False
    rigid: bool = False

    frozen: bool = False
    frozen_length: int = 0
    actual: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("Task name cannot be empty")
        if isinstance(self.length, bool) or not isinstance(self.length, int) or self.length < 0:
            raise ValidationError(f"Length must be a non-negative integer: {self.length!r}")
        self.start_abs = wrap_minutes(self.start_abs)

    @classmethod
    def fixed_at(cls, name: str, start: str, length: int, rigid: bool = False) -> "Activity":
        return cls(name=name, length=length, start_abs=hhmm_to_minutes(start), fixed=True, rigid=rigid)

    @classmethod
    def from_fields(cls, f: ActivityFields) -> "Activity":
        return cls(name=f.name, length=f.length, start_abs=f.start_abs, fixed=f.fixed, rigid=f.rigid)

    def snapshot(self) -> ActivityFields:
        return ActivityFields(
            name=self.name,
            length=self.length,
            start_abs=self.start_abs,
            fixed=self.fixed,
            rigid=self.rigid,
        )

    @property
    def start_str(self) -> str:
        return format_hhmm(self.start_abs)

    @property
    def end_abs(self) -> int:
        # Not wrapped: an activity may run past midnight.
        return self.start_abs + self.actual

    # --- state transitions ---------------------------------------------------

    def anchor(self, start_abs: Optional[int] = None) -> None:
        if start_abs is not None:
            self.start_abs = wrap_minutes(start_abs)
        self.fixed = True

    def unanchor(self) -> None:
        self.fixed = False

    def freeze(self, span: int) -> None:
        span = max(0, int(span))
        self.actual = span
        self.frozen_length = span
        self.frozen = True

    def thaw(self) -> None:
        self.frozen = False
        self.frozen_length = 0

    def assign(self, remaining: int, flex_total: int) -> None:
        """Set `actual` from the rule that governs this activity.

        frozen -> frozen_length; rigid -> length;
        flexible -> floor(length * remaining / flex_total), never below zero.
        """
        if self.frozen:
            self.actual = self.frozen_length
        elif self.rigid:
            self.actual = self.length
        elif flex_total > 0:
            self.actual = max(0, (self.length * remaining) // flex_total)
        else:
            self.actual = self.length


@dataclass(frozen=True)
class ConflictWarning:
    """A fixed anchor that starts before its predecessor does."""

    index: int
    name: str
    start_abs: int
    next_name: str
    next_start_abs: int

    @property
    def message(self) -> str:
        return (
            f"{self.name} (starts {format_hhmm(self.start_abs)}) conflicts with "
            f"{self.next_name} (starts {format_hhmm(self.next_start_abs)})"
        )

    def __str__(self) -> str:
        return self.message


__all__ = [
    "Activity",
    "ActivityFields",
    "ConflictWarning",
    "DEFAULT_DAY_LENGTH_MIN",
    "DEFAULT_START_MIN",
]

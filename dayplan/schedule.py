# dayplan/schedule.py
from __future__ import annotations

from typing import Any, Iterator, List, Optional, Set, Tuple

from .errors import ValidationError
from .model import DEFAULT_DAY_LENGTH_MIN, DEFAULT_START_MIN, Activity, ConflictWarning
from .util.clock import Clock, SystemClock, now_minutes
from .util.timeparse import hhmm_to_minutes, wrap_minutes

EDITABLE_FIELDS = ("name", "length", "start", "rigid", "fixed")

_DerivedState = Tuple[Tuple[int, int, bool], ...]


def parse_yes_no(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in {"yes", "y", "1", "true", "on"}:
        return True
    if s in {"no", "n", "0", "false", "off"}:
        return False
    raise ValidationError(f"Invalid yes/no value: {value!r}. Use Yes/No, Y/N, 1/0, or true/false")


def clean_length(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("Length must be a positive number")
    if isinstance(value, int):
        n = value
    else:
        s = str(value).strip()
        if not s.isdigit():
            raise ValidationError("Length must be a positive number")
        n = int(s)
    if n <= 0:
        raise ValidationError("Length must be a positive number")
    return n


def clean_name(value: Any) -> str:
    name = str(value if value is not None else "").strip()
    if not name:
        raise ValidationError("Task name cannot be empty")
    return name


class Schedule:
    """Ordered activities sharing a day budget of `day_length` minutes.

    Mutation primitives never recompute; call `recompute()` (or the two passes
    in order: durations, then start times) after mutating.
    """

    def __init__(
        self,
        day_length: int = DEFAULT_DAY_LENGTH_MIN,
        *,
        default_start: int = DEFAULT_START_MIN,
        clock: Optional[Clock] = None,
        activities: Optional[List[Activity]] = None,
    ) -> None:
        if isinstance(day_length, bool) or not isinstance(day_length, int) or day_length <= 0:
            raise ValidationError(f"Day length must be a positive number of minutes: {day_length!r}")
        self.day_length = day_length
        self.default_start = wrap_minutes(default_start)
        self.clock: Clock = clock if clock is not None else SystemClock()
        self._acts: List[Activity] = list(activities or [])
        self.ratio = 1.0
        self.warnings: List[ConflictWarning] = []

    # --- read access ---------------------------------------------------------

    def __len__(self) -> int:
        return len(self._acts)

    def __iter__(self) -> Iterator[Activity]:
        return iter(self._acts)

    @property
    def size(self) -> int:
        return len(self._acts)

    @property
    def day_length_hours(self) -> float:
        return self.day_length / 60.0

    def in_range(self, i: int) -> bool:
        return isinstance(i, int) and 0 <= i < len(self._acts)

    def get(self, i: int) -> Activity:
        if not self.in_range(i):
            raise ValidationError(f"Invalid task index: {i} (tasks={len(self._acts)})")
        return self._acts[i]

    def list(self) -> List[Activity]:
        return list(self._acts)

    # --- mutation primitives -------------------------------------------------

    def append(self, act: Activity) -> None:
        self._acts.append(act)

    def insert_at(self, i: int, act: Activity) -> bool:
        if not isinstance(i, int) or i < 0 or i > len(self._acts):
            return False
        self._acts.insert(i, act)
        return True

    def delete_at(self, i: int) -> bool:
        if not self.in_range(i):
            return False
        del self._acts[i]
        return True

    def move(self, src: int, dst: int) -> bool:
        if not self.in_range(src) or not self.in_range(dst) or src == dst:
            return False
        if abs(dst - src) == 1:
            self._acts[src], self._acts[dst] = self._acts[dst], self._acts[src]
            return True
        act = self._acts.pop(src)
        if dst > src:
            dst -= 1
        self._acts.insert(dst, act)
        return True

    def move_up(self, i: int) -> bool:
        return self.move(i, i - 1) if i > 0 else False

    def move_down(self, i: int) -> bool:
        return self.move(i, i + 1)

    def update_field(self, i: int, field: str, value: Any) -> None:
        """Set one descriptor field; raises ValidationError without mutating on bad input.

        An empty `start` makes the activity flexible; any other start anchors it.
        """
        if field not in EDITABLE_FIELDS:
            raise ValidationError(f"Field not editable: {field!r}")
        act = self.get(i)
        if field == "name":
            act.name = clean_name(value)
        elif field == "length":
            act.length = clean_length(value)
        elif field == "start":
            s = "" if value is None else str(value).strip()
            if not s:
                act.unanchor()
            else:
                act.anchor(hhmm_to_minutes(s))
        elif field == "rigid":
            act.rigid = parse_yes_no(value)
        elif parse_yes_no(value):
            act.anchor()
        else:
            act.unanchor()

    def anchor_now(self, i: int) -> None:
        self.get(i).anchor(now_minutes(self.clock))

    def set_day_length(self, minutes: int) -> None:
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
            raise ValidationError(f"Day length must be a positive number of minutes: {minutes!r}")
        self.day_length = minutes

    def clear(self) -> None:
        self._acts.clear()
        self.warnings = []

    # --- recompute -----------------------------------------------------------

    def recompute_durations(self) -> List[ConflictWarning]:
        """Assign every activity's `actual` duration.

        1. freeze: an activity followed by a fixed one gets exactly the gap to it
           (0 and a warning when the anchor lies before it);
        2. rigid lengths and frozen spans are taken off the day budget;
        3. the remainder is shared by the flexible activities in proportion
           to their requested lengths.
        """
        acts = self._acts
        warnings: List[ConflictWarning] = []

        for a in acts:
            a.thaw()

        for i in range(len(acts) - 1):
            cur, nxt = acts[i], acts[i + 1]
            if not nxt.fixed:
                continue
            span = nxt.start_abs - cur.start_abs
            if span < 0:
                warnings.append(
                    ConflictWarning(
                        index=i,
                        name=cur.name,
                        start_abs=cur.start_abs,
                        next_name=nxt.name,
                        next_start_abs=nxt.start_abs,
                    )
                )
                span = 0
            cur.freeze(span)

        rigid_total = 0
        flex_total = 0
        for a in acts:
            if a.frozen:
                rigid_total += a.frozen_length
            elif a.rigid:
                rigid_total += a.length
            else:
                flex_total += a.length

        remaining = self.day_length - rigid_total
        self.ratio = (remaining / flex_total) if flex_total > 0 else 1.0

        for a in acts:
            a.assign(remaining, flex_total)

        return warnings

    def recompute_start_times(self) -> None:
        acts = self._acts
        for i, a in enumerate(acts):
            if a.fixed:
                continue
            if i == 0:
                a.start_abs = self.default_start
            else:
                prev = acts[i - 1]
                a.start_abs = wrap_minutes(prev.start_abs + prev.actual)

    def _derived_state(self) -> _DerivedState:
        return tuple((a.start_abs, a.actual, a.frozen) for a in self._acts)

    def _round(self) -> List[ConflictWarning]:
        warnings = self.recompute_durations()
        self.recompute_start_times()
        return warnings

    def recompute(self) -> List[ConflictWarning]:
        """Run durations then start times until the derived fields settle.

        A round depends only on the flexible start times, which take finitely
        many values, so the rounds end in a fixed point or a cycle. A cycle
        settles on its smallest state.
        """
        warnings = self._round()
        state = self._derived_state()
        seen: Set[_DerivedState] = {state}
        while True:
            warnings = self._round()
            nxt = self._derived_state()
            if nxt == state:
                break
            if nxt in seen:
                cycle = [nxt]
                while True:
                    warnings = self._round()
                    cur = self._derived_state()
                    if cur == nxt:
                        break
                    cycle.append(cur)
                target = min(cycle)
                while self._derived_state() != target:
                    warnings = self._round()
                break
            seen.add(nxt)
            state = nxt
        self.warnings = warnings
        return warnings

    # --- queries -------------------------------------------------------------

    def active_at(self, minute: int) -> Optional[Activity]:
        for a in self._acts:
            if a.start_abs <= minute < a.start_abs + a.actual:
                return a
        return None

    def next_after(self, minute: int) -> Optional[Activity]:
        for a in self._acts:
            if a.start_abs > minute:
                return a
        return None

    def total_actual(self) -> int:
        return sum(a.actual for a in self._acts)

    def __repr__(self) -> str:
        return f"Schedule(day_length={self.day_length}, tasks={len(self._acts)})"


__all__ = [
    "EDITABLE_FIELDS",
    "Schedule",
    "clean_length",
    "clean_name",
    "parse_yes_no",
]

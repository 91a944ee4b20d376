# dayplan/timer.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .commands import COMMAND_OVERHEAD, ScheduleCommand
from .schedule import Schedule
from .util.clock import now_minutes
from .util.timeparse import format_hhmm, wrap_minutes

# Reported bytes per cascade record.
TASK_STATE_SIZE = 40


@dataclass(frozen=True)
class TaskState:
    index: int
    old_start_abs: int
    old_fixed: bool
    new_start_abs: int
    new_fixed: bool


def plan_cascade(schedule: Schedule, index: int, now: int) -> List[TaskState]:
    """Anchor `index` at `now` and re-anchor the fixed activities it now overlaps.

    Walks forward from the target: a fixed activity that starts before the
    running end moves to that end; one that starts at or after it keeps its
    anchor and becomes the new reference. The first flexible activity ends
    the walk.
    """
    acts = schedule.list()
    target = schedule.get(index)
    start = wrap_minutes(now)
    out = [
        TaskState(
            index=index,
            old_start_abs=target.start_abs,
            old_fixed=target.fixed,
            new_start_abs=start,
            new_fixed=True,
        )
    ]

    cursor = wrap_minutes(start + target.length)
    for j in range(index + 1, len(acts)):
        act = acts[j]
        if not act.fixed:
            break
        if act.start_abs >= cursor:
            cursor = wrap_minutes(act.start_abs + act.length)
            continue
        out.append(
            TaskState(
                index=j,
                old_start_abs=act.start_abs,
                old_fixed=True,
                new_start_abs=cursor,
                new_fixed=True,
            )
        )
        cursor = wrap_minutes(cursor + act.length)
    return out


class TimerStart(ScheduleCommand):
    """Anchor an activity at the current minute ("I am starting this now").

    The cascade is computed once, at construction, from the schedule as it is
    then and the current minute (`now`, or the schedule's clock).
    """

    kind = "timer-start"

    def __init__(self, schedule: Schedule, index: int, *, now: Optional[int] = None) -> None:
        minute = wrap_minutes(now if now is not None else now_minutes(schedule.clock))
        records = plan_cascade(schedule, index, minute)
        name = schedule.get(index).name
        desc = f"Started timer for '{name}' at {format_hhmm(minute)}"
        if len(records) > 1:
            desc += f" (updated {len(records) - 1} subsequent tasks)"
        super().__init__(schedule, desc)
        self.index = index
        self.started_at = minute
        self.records = records

    @property
    def cascaded(self) -> int:
        return len(self.records) - 1

    def _apply(self) -> None:
        for r in self.records:
            act = self._activity(r.index)
            act.start_abs = r.new_start_abs
            if r.new_fixed:
                act.anchor()
            else:
                act.unanchor()

    def _revert(self) -> None:
        for r in self.records:
            self._restore_anchor(r.index, r.old_start_abs, r.old_fixed)

    def footprint(self) -> int:
        return COMMAND_OVERHEAD + len(self._description.encode("utf-8")) + TASK_STATE_SIZE * len(self.records)


__all__ = [
    "TASK_STATE_SIZE",
    "TaskState",
    "TimerStart",
    "plan_cascade",
]

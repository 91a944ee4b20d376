"""Undoable edits.

Every mutation the engine accepts is a Command with apply/revert/describe/footprint.
Commands address activities by index and keep copies of the values they
overwrite, never references to Activity objects. A ScheduleCommand re-runs the
schedule recompute after each apply and revert so the derived fields stay
coherent.
"""

from __future__ import annotations

from typing import ClassVar, List, Optional

from .errors import PlannerError, ValidationError
from .model import Activity, ActivityFields
from .schedule import Schedule, clean_length, clean_name
from .util.timeparse import format_hhmm, hhmm_to_minutes

# Reported bytes per command, on top of the strings it captures.
COMMAND_OVERHEAD = 64


def _bytes(s: Optional[str]) -> int:
    return len(s.encode("utf-8")) if s else 0


def _yes_no(v: bool) -> str:
    return "Yes" if v else "No"


def _clean_start(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Invalid HH:MM: {value!r}")
    s = value.strip()
    return hhmm_to_minutes(s) if s else None


class Command:
    kind: ClassVar[str] = ""

    def apply(self) -> None:
        raise NotImplementedError

    def revert(self) -> None:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def footprint(self) -> int:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.describe()!r}>"


class ScheduleCommand(Command):
    def __init__(self, schedule: Schedule, description: str) -> None:
        self.schedule = schedule
        self._description = description
        self.applied = False

    def describe(self) -> str:
        return self._description

    def footprint(self) -> int:
        return COMMAND_OVERHEAD + _bytes(self._description)

    def apply(self) -> None:
        self._apply()
        self.applied = True
        self.schedule.recompute()

    def revert(self) -> None:
        if not self.applied:
            raise PlannerError(f"revert() before apply(): {self._description}")
        self._revert()
        self.applied = False
        self.schedule.recompute()

    def _apply(self) -> None:
        raise NotImplementedError

    def _revert(self) -> None:
        raise NotImplementedError

    def _activity(self, index: int) -> Activity:
        return self.schedule.get(index)

    def _restore_anchor(self, index: int, start_abs: int, fixed: bool) -> None:
        act = self._activity(index)
        act.start_abs = start_abs
        if fixed:
            act.anchor()
        else:
            act.unanchor()


class AddActivity(ScheduleCommand):
    """Add a fixed (with `start`) or flexible activity, at the end or at `index`."""

    kind = "add"

    def __init__(
        self,
        schedule: Schedule,
        name: str,
        length: int,
        *,
        start: Optional[str] = None,
        rigid: bool = False,
        index: Optional[int] = None,
    ) -> None:
        name = clean_name(name)
        self.length = clean_length(length)
        self.start_abs: Optional[int] = _clean_start(start)
        if index is not None and (index < 0 or index > schedule.size):
            raise ValidationError(f"Index out of bounds: {index} (tasks={schedule.size})")
        super().__init__(schedule, f"Add task '{name}'")
        self.name = name
        self.rigid = bool(rigid)
        self.index = index
        self.inserted_at = -1

    def _build(self) -> Activity:
        if self.start_abs is None:
            return Activity(name=self.name, length=self.length, rigid=self.rigid)
        return Activity(name=self.name, length=self.length, start_abs=self.start_abs, fixed=True, rigid=self.rigid)

    def _apply(self) -> None:
        act = self._build()
        if self.index is None:
            self.inserted_at = self.schedule.size
            self.schedule.append(act)
        else:
            if not self.schedule.insert_at(self.index, act):
                raise ValidationError(f"Index out of bounds: {self.index} (tasks={self.schedule.size})")
            self.inserted_at = self.index

    def _revert(self) -> None:
        self.schedule.delete_at(self.inserted_at)

    def footprint(self) -> int:
        return super().footprint() + _bytes(self.name) + (5 if self.start_abs is not None else 0)


class DeleteActivity(ScheduleCommand):
    kind = "delete"

    def __init__(self, schedule: Schedule, index: int) -> None:
        fields = schedule.get(index).snapshot()
        super().__init__(schedule, f"Delete task '{fields.name}'")
        self.index = index
        self.deleted: ActivityFields = fields

    def _apply(self) -> None:
        if not self.schedule.delete_at(self.index):
            raise ValidationError(f"Invalid task index: {self.index} (tasks={self.schedule.size})")

    def _revert(self) -> None:
        self.schedule.insert_at(self.index, Activity.from_fields(self.deleted))

    def footprint(self) -> int:
        return super().footprint() + _bytes(self.deleted.name) + 5


class EditName(ScheduleCommand):
    kind = "edit-name"

    def __init__(self, schedule: Schedule, index: int, new_name: str) -> None:
        old = schedule.get(index).name
        new = clean_name(new_name)
        super().__init__(schedule, f"Changed task name from '{old}' to '{new}'")
        self.index = index
        self.old_name = old
        self.new_name = new

    def _apply(self) -> None:
        self._activity(self.index).name = self.new_name

    def _revert(self) -> None:
        self._activity(self.index).name = self.old_name

    def footprint(self) -> int:
        return super().footprint() + _bytes(self.old_name) + _bytes(self.new_name)


class EditLength(ScheduleCommand):
    kind = "edit-length"

    def __init__(self, schedule: Schedule, index: int, new_length: int) -> None:
        act = schedule.get(index)
        new = clean_length(new_length)
        super().__init__(schedule, f"Changed task '{act.name}' length from {act.length} to {new} minutes")
        self.index = index
        self.old_length = act.length
        self.new_length = new

    def _apply(self) -> None:
        self._activity(self.index).length = self.new_length

    def _revert(self) -> None:
        self._activity(self.index).length = self.old_length


class EditStartTime(ScheduleCommand):
    """Anchor an activity at `new_start`, or make it flexible when `new_start` is empty."""

    kind = "edit-start"

    def __init__(self, schedule: Schedule, index: int, new_start: Optional[str]) -> None:
        act = schedule.get(index)
        new_abs = _clean_start(new_start)
        old_display = act.start_str if act.fixed else "flexible"
        new_display = format_hhmm(new_abs) if new_abs is not None else "flexible"
        super().__init__(
            schedule,
            f"Changed task '{act.name}' start time from {old_display} to {new_display}",
        )
        self.index = index
        self.old_start_abs = act.start_abs
        self.old_fixed = act.fixed
        self.new_start_abs = new_abs

    def _apply(self) -> None:
        act = self._activity(self.index)
        if self.new_start_abs is None:
            act.unanchor()
        else:
            act.anchor(self.new_start_abs)

    def _revert(self) -> None:
        self._restore_anchor(self.index, self.old_start_abs, self.old_fixed)


class ToggleFixed(ScheduleCommand):
    kind = "toggle-fixed"

    def __init__(self, schedule: Schedule, index: int) -> None:
        act = schedule.get(index)
        super().__init__(
            schedule,
            f"Toggled task '{act.name}' fixed status from {_yes_no(act.fixed)} to {_yes_no(not act.fixed)}",
        )
        self.index = index
        self.old_fixed = act.fixed
        self.old_start_abs = act.start_abs

    def _apply(self) -> None:
        act = self._activity(self.index)
        if self.old_fixed:
            act.unanchor()
        else:
            act.anchor()

    def _revert(self) -> None:
        self._restore_anchor(self.index, self.old_start_abs, self.old_fixed)


class ToggleRigid(ScheduleCommand):
    kind = "toggle-rigid"

    def __init__(self, schedule: Schedule, index: int) -> None:
        act = schedule.get(index)
        super().__init__(
            schedule,
            f"Toggled task '{act.name}' rigid status from {_yes_no(act.rigid)} to {_yes_no(not act.rigid)}",
        )
        self.index = index
        self.old_rigid = act.rigid

    def _apply(self) -> None:
        self._activity(self.index).rigid = not self.old_rigid

    def _revert(self) -> None:
        self._activity(self.index).rigid = self.old_rigid


class _Move(ScheduleCommand):
    # Reordering a fixed activity unanchors it; revert puts the anchor back.
    offset: ClassVar[int] = 0
    direction: ClassVar[str] = ""

    def __init__(self, schedule: Schedule, index: int) -> None:
        act = schedule.get(index)
        if not schedule.in_range(index + self.offset):
            raise ValidationError(f"Cannot move task {self.direction}: index {index} (tasks={schedule.size})")
        super().__init__(schedule, f"Moved task '{act.name}' {self.direction}")
        self.index = index
        self.was_fixed = act.fixed
        self.old_start_abs = act.start_abs

    def _apply(self) -> None:
        act = self._activity(self.index)
        if not self.schedule.move(self.index, self.index + self.offset):
            raise ValidationError(f"Cannot move task {self.direction}: index {self.index} (tasks={self.schedule.size})")
        act.unanchor()

    def _revert(self) -> None:
        self.schedule.move(self.index + self.offset, self.index)
        self._restore_anchor(self.index, self.old_start_abs, self.was_fixed)


class MoveUp(_Move):
    kind = "move-up"
    offset = -1
    direction = "up"


class MoveDown(_Move):
    kind = "move-down"
    offset = 1
    direction = "down"


class Group(Command):
    """Several commands undone and redone as one unit."""

    kind = "group"

    def __init__(self, description: str, commands: Optional[List[Command]] = None) -> None:
        self.description = description
        self.commands: List[Command] = list(commands or [])

    def add(self, command: Command) -> None:
        self.commands.append(command)

    def is_empty(self) -> bool:
        return not self.commands

    def __len__(self) -> int:
        return len(self.commands)

    def apply(self) -> None:
        for c in self.commands:
            c.apply()

    def revert(self) -> None:
        for c in reversed(self.commands):
            c.revert()

    def describe(self) -> str:
        if len(self.commands) == 1:
            return self.commands[0].describe()
        if len(self.commands) > 1:
            return f"{self.description} ({len(self.commands)} operations)"
        return self.description

    def footprint(self) -> int:
        return COMMAND_OVERHEAD + _bytes(self.description) + sum(c.footprint() for c in self.commands)


__all__ = [
    "AddActivity",
    "COMMAND_OVERHEAD",
    "Command",
    "DeleteActivity",
    "EditLength",
    "EditName",
    "EditStartTime",
    "Group",
    "MoveDown",
    "MoveUp",
    "ScheduleCommand",
    "ToggleFixed",
    "ToggleRigid",
]

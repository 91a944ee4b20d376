# dayplan/history.py
from __future__ import annotations

from collections import deque
from typing import Deque, Dict, Optional, Type

from .commands import (
    AddActivity,
    Command,
    DeleteActivity,
    EditLength,
    EditName,
    EditStartTime,
    Group,
    MoveDown,
    MoveUp,
    ToggleFixed,
    ToggleRigid,
)
from .timer import TimerStart
from .util.console import obs

MAX_HISTORY = 100
MAX_BYTES = 1024 * 1024

COMMAND_KINDS: Dict[str, Type[Command]] = {
    c.kind: c
    for c in (
        AddActivity,
        DeleteActivity,
        EditName,
        EditLength,
        EditStartTime,
        ToggleFixed,
        ToggleRigid,
        MoveUp,
        MoveDown,
        TimerStart,
        Group,
    )
}


class CommandLog:
    """Undo/redo history with bounded size.

    Limits: at most `max_history` undo entries, and at most `max_bytes` of
    reported footprint across both stacks. The oldest undo entries go first,
    then the oldest redo entries.
    """

    def __init__(self, *, max_history: int = MAX_HISTORY, max_bytes: int = MAX_BYTES) -> None:
        self.max_history = int(max_history)
        self.max_bytes = int(max_bytes)
        self._undo: Deque[Command] = deque()
        self._redo: Deque[Command] = deque()
        self._group: Optional[Group] = None

    # --- state ---------------------------------------------------------------

    @property
    def undo_size(self) -> int:
        return len(self._undo)

    @property
    def redo_size(self) -> int:
        return len(self._redo)

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo_description(self) -> str:
        return self._undo[-1].describe() if self._undo else ""

    def redo_description(self) -> str:
        return self._redo[-1].describe() if self._redo else ""

    def footprint(self) -> int:
        return sum(c.footprint() for c in self._undo) + sum(c.footprint() for c in self._redo)

    def is_grouping(self) -> bool:
        return self._group is not None

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
        self._group = None

    # --- operations ----------------------------------------------------------

    def submit(self, command: Command) -> Command:
        """Apply `command` and record it. Errors from apply() propagate; nothing is recorded."""
        command.apply()
        if self._group is not None:
            self._group.add(command)
            return command
        self._push(command)
        obs("dayplan.history", "submit", kind=command.kind, undo=len(self._undo))
        return command

    def undo(self) -> Optional[Command]:
        if self._group is not None:
            self.end_group()
        if not self._undo:
            return None
        command = self._undo.pop()
        command.revert()
        self._redo.append(command)
        obs("dayplan.history", "undo", kind=command.kind, undo=len(self._undo), redo=len(self._redo))
        return command

    def redo(self) -> Optional[Command]:
        if self._group is not None:
            self.end_group()
        if not self._redo:
            return None
        command = self._redo.pop()
        command.apply()
        self._undo.append(command)
        obs("dayplan.history", "redo", kind=command.kind, undo=len(self._undo), redo=len(self._redo))
        return command

    def begin_group(self, description: str) -> None:
        if self._group is not None and not self._group.is_empty():
            self.end_group()
        self._group = Group(description)

    def end_group(self) -> Optional[Group]:
        group, self._group = self._group, None
        if group is None or group.is_empty():
            return None
        self._push(group)
        obs("dayplan.history", "group", size=len(group), undo=len(self._undo))
        return group

    def _push(self, command: Command) -> None:
        self._redo.clear()
        self._undo.append(command)
        self._enforce_limits()

    def _enforce_limits(self) -> None:
        total = self.footprint()
        while self._undo and (len(self._undo) > self.max_history or total > self.max_bytes):
            total -= self._undo.popleft().footprint()
        while self._redo and total > self.max_bytes:
            total -= self._redo.popleft().footprint()


__all__ = [
    "COMMAND_KINDS",
    "CommandLog",
    "MAX_BYTES",
    "MAX_HISTORY",
]

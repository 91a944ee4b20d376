"""dayplan.api

Stable *library* entrypoint for dayplan.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from dayplan.commands import (
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
from dayplan.config import Config, load_config
from dayplan.errors import DocumentFormatError, DocumentIOError, PlannerError, ValidationError
from dayplan.history import COMMAND_KINDS, CommandLog
from dayplan.model import Activity, ConflictWarning
from dayplan.schedule import Schedule
from dayplan.store import LoadResult, load_schedule, save_schedule
from dayplan.timer import TaskState, TimerStart
from dayplan.util.clock import Clock, FixedClock, SystemClock

JsonPath = Union[str, Path]


def new_schedule(
    day_length: Optional[int] = None,
    *,
    config: Optional[Config] = None,
    clock: Optional[Clock] = None,
) -> Schedule:
    """Empty, recomputed schedule; day length and default start come from `config` when given."""
    cfg = config if config is not None else Config()
    minutes = int(day_length) if day_length is not None else cfg.day_length_minutes
    schedule = Schedule(minutes, default_start=cfg.default_start_min, clock=clock)
    schedule.recompute()
    return schedule


def open_schedule(path: JsonPath, *, config: Optional[Config] = None, clock: Optional[Clock] = None) -> Schedule:
    """Load a document, or start an empty schedule when it does not exist."""
    cfg = config if config is not None else Config()
    p = Path(path)
    if not p.exists():
        return new_schedule(config=cfg, clock=clock)
    return load_schedule(p, default_start=cfg.default_start_min, clock=clock).schedule


# --- Public API exports (locked by contract tests) ------------------------
# Keep changes intentional and reviewable.
# Prefer append-only unless you are intentionally reshaping the public surface.
_PUBLIC_EXPORTS = (
    "Activity",
    "AddActivity",
    "COMMAND_KINDS",
    "Clock",
    "Command",
    "CommandLog",
    "Config",
    "ConflictWarning",
    "DeleteActivity",
    "DocumentFormatError",
    "DocumentIOError",
    "EditLength",
    "EditName",
    "EditStartTime",
    "FixedClock",
    "Group",
    "LoadResult",
    "MoveDown",
    "MoveUp",
    "PlannerError",
    "Schedule",
    "SystemClock",
    "TaskState",
    "TimerStart",
    "ToggleFixed",
    "ToggleRigid",
    "ValidationError",
    "load_config",
    "load_schedule",
    "new_schedule",
    "open_schedule",
    "save_schedule",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------

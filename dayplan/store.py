"""Schedule documents on disk.

Document format (JSON, 2-space indent):

    { "date": "YYYY-MM-DD",
      "dayLength": <int minutes>,
      "tasks": [ {"name": str, "startTime": "HH:MM", "length": int,
                  "rigid": bool, "fixed": bool}, ... ] }

`startTime` is only required for fixed tasks. Unknown keys are ignored and a
malformed task is skipped with a warning; a malformed document is rejected as a
whole.
"""

from __future__ import annotations

import datetime as dt
import json
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .errors import DocumentFormatError, DocumentIOError, ValidationError
from .model import DEFAULT_START_MIN, Activity
from .schedule import Schedule
from .util.clock import Clock, today
from .util.console import obs
from .util.timeparse import hhmm_to_minutes

try:
    import orjson  # type: ignore
except Exception:  # pragma: no cover
    orjson = None  # type: ignore

PathLike = Union[str, Path]

DEFAULT_EXTENSION = ".json"
DATED_PREFIX = "tasks_"


@dataclass
class LoadResult:
    schedule: Schedule
    date: Optional[str] = None
    warnings: List[str] = field(default_factory=list)


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def dumps_document(doc: Dict[str, Any]) -> str:
    if orjson is not None:
        return orjson.dumps(doc, option=orjson.OPT_INDENT_2).decode("utf-8")
    return json.dumps(doc, indent=2, ensure_ascii=False)


def schedule_to_document(schedule: Schedule, *, date: Optional[str] = None) -> Dict[str, Any]:
    if date is None:
        date = today(schedule.clock).isoformat()
    return {
        "date": date,
        "dayLength": schedule.day_length,
        "tasks": [
            {
                "name": a.name,
                "startTime": a.start_str,
                "length": a.length,
                "rigid": a.rigid,
                "fixed": a.fixed,
            }
            for a in schedule
        ],
    }


def _task_from_dict(raw: Any, i: int, label: str) -> Activity:
    if not isinstance(raw, dict):
        raise ValueError(f"{label}: tasks[{i}] must be an object")
    for k in ("name", "length", "rigid", "fixed"):
        if k not in raw:
            raise ValueError(f"{label}: tasks[{i}] missing key: {k}")
    name = raw["name"]
    length = raw["length"]
    rigid = raw["rigid"]
    fixed = raw["fixed"]
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"{label}: tasks[{i}].name must be non-empty string")
    if not _is_int(length) or length < 0:
        raise ValueError(f"{label}: tasks[{i}].length must be a non-negative int")
    if not isinstance(rigid, bool) or not isinstance(fixed, bool):
        raise ValueError(f"{label}: tasks[{i}].rigid/fixed must be bool")
    if not fixed:
        return Activity(name=name, length=length, rigid=rigid)
    start = raw.get("startTime")
    if not isinstance(start, str):
        raise ValueError(f"{label}: tasks[{i}].startTime required for a fixed task")
    try:
        start_abs = hhmm_to_minutes(start)
    except ValidationError as ex:
        raise ValueError(f"{label}: tasks[{i}].startTime {ex}") from ex
    return Activity(name=name, length=length, start_abs=start_abs, fixed=True, rigid=rigid)


def schedule_from_document(
    doc: Any,
    *,
    default_start: int = DEFAULT_START_MIN,
    clock: Optional[Clock] = None,
    label: str = "document",
) -> LoadResult:
    """Build a recomputed Schedule from a parsed document.

    Raises DocumentFormatError when `dayLength`/`tasks` are missing or mistyped.
    """
    if not isinstance(doc, dict):
        raise DocumentFormatError(f"{label}: document must be a JSON object")
    if "dayLength" not in doc or "tasks" not in doc:
        raise DocumentFormatError(f"{label}: document requires 'dayLength' and 'tasks'")
    day_length = doc["dayLength"]
    tasks = doc["tasks"]
    if not _is_int(day_length) or day_length <= 0:
        raise DocumentFormatError(f"{label}: dayLength must be a positive int")
    if not isinstance(tasks, list):
        raise DocumentFormatError(f"{label}: tasks must be a list")

    schedule = Schedule(day_length, default_start=default_start, clock=clock)
    warnings: List[str] = []
    for i, raw in enumerate(tasks):
        try:
            schedule.append(_task_from_dict(raw, i, label))
        except ValueError as ex:
            warnings.append(f"Skipping invalid task: {ex}")

    date = doc.get("date") if isinstance(doc.get("date"), str) else None
    schedule.recompute()
    return LoadResult(schedule=schedule, date=date, warnings=warnings)


def load_schedule(
    path: PathLike,
    *,
    default_start: int = DEFAULT_START_MIN,
    clock: Optional[Clock] = None,
) -> LoadResult:
    p = Path(path)
    t0 = time.monotonic()
    try:
        text = p.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError as ex:
        raise DocumentIOError(f"Data file not found: {p}") from ex
    except OSError as ex:
        raise DocumentIOError(f"Could not read {p}: {ex}") from ex
    try:
        doc = json.loads(text)
    except ValueError as ex:
        raise DocumentFormatError(f"{p}: invalid JSON ({ex})") from ex

    res = schedule_from_document(doc, default_start=default_start, clock=clock, label=str(p))
    elapsed_ms = int((time.monotonic() - t0) * 1000)
    obs("dayplan.store", "load.ok", ms=elapsed_ms, tasks=res.schedule.size, skipped=len(res.warnings))
    return res


def save_schedule(schedule: Schedule, path: PathLike, *, date: Optional[str] = None) -> Path:
    p = Path(path)
    text = dumps_document(schedule_to_document(schedule, date=date)) + "\n"
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
    except OSError as ex:
        raise DocumentIOError(f"Error saving to file {p}: {ex}") from ex
    obs("dayplan.store", "save.ok", path=p, tasks=schedule.size)
    return p


# --- naming and discovery --------------------------------------------------------


def _with_extension(name: str, ext: str) -> str:
    return name if name.endswith(ext) else name + ext


def dated_document_path(data_dir: PathLike, date: Union[str, dt.date], ext: str = DEFAULT_EXTENSION) -> Path:
    day = date.isoformat() if isinstance(date, dt.date) else str(date)
    return Path(data_dir) / f"{DATED_PREFIX}{day}{ext}"


def named_document_path(data_dir: PathLike, name: str, ext: str = DEFAULT_EXTENSION) -> Path:
    """Resolve a document name; bare names live under `data_dir`, paths are kept as given."""
    p = Path(_with_extension(name, ext))
    if p.is_absolute() or len(p.parts) > 1:
        return p
    return Path(data_dir) / p


def is_valid_document(path: PathLike) -> bool:
    try:
        doc = json.loads(Path(path).read_text(encoding="utf-8", errors="replace"))
    except (OSError, ValueError):
        return False
    return isinstance(doc, dict) and "dayLength" in doc and isinstance(doc.get("tasks"), list)


def find_documents(data_dir: PathLike, ext: str = DEFAULT_EXTENSION) -> List[Path]:
    """Valid schedule documents in `data_dir`, newest first."""
    root = Path(data_dir)
    if not root.is_dir():
        return []
    found = [p for p in root.iterdir() if p.is_file() and p.name.endswith(ext) and is_valid_document(p)]
    found.sort(key=lambda p: (os.path.getmtime(p), p.name), reverse=True)
    return found


__all__ = [
    "DATED_PREFIX",
    "DEFAULT_EXTENSION",
    "LoadResult",
    "dated_document_path",
    "dumps_document",
    "find_documents",
    "is_valid_document",
    "load_schedule",
    "named_document_path",
    "save_schedule",
    "schedule_from_document",
    "schedule_to_document",
]

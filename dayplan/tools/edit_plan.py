#!/usr/bin/env python3
"""Apply a list of edits to a schedule document through the undo log.

OPS is a JSON list; each entry names an op and its arguments (indices are
0-based):

  {"op": "add", "name": "Lunch", "length": 30, "start": "12:30", "rigid": false, "index": 2}
  {"op": "delete", "index": 0}
  {"op": "rename", "index": 0, "name": "Deep work"}
  {"op": "length", "index": 0, "length": 90}
  {"op": "start", "index": 1, "start": "14:00"}      ("" or null: make flexible)
  {"op": "toggle-fixed" | "toggle-rigid" | "move-up" | "move-down", "index": 1}
  {"op": "start-timer", "index": 1, "at": "10:15"}   ("at" defaults to now)
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List

from dayplan.commands import (
    AddActivity,
    Command,
    DeleteActivity,
    EditLength,
    EditName,
    EditStartTime,
    MoveDown,
    MoveUp,
    ToggleFixed,
    ToggleRigid,
)
from dayplan.errors import PlannerError
from dayplan.history import CommandLog
from dayplan.schedule import Schedule, parse_yes_no
from dayplan.store import load_schedule, save_schedule
from dayplan.timer import TimerStart
from dayplan.util.clock import SystemClock
from dayplan.util.timeparse import hhmm_to_minutes


def _die(msg: str, rc: int = 2) -> int:
    print(f"[dayplan-edit] ERROR: {msg}", file=sys.stderr)
    return rc


def _load_ops(path: Path) -> List[Dict[str, Any]]:
    obj = json.loads(path.read_text(encoding="utf-8", errors="replace"))
    if not isinstance(obj, list):
        raise ValueError("ops must be a JSON list")
    for i, op in enumerate(obj):
        if not isinstance(op, dict) or not isinstance(op.get("op"), str):
            raise ValueError(f"ops[{i}] must be an object with a string 'op'")
    return obj


def _index(op: Dict[str, Any]) -> int:
    i = op.get("index")
    if not isinstance(i, int) or isinstance(i, bool):
        raise ValueError(f"'{op['op']}' needs an integer 'index'")
    return i


def _add(s: Schedule, op: Dict[str, Any]) -> Command:
    idx = op.get("index")
    return AddActivity(
        s,
        op.get("name", ""),
        op.get("length", 0),
        start=op.get("start"),
        rigid=parse_yes_no(op.get("rigid", False)),
        index=idx if isinstance(idx, int) and not isinstance(idx, bool) else None,
    )


def _start_timer(s: Schedule, op: Dict[str, Any]) -> Command:
    at = op.get("at")
    now = hhmm_to_minutes(at) if isinstance(at, str) and at.strip() else None
    return TimerStart(s, _index(op), now=now)


_BUILDERS: Dict[str, Callable[[Schedule, Dict[str, Any]], Command]] = {
    "add": _add,
    "delete": lambda s, op: DeleteActivity(s, _index(op)),
    "rename": lambda s, op: EditName(s, _index(op), op.get("name", "")),
    "length": lambda s, op: EditLength(s, _index(op), op.get("length", 0)),
    "start": lambda s, op: EditStartTime(s, _index(op), op.get("start")),
    "toggle-fixed": lambda s, op: ToggleFixed(s, _index(op)),
    "toggle-rigid": lambda s, op: ToggleRigid(s, _index(op)),
    "move-up": lambda s, op: MoveUp(s, _index(op)),
    "move-down": lambda s, op: MoveDown(s, _index(op)),
    "start-timer": _start_timer,
}


def build_command(schedule: Schedule, op: Dict[str, Any]) -> Command:
    name = str(op.get("op") or "").strip().lower()
    builder = _BUILDERS.get(name)
    if builder is None:
        raise ValueError(f"Unknown op: {name}")
    return builder(schedule, op)


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="dayplan-edit",
        description="Apply scripted edits to a schedule document.",
    )
    ap.add_argument("--in", dest="in_json", required=True, help="Input schedule document")
    ap.add_argument("--ops", default=None, help="JSON file with a list of edit ops")
    ap.add_argument("--out", default=None, help="Write the result here (default: overwrite --in)")
    ap.add_argument("--undo", type=int, default=0, help="Undo the last N history entries after applying ops")
    ap.add_argument("--group", default=None, help="Record all ops as one undo entry with this description")
    ap.add_argument(
        "--tz",
        default=os.getenv("DAYPLAN_TZ", "local"),
        help="Timezone for start-timer without 'at' (default: env DAYPLAN_TZ or 'local')",
    )
    ns = ap.parse_args(argv)

    if ns.undo < 0:
        return _die("--undo must be >= 0")

    in_path = Path(ns.in_json)
    if not in_path.exists():
        return _die(f"Missing input document: {in_path}")

    try:
        clock = SystemClock(ns.tz)
    except ValueError as e:
        return _die(f"Invalid --tz value: {e}")

    try:
        res = load_schedule(in_path, clock=clock)
    except PlannerError as e:
        return _die(f"Failed to load document: {e}")
    schedule = res.schedule
    for w in res.warnings:
        print(f"Warning: {w}", file=sys.stderr)

    ops: List[Dict[str, Any]] = []
    if ns.ops:
        try:
            ops = _load_ops(Path(ns.ops))
        except Exception as e:
            return _die(f"Failed to load ops: {e}")

    log = CommandLog()
    if ns.group:
        log.begin_group(ns.group)
    for i, op in enumerate(ops):
        try:
            cmd = log.submit(build_command(schedule, op))
        except (PlannerError, ValueError) as e:
            return _die(f"ops[{i}] ({op.get('op')}): {e}")
        print(cmd.describe())
    if ns.group:
        group = log.end_group()
        if group is not None:
            print(f"Grouped: {group.describe()}")

    for _ in range(ns.undo):
        cmd = log.undo()
        if cmd is None:
            break
        print(f"Undo: {cmd.describe()}")

    for w in schedule.warnings:
        print(f"Warning: {w}", file=sys.stderr)

    out_path = Path(ns.out) if ns.out else in_path
    try:
        save_schedule(schedule, out_path, date=res.date)
    except PlannerError as e:
        return _die(str(e))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

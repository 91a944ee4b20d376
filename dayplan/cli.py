from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import List, Optional, Tuple

from .config import Config, load_config, read_session, write_session, DEFAULT_SESSION_PATH
from .errors import DocumentFormatError, DocumentIOError, ValidationError
from .schedule import Schedule
from .store import dated_document_path, find_documents, load_schedule, named_document_path
from .util.clock import Clock, FixedClock, SystemClock, now_minutes, today
from .util.console import eprint
from .util.timeparse import format_hhmm, looks_like_date, parse_date_yyyy_mm_dd, parse_hhmm

COMMANDS = ("now", "next", "list", "files", "help")
HELP_WORDS = ("help", "--help", "-h")

USAGE = """\
Usage: dayplan [command] [date|name]
       dayplan [date|name]          - List the schedule in a document

Commands:
  now    - Show current active task
  next   - Show next upcoming task
  list   - Show all tasks for the day (default)
  files  - Show schedule documents in the data directory
  help   - Show this message

Documents:
  dayplan 2024-01-15          - data-dir/tasks_2024-01-15.json
  dayplan now 2024-01-15      - current task in that document
  dayplan list work           - data-dir/work.json
  (no args)                   - last opened document, else today's

Options:
  --config PATH        settings file (default: env DAYPLAN_CONFIG or plan.conf)
  --session-file PATH  last-opened-document file (default: .task_session)
  --data-dir DIR       override the data-dir setting
  --tz NAME            timezone for "now" and "today" (default: env DAYPLAN_TZ or 'local')
  --at HH:MM           use this time of day as the current time
"""


def _die(msg: str, rc: int = 2) -> int:
    eprint(f"[dayplan] ERROR: {msg}")
    return rc


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="dayplan", add_help=False, usage=argparse.SUPPRESS)
    ap.add_argument("words", nargs="*")
    ap.add_argument("-h", "--help", action="store_true", dest="help")
    ap.add_argument("--config", default=None)
    ap.add_argument("--session-file", default=DEFAULT_SESSION_PATH)
    ap.add_argument("--data-dir", default=None)
    ap.add_argument("--tz", default=os.getenv("DAYPLAN_TZ", "local"))
    ap.add_argument("--at", default=None)
    return ap


def _make_clock(tz: str, at: Optional[str]) -> Clock:
    clock = SystemClock(tz)
    if not at:
        return clock
    hh, mm = parse_hhmm(at)
    return FixedClock(clock.now().replace(hour=hh, minute=mm, second=0, microsecond=0))


def _resolve_document(
    words: List[str], cfg: Config, data_dir: Path, clock: Clock, session_file: str
) -> Tuple[str, Path]:
    """Pick the command and document for the positional words.

    Raises ValueError("Unknown command: X") when two words are given and the
    first is not a command.
    """
    ext = cfg.file_extension

    def _doc(word: str) -> Path:
        if looks_like_date(word):
            try:
                parse_date_yyyy_mm_dd(word)
            except ValueError:
                raise ValueError(f"Invalid date: {word}") from None
            return dated_document_path(data_dir, word, ext)
        return named_document_path(data_dir, word, ext)

    if not words:
        last = read_session(session_file)
        if last and Path(last).exists():
            return "list", Path(last)
        return "list", dated_document_path(data_dir, today(clock), ext)

    if len(words) == 1:
        w = words[0]
        if w in COMMANDS:
            return w, dated_document_path(data_dir, today(clock), ext)
        return "list", _doc(w)

    if words[0] not in COMMANDS:
        raise ValueError(f"Unknown command: {words[0]}")
    if len(words) > 2:
        raise ValueError(f"Too many arguments: {' '.join(words[2:])}")
    return words[0], _doc(words[1])


def _load(path: Path, cfg: Config, clock: Clock) -> Schedule:
    if not path.exists():
        schedule = Schedule(cfg.day_length_minutes, default_start=cfg.default_start_min, clock=clock)
        schedule.recompute()
        return schedule
    res = load_schedule(path, default_start=cfg.default_start_min, clock=clock)
    if cfg.show_warnings:
        for w in res.warnings:
            eprint(f"Warning: {w}")
    return res.schedule


def describe_now(schedule: Schedule, minute: int) -> str:
    act = schedule.active_at(minute)
    if act is None:
        return f"No active task at current time ({format_hhmm(minute)})"
    end = act.end_abs
    return f"{act.name} (ends at {format_hhmm(end)}, {end - minute} min remaining)"


def describe_next(schedule: Schedule, minute: int) -> str:
    act = schedule.next_after(minute)
    if act is None:
        return "No upcoming tasks today"
    return f"{act.name} (starts at {act.start_str}, in {act.start_abs - minute} minutes)"


def render_list(schedule: Schedule) -> str:
    lines = ["Today's Tasks:", "============="]
    for i, a in enumerate(schedule, start=1):
        status = "[FIXED]" if a.fixed else "[FLEX]"
        lines.append(f"{i}. {a.name} {status} ({a.start_str} - {format_hhmm(a.end_abs)}, {a.actual} min)")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    ns = _build_parser().parse_args(argv)

    if ns.help or (ns.words and ns.words[0] in HELP_WORDS):
        print(USAGE, end="")
        return 0

    try:
        cfg = load_config(ns.config)
    except DocumentIOError as e:
        return _die(str(e))
    if cfg.show_warnings:
        for w in cfg.warnings:
            eprint(f"Warning: {w}")

    try:
        clock = _make_clock(ns.tz, ns.at)
    except ValidationError as e:
        return _die(f"Invalid --at value: {e}")
    except ValueError as e:
        return _die(f"Invalid --tz value: {e}")

    data_dir = Path(ns.data_dir) if ns.data_dir else cfg.data_dir

    try:
        command, path = _resolve_document(ns.words, cfg, data_dir, clock, ns.session_file)
    except ValueError as e:
        eprint(str(e))
        eprint(USAGE.rstrip("\n"))
        return 1

    if command == "files":
        docs = find_documents(data_dir, cfg.file_extension)
        if not docs:
            print(f"No schedule files found in {data_dir}")
            return 0
        for p in docs:
            print(p)
        return 0

    try:
        schedule = _load(path, cfg, clock)
    except (DocumentIOError, DocumentFormatError) as e:
        return _die(str(e))

    if path.exists():
        if cfg.status_messages:
            eprint(f"Loaded {path}")
        try:
            write_session(ns.session_file, path)
        except DocumentIOError as e:
            eprint(f"Warning: {e}")

    if cfg.show_warnings:
        for w in schedule.warnings:
            eprint(f"Warning: {w}")

    minute = now_minutes(clock)
    if command == "now":
        print(describe_now(schedule, minute))
    elif command == "next":
        print(describe_next(schedule, minute))
    else:
        print(render_list(schedule))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

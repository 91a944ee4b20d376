# dayplan/util/timeparse.py
from __future__ import annotations

import datetime as dt
import re
from typing import Tuple

from ..errors import ValidationError

MINUTES_PER_DAY = 1440

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_hhmm(s: str) -> Tuple[int, int]:
    m = _HHMM_RE.match(str(s).strip())
    if not m:
        raise ValidationError(f"Invalid HH:MM: {s!r}")
    hh = int(m.group(1))
    mm = int(m.group(2))
    if not (0 <= hh <= 23 and 0 <= mm <= 59):
        raise ValidationError(f"Invalid HH:MM: {s!r}")
    return hh, mm


def hhmm_to_minutes(s: str) -> int:
    hh, mm = parse_hhmm(s)
    return hh * 60 + mm


def wrap_minutes(v: int) -> int:
    """Fold any minute count onto the clock face (0..1439), negatives included."""
    return ((int(v) % MINUTES_PER_DAY) + MINUTES_PER_DAY) % MINUTES_PER_DAY


def format_hhmm(minutes: int) -> str:
    m = wrap_minutes(minutes)
    return f"{m // 60:02d}:{m % 60:02d}"


def looks_like_date(s: str) -> bool:
    return bool(_DATE_RE.match(str(s).strip()))


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    return dt.datetime.strptime(s, "%Y-%m-%d").date()

# dayplan/util/console.py
from __future__ import annotations

import os
import sys
from typing import Any


def eprint(*args: Any) -> None:
    print(*args, file=sys.stderr)


def obs_enabled() -> bool:
    v = (os.getenv("DAYPLAN_OBS_LOG", "") or "").strip().lower()
    return v in {"1", "true", "yes", "on"}


def obs(source: str, event: str, **fields: Any) -> None:
    """Emit one `[source] event k=v ...` line on stderr when DAYPLAN_OBS_LOG is set."""
    if not obs_enabled():
        return
    tail = " ".join(f"{k}={v}" for k, v in fields.items())
    eprint(f"[{source}] {event}" + (f" {tail}" if tail else ""))

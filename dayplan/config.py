"""plan.conf settings and the session-state file.

Format: one `key: value` per line; lines starting with `#` or `;` are
comments; blank lines are skipped; keys and values are whitespace-trimmed.
A line without a colon is reported in `Config.warnings` and otherwise ignored.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .errors import DocumentIOError, ValidationError
from .model import DEFAULT_START_MIN
from .util.console import obs
from .util.timeparse import hhmm_to_minutes

PathLike = Union[str, Path]

DEFAULT_CONFIG_PATH = "plan.conf"
DEFAULT_SESSION_PATH = ".task_session"

DEFAULTS: Dict[str, str] = {
    "data-dir": "data",
    "default-day-length": "7.0",
    "date-format": "YYYY-MM-DD",
    "auto-save": "true",
    "show-warnings": "true",
    "default-start-time": "09:00",
    "time-format": "24h",
    "file-extension": ".json",
    "backup-enabled": "false",
    "max-backup-files": "5",
    "table-width": "full",
    "status-messages": "true",
}

# Section title -> keys, in the order save() writes them.
_LAYOUT: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Core Settings", ("data-dir", "default-day-length", "date-format")),
    ("UI and Behavior", ("auto-save", "show-warnings", "default-start-time", "time-format")),
    ("File Settings", ("file-extension", "backup-enabled", "max-backup-files")),
    ("Display Settings", ("table-width", "status-messages")),
)

_TRUE = {"true", "yes", "1", "on"}


def config_path_from_env() -> str:
    return (os.getenv("DAYPLAN_CONFIG", "") or "").strip() or DEFAULT_CONFIG_PATH


class Config:
    """Settings map with typed getters; every key starts at its default."""

    def __init__(self, path: PathLike = DEFAULT_CONFIG_PATH) -> None:
        self.path = Path(path)
        self.loaded = False
        self.warnings: List[str] = []
        self._settings: Dict[str, str] = dict(DEFAULTS)

    # --- raw access ----------------------------------------------------------

    def get_str(self, key: str, default: str = "") -> str:
        return self._settings.get(key, default)

    def get_int(self, key: str, default: int = 0) -> int:
        raw = self._settings.get(key)
        if raw is None:
            return default
        try:
            return int(raw.strip())
        except ValueError:
            self.warnings.append(f"Invalid integer value for {key}: {raw}")
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        raw = self._settings.get(key)
        if raw is None:
            return default
        try:
            return float(raw.strip())
        except ValueError:
            self.warnings.append(f"Invalid number value for {key}: {raw}")
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        raw = self._settings.get(key)
        if raw is None:
            return default
        return raw.strip().lower() in _TRUE

    def set(self, key: str, value: Union[str, int, float, bool]) -> None:
        if isinstance(value, bool):
            self._settings[key] = "true" if value else "false"
        else:
            self._settings[key] = str(value)

    def has(self, key: str) -> bool:
        return key in self._settings

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(sorted(self._settings.items()))

    # --- derived settings ----------------------------------------------------

    @property
    def data_dir(self) -> Path:
        return Path(self.get_str("data-dir", DEFAULTS["data-dir"]) or DEFAULTS["data-dir"])

    @property
    def day_length_minutes(self) -> int:
        """`default-day-length` (hours) in whole minutes; non-positive values fall back to 7h."""
        minutes = int(self.get_float("default-day-length", 7.0) * 60)
        return minutes if minutes > 0 else 7 * 60

    @property
    def default_start_min(self) -> int:
        raw = self.get_str("default-start-time", DEFAULTS["default-start-time"])
        try:
            return hhmm_to_minutes(raw)
        except ValidationError:
            self.warnings.append(f"Invalid default-start-time: {raw}")
            return DEFAULT_START_MIN

    @property
    def file_extension(self) -> str:
        ext = self.get_str("file-extension", DEFAULTS["file-extension"]).strip() or DEFAULTS["file-extension"]
        return ext if ext.startswith(".") else "." + ext

    @property
    def auto_save(self) -> bool:
        return self.get_bool("auto-save", True)

    @property
    def status_messages(self) -> bool:
        return self.get_bool("status-messages", True)

    @property
    def show_warnings(self) -> bool:
        return self.get_bool("show-warnings", True)

    # --- file I/O ------------------------------------------------------------

    def parse(self, text: str) -> None:
        for lineno, line in enumerate(text.splitlines(), start=1):
            s = line.strip()
            if not s or s[0] in "#;":
                continue
            key, sep, value = s.partition(":")
            if not sep:
                self.warnings.append(f"Invalid config line {lineno}: {line}")
                continue
            key = key.strip()
            if key:
                self._settings[key] = value.strip()

    def render(self) -> str:
        lines = [
            "# dayplan configuration",
            "# Format: key: value",
            "# Lines starting with # or ; are comments",
            "",
        ]
        for title, keys in _LAYOUT:
            lines.append(f"# {title}")
            for k in keys:
                lines.append(f"{k}: {self.get_str(k, DEFAULTS[k])}")
            lines.append("")
        return "\n".join(lines)

    def save(self, path: Optional[PathLike] = None) -> Path:
        p = Path(path) if path is not None else self.path
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(self.render(), encoding="utf-8")
        except OSError as ex:
            raise DocumentIOError(f"Could not open config file for writing: {p} ({ex})") from ex
        return p


def load_config(path: Optional[PathLike] = None) -> Config:
    """Read `path` (default: $DAYPLAN_CONFIG or plan.conf). A missing file gives defaults."""
    cfg = Config(path if path is not None else config_path_from_env())
    try:
        text = cfg.path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        obs("dayplan.config", "load.defaults", path=cfg.path)
        return cfg
    except OSError as ex:
        raise DocumentIOError(f"Could not read config file {cfg.path}: {ex}") from ex
    cfg.parse(text)
    cfg.loaded = True
    obs("dayplan.config", "load.ok", path=cfg.path, warnings=len(cfg.warnings))
    return cfg


def write_default_config(path: PathLike = DEFAULT_CONFIG_PATH) -> bool:
    """Create a config file with the default settings; False if one already exists."""
    p = Path(path)
    if p.exists():
        return False
    Config(p).save()
    return True


# --- session state -------------------------------------------------------------


def read_session(path: PathLike = DEFAULT_SESSION_PATH) -> Optional[str]:
    """Last opened document recorded in the session file, or None."""
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    lines = text.splitlines()
    first = lines[0].strip() if lines else ""
    return first or None


def write_session(path: PathLike, document: PathLike) -> None:
    p = Path(path)
    try:
        p.write_text(f"{document}\n", encoding="utf-8")
    except OSError as ex:
        raise DocumentIOError(f"Could not write session file {p}: {ex}") from ex


__all__ = [
    "Config",
    "DEFAULTS",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_SESSION_PATH",
    "config_path_from_env",
    "load_config",
    "read_session",
    "write_default_config",
    "write_session",
]

"""Error kinds raised by the planner engine and its I/O boundary."""

from __future__ import annotations


class PlannerError(Exception):
    """Base class for dayplan errors."""


class ValidationError(PlannerError, ValueError):
    """Rejected input: malformed time, non-positive length, empty name, bad index.

    Raised before anything is mutated.
    """


class DocumentIOError(PlannerError, OSError):
    """A schedule document could not be read or written."""


class DocumentFormatError(PlannerError, ValueError):
    """A schedule document is missing required keys or has mistyped values."""


__all__ = [
    "DocumentFormatError",
    "DocumentIOError",
    "PlannerError",
    "ValidationError",
]

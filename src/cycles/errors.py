"""Exceptions raised by the cycle engine.

Only boundary problems are exceptions.  Too little history is answered with
documented defaults, and implausible intervals are filtered silently.
"""

from __future__ import annotations

from datetime import date


class CycleEngineError(Exception):
    """Base class for all cycle engine errors."""


class InvalidLogRangeError(CycleEngineError, ValueError):
    """Raised when a period log ends before it starts."""

    def __init__(self, start_date: date, end_date: date) -> None:
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Period log end date {end_date.isoformat()} is before "
            f"start date {start_date.isoformat()}"
        )

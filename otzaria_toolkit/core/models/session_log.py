from __future__ import annotations

"""Operator-facing session log.

Every mutating operation reports one human-readable line here. The log is
append-only from the caller's point of view, newest entry first, and bounded:
once capacity is reached the oldest entries are dropped.

Entries are mirrored to the standard :mod:`logging` tree so that the file log
carries the same history as the front-end panel.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Literal
import logging

__all__ = ["LogEntry", "SessionLog"]

logger = logging.getLogger(__name__)

LogLevel = Literal["info", "success", "error"]

_STD_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "error": logging.ERROR,
}


@dataclass(frozen=True)
class LogEntry:
    """Single operator log line.

    Attributes
    ----------
    timestamp
        Local time the entry was recorded, ``HH:MM:SS``.
    message
        Operation name and counts.
    level
        One of ``"info"``, ``"success"``, ``"error"``.
    """
    timestamp: str
    message: str
    level: LogLevel = "info"


class SessionLog:
    """Bounded, newest-first list of :class:`LogEntry`."""

    def __init__(self, capacity: int = 50) -> None:
        self._capacity: int = max(1, int(capacity))
        self._entries: List[LogEntry] = []

    def add(self, message: str, level: LogLevel = "info") -> LogEntry:
        entry = LogEntry(
            timestamp=datetime.now().strftime("%H:%M:%S"),
            message=message,
            level=level,
        )
        self._entries.insert(0, entry)
        del self._entries[self._capacity:]
        logger.log(_STD_LEVELS.get(level, logging.INFO), "Operator: %s", message)
        return entry

    def entries(self) -> List[LogEntry]:
        """Return a copy of the entries, newest first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

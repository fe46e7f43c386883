"""User-facing log of an OTG session, shown in the closing dialog."""

from __future__ import annotations

import logging

from handheldkit.domain.models import LogLevel, RunLogEntry

logger = logging.getLogger(__name__)

RUN_LOG_HEADER = "log message:"

_PY_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.OK: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class RunLog:
    """Ordered ``[LEVEL] message`` entries, mirrored to ``logging``."""

    def __init__(self) -> None:
        self._entries: list[RunLogEntry] = []

    @property
    def entries(self) -> list[RunLogEntry]:
        return list(self._entries)

    def add(self, level: LogLevel, message: str) -> None:
        entry = RunLogEntry(level=level, message=message)
        self._entries.append(entry)
        logger.log(_PY_LEVELS[level], "%s", message)

    def info(self, message: str) -> None:
        self.add(LogLevel.INFO, message)

    def ok(self, message: str) -> None:
        self.add(LogLevel.OK, message)

    def warning(self, message: str) -> None:
        self.add(LogLevel.WARNING, message)

    def error(self, message: str) -> None:
        self.add(LogLevel.ERROR, message)

    def render(self) -> str:
        return "\n".join([RUN_LOG_HEADER, *(str(e) for e in self._entries)])

    def __len__(self) -> int:
        return len(self._entries)

"""Domain models shared across the handheldkit tools."""

from handheldkit.domain.models import (
    ConsoleOption,
    InstallReport,
    KeyEvent,
    KeyValue,
    LogLevel,
    RunLogEntry,
    SessionReport,
)

__all__ = [
    "ConsoleOption",
    "InstallReport",
    "KeyEvent",
    "KeyValue",
    "LogLevel",
    "RunLogEntry",
    "SessionReport",
]

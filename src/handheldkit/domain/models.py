"""Core domain models for handheldkit.

These models describe what flows between the provisioning tools: the
console models a user can pick, the result of installing their assets,
the key events read from the gamepad, and the outcome of an OTG session.
"""

from __future__ import annotations

import enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Console asset selection
# ---------------------------------------------------------------------------


class ConsoleOption(BaseModel):
    """A selectable console model and where its assets live."""

    model_config = ConfigDict(frozen=True)

    display: str = Field(description="Menu label, e.g. 'XiFan R36Max'")
    real: str = Field(description="Directory name under consoles/")
    logo: str = Field(default="", description="Logo directory under consoles/, empty for none")


class InstallReport(BaseModel):
    """What install() did for one console option."""

    model_config = ConfigDict(frozen=True)

    option: ConsoleOption
    files_copied: int = Field(ge=0)
    logo_copied: bool = False
    marker_path: Path | None = None


# ---------------------------------------------------------------------------
# Gamepad events
# ---------------------------------------------------------------------------


class KeyValue(int, enum.Enum):
    """evdev EV_KEY values."""

    RELEASE = 0
    PRESS = 1
    REPEAT = 2


class KeyEvent(BaseModel):
    """One input event as reported by evtest."""

    model_config = ConfigDict(frozen=True)

    timestamp: float
    type_code: int
    type_name: str
    code: int
    name: str
    value: int


# ---------------------------------------------------------------------------
# OTG session
# ---------------------------------------------------------------------------


class LogLevel(str, enum.Enum):
    """Severity tags used in the user-facing run log."""

    INFO = "INFO"
    OK = "OK"
    WARNING = "WARNING"
    ERROR = "ERROR"


class RunLogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: LogLevel
    message: str

    def __str__(self) -> str:
        return f"[{self.level.value}] {self.message}"


class SessionReport(BaseModel):
    """Outcome of one OTG bring-up: per-step success plus the run log."""

    steps: dict[str, bool] = Field(default_factory=dict)
    log: list[RunLogEntry] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return bool(self.steps) and all(self.steps.values())

"""Remapping of ADC-wired gamepad keys through an external helper."""

from handheldkit.adckeys.events import is_supported_model, parse_event_line, read_model
from handheldkit.adckeys.keymap import KeyMap
from handheldkit.adckeys.monitor import AdcKeyMonitor

__all__ = [
    "AdcKeyMonitor",
    "KeyMap",
    "is_supported_model",
    "parse_event_line",
    "read_model",
]

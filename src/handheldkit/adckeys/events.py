"""Parsing of evtest output and device model detection.

evtest prints one line per input event::

    Event: time 1700000000.123456, type 1 (EV_KEY), code 314 (BTN_SELECT), value 1

Everything else it prints (device header, capability listing, SYN
report separators) is ignored.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from handheldkit.domain.models import KeyEvent

logger = logging.getLogger(__name__)

DEFAULT_MODEL_PATH = "/sys/firmware/devicetree/base/model"

_EVENT_RE = re.compile(
    r"^Event: time (?P<time>\d+(?:\.\d+)?), "
    r"type (?P<type>\d+) \((?P<type_name>\w+)\), "
    r"code (?P<code>\d+) \((?P<name>\w+)\), "
    r"value (?P<value>-?\d+)\s*$"
)


def parse_event_line(line: str) -> KeyEvent | None:
    match = _EVENT_RE.match(line.strip())
    if match is None:
        return None
    return KeyEvent(
        timestamp=float(match.group("time")),
        type_code=int(match.group("type")),
        type_name=match.group("type_name"),
        code=int(match.group("code")),
        name=match.group("name"),
        value=int(match.group("value")),
    )


def read_model(path: Path | str = DEFAULT_MODEL_PATH) -> str:
    """Read the device-tree model string; NUL separators become newlines."""
    try:
        raw = Path(path).read_bytes()
    except FileNotFoundError:
        return ""
    return raw.replace(b"\0", b"\n").decode(errors="replace")


def is_supported_model(model: str, pattern: str = "D007 Plus") -> bool:
    return pattern in model

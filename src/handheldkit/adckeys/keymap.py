"""Lookup from (key name, value) pairs to helper actions."""

from __future__ import annotations

from typing import Iterable

from handheldkit.config.settings import KeyBinding
from handheldkit.domain.models import KeyEvent

EV_KEY = 1


class KeyMap:
    def __init__(self, bindings: Iterable[KeyBinding] = ()) -> None:
        self._actions: dict[tuple[str, int], str] = {}
        for binding in bindings:
            self.bind(binding.key, binding.value, binding.action)

    def bind(self, key: str, value: int, action: str) -> None:
        self._actions[(key, int(value))] = action

    def resolve(self, event: KeyEvent) -> str | None:
        """Return the action for a key event, or None if it is unmapped."""
        if event.type_code != EV_KEY:
            return None
        return self._actions.get((event.name, event.value))

    def __len__(self) -> int:
        return len(self._actions)

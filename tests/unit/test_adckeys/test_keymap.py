"""Tests for key binding resolution."""

from __future__ import annotations

import pytest

from handheldkit.adckeys.keymap import KeyMap
from handheldkit.config.settings import AdcKeysConfig, KeyBinding
from handheldkit.domain.models import KeyEvent


def key_event(name: str, value: int, type_code: int = 1) -> KeyEvent:
    return KeyEvent(timestamp=0.0, type_code=type_code, type_name="EV_KEY", code=0, name=name, value=value)


@pytest.fixture
def keymap() -> KeyMap:
    return KeyMap(AdcKeysConfig().bindings)


class TestKeyMap:
    @pytest.mark.parametrize("name,value,action", [
        ("BTN_BACK", 1, "startselect"),
        ("BTN_SELECT", 1, "select_press"),
        ("BTN_SELECT", 0, "select_release"),
        ("BTN_START", 1, "start_press"),
        ("BTN_START", 0, "start_release"),
    ])
    def test_default_bindings(self, keymap: KeyMap, name: str, value: int, action: str) -> None:
        assert keymap.resolve(key_event(name, value)) == action

    def test_back_release_ignored(self, keymap: KeyMap) -> None:
        assert keymap.resolve(key_event("BTN_BACK", 0)) is None

    def test_repeat_ignored(self, keymap: KeyMap) -> None:
        assert keymap.resolve(key_event("BTN_START", 2)) is None

    def test_non_key_events_ignored(self, keymap: KeyMap) -> None:
        assert keymap.resolve(key_event("BTN_START", 1, type_code=3)) is None

    def test_custom_binding(self) -> None:
        km = KeyMap()
        km.bind("BTN_MODE", 1, "hotkey")
        assert len(km) == 1
        assert km.resolve(key_event("BTN_MODE", 1)) == "hotkey"

    def test_yaml_style_binding(self) -> None:
        km = KeyMap([KeyBinding(key="BTN_MODE", value=0, action="mode_release")])
        assert km.resolve(key_event("BTN_MODE", 0)) == "mode_release"

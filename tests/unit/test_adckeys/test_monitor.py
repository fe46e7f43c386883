"""Tests for the evtest-driven key monitor."""

from __future__ import annotations

import pytest

from handheldkit.adckeys.keymap import KeyMap
from handheldkit.adckeys.monitor import AdcKeyMonitor
from handheldkit.config.settings import AdcKeysConfig

HELPER = ["/usr/bin/python3", "/usr/local/bin/adckeys.py"]
DEVICE = "/dev/input/event3"


def ev(code: int, name: str, value: int) -> str:
    return f"Event: time 1700000000.000001, type 1 (EV_KEY), code {code} ({name}), value {value}"


@pytest.fixture
def monitor(runner) -> AdcKeyMonitor:
    return AdcKeyMonitor(
        keymap=KeyMap(AdcKeysConfig().bindings),
        device=DEVICE,
        helper_command=HELPER,
        runner=runner,
        restart_delay=0,
    )


class TestAdcKeyMonitor:
    @pytest.mark.asyncio
    async def test_dispatches_in_order(self, monitor: AdcKeyMonitor, runner) -> None:
        runner.line_sessions = [[
            "Input driver version is 1.0.1",
            ev(314, "BTN_SELECT", 1),
            "Event: time 1700000000.000001, -------------- SYN_REPORT ------------",
            ev(314, "BTN_SELECT", 0),
            ev(315, "BTN_START", 2),
            ev(158, "BTN_BACK", 1),
        ]]
        await monitor.run(max_sessions=1)
        assert runner.streamed == [("evtest", "--grab", DEVICE)]
        assert runner.calls == [
            (*HELPER, "select_press"),
            (*HELPER, "select_release"),
            (*HELPER, "startselect"),
        ]
        assert monitor.dispatched == 3

    @pytest.mark.asyncio
    async def test_helper_failure_keeps_going(self, monitor: AdcKeyMonitor, runner) -> None:
        runner.results[(*HELPER, "start_press")] = 1
        runner.line_sessions = [[ev(315, "BTN_START", 1), ev(315, "BTN_START", 0)]]
        await monitor.run(max_sessions=1)
        assert runner.calls[-1] == (*HELPER, "start_release")

    @pytest.mark.asyncio
    async def test_restarts_evtest(self, monitor: AdcKeyMonitor, runner) -> None:
        runner.line_sessions = [[ev(315, "BTN_START", 1)], [], [ev(315, "BTN_START", 0)]]
        await monitor.run(max_sessions=3)
        assert len(runner.streamed) == 3
        assert [c[-1] for c in runner.calls] == ["start_press", "start_release"]

    @pytest.mark.asyncio
    async def test_evtest_missing(self, monitor: AdcKeyMonitor, runner) -> None:
        async def broken_lines(*args: str):
            raise FileNotFoundError("evtest")
            yield ""  # pragma: no cover

        runner.lines = broken_lines
        await monitor.run(max_sessions=2)
        assert monitor.dispatched == 0

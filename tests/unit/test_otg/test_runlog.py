"""Tests for the user-facing run log."""

from __future__ import annotations

import logging

import pytest

from handheldkit.domain.models import LogLevel
from handheldkit.otg.runlog import RunLog


class TestRunLog:
    def test_render_order(self) -> None:
        log = RunLog()
        log.info("Found UDC: ff300000.usb")
        log.ok("USB Gadget configured")
        log.error("DHCP service start failed")
        assert log.render() == (
            "log message:\n"
            "[INFO] Found UDC: ff300000.usb\n"
            "[OK] USB Gadget configured\n"
            "[ERROR] DHCP service start failed"
        )

    def test_empty_render(self) -> None:
        assert RunLog().render() == "log message:"

    def test_entries_are_copies(self) -> None:
        log = RunLog()
        log.warning("x")
        log.entries.clear()
        assert len(log) == 1
        assert log.entries[0].level is LogLevel.WARNING

    def test_mirrored_to_logging(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="handheldkit.otg.runlog"):
            RunLog().error("usb0 not found")
        assert any(r.levelno == logging.ERROR and "usb0 not found" in r.message for r in caplog.records)

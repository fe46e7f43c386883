"""Shared test fixtures for the handheldkit test suite.

Provides a recording CommandRunner fake so provisioning steps can run
without touching the real system, plus configs pointing at tmp_path.
"""

from __future__ import annotations

from pathlib import Path
from typing import AsyncIterator

import pytest

from handheldkit.config.settings import OtgConfig
from handheldkit.otg.runlog import RunLog
from handheldkit.system.runner import CommandResult


# ---------------------------------------------------------------------------
# Fake command runner
# ---------------------------------------------------------------------------


class FakeProcess:
    """Stand-in for asyncio.subprocess.Process."""

    def __init__(self, pid: int = 4242, alive: bool = True) -> None:
        self.pid = pid
        self.returncode: int | None = None if alive else 1
        self.terminated = False
        self.killed = False

    def terminate(self) -> None:
        self.terminated = True
        self.returncode = -15

    def kill(self) -> None:
        self.killed = True
        self.returncode = -9

    async def wait(self) -> int:
        return self.returncode if self.returncode is not None else 0


class FakeRunner:
    """Records commands and answers them from a table of canned results.

    ``results`` maps a command prefix (tuple of args) to a return code or
    a list of return codes consumed one call at a time. Unlisted commands
    succeed.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.spawned: list[tuple[str, ...]] = []
        self.spawn_env: list[dict[str, str] | None] = []
        self.results: dict[tuple[str, ...], int | list[int]] = {}
        self.available: set[str] = {"ip", "dnsmasq"}
        self.spawn_alive = True
        self.spawn_error: OSError | None = None
        self.line_sessions: list[list[str]] = []
        self.streamed: list[tuple[str, ...]] = []

    def _returncode(self, args: tuple[str, ...]) -> int:
        best: tuple[str, ...] | None = None
        for prefix in self.results:
            if args[: len(prefix)] == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is None:
            return 0
        value = self.results[best]
        if isinstance(value, list):
            return value.pop(0) if len(value) > 1 else value[0]
        return value

    async def run(self, *args: str, stdout=None) -> CommandResult:
        self.calls.append(args)
        return CommandResult(args=args, returncode=self._returncode(args))

    async def spawn(self, *args: str, env=None, stdout=None) -> FakeProcess:
        if self.spawn_error is not None:
            raise self.spawn_error
        self.spawned.append(args)
        self.spawn_env.append(env)
        return FakeProcess(pid=4242 + len(self.spawned), alive=self.spawn_alive)

    async def lines(self, *args: str) -> AsyncIterator[str]:
        self.streamed.append(args)
        session = self.line_sessions.pop(0) if self.line_sessions else []
        for line in session:
            yield line

    def which(self, name: str) -> str | None:
        return f"/usr/bin/{name}" if name in self.available else None

    @staticmethod
    def is_alive(process: FakeProcess) -> bool:
        return process.returncode is None

    def called(self, *prefix: str) -> bool:
        return any(call[: len(prefix)] == prefix for call in self.calls)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def run_log() -> RunLog:
    return RunLog()


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def net_class_dir(tmp_path: Path) -> Path:
    """A /sys/class/net stand-in where usb0 is already present."""
    net_dir = tmp_path / "class" / "net"
    (net_dir / "usb0").mkdir(parents=True)
    return net_dir


@pytest.fixture
def otg_config(tmp_path: Path, net_class_dir: Path) -> OtgConfig:
    """An OtgConfig whose filesystem paths live under tmp_path and with no delays."""
    udc_dir = tmp_path / "class" / "udc"
    udc_dir.mkdir(parents=True)
    (udc_dir / "fe800000.usb").mkdir()
    return OtgConfig(
        net_class_dir=str(net_class_dir),
        gadget_dir=str(tmp_path / "usb_gadget" / "arkos_ssh"),
        udc_class_dir=str(udc_dir),
        dhcp_config_path=str(tmp_path / "usb_dhcp.conf"),
        tty=str(tmp_path / "tty1"),
        sshd_path=str(tmp_path / "sshd"),
        gptokeyb_path=str(tmp_path / "gptokeyb"),
        uinput_device=str(tmp_path / "uinput"),
        settle_delay=0,
        link_retries=3,
        link_retry_interval=0,
        ssh_settle_delay=0,
    )


@pytest.fixture
def consoles_dir(tmp_path: Path) -> Path:
    """A consoles/ tree with one model and both logo resolutions."""
    root = tmp_path / "consoles"
    (root / "r36max" / "boot").mkdir(parents=True)
    (root / "r36max" / "rk3326-r36max.dtb").write_bytes(b"\xd0\x0d\xfe\xed")
    (root / "r36max" / "boot" / "boot.ini").write_text("setenv bootargs\n")
    (root / "logo" / "720P").mkdir(parents=True)
    (root / "logo" / "720P" / "logo.bmp").write_bytes(b"BM720")
    (root / "logo" / "480P").mkdir(parents=True)
    (root / "logo" / "480P" / "logo.bmp").write_bytes(b"BM480")
    return root

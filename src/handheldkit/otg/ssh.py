"""Makes sure an SSH daemon is accepting connections."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from handheldkit.errors import ProvisioningError
from handheldkit.otg.runlog import RunLog
from handheldkit.system.runner import CommandRunner

logger = logging.getLogger(__name__)

SERVICE_NAMES = ("sshd", "ssh")

# Tried in order until one succeeds
START_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("systemctl", "start", "ssh"),
    ("systemctl", "start", "sshd"),
    ("service", "ssh", "start"),
    ("service", "sshd", "start"),
)


class SshError(ProvisioningError):
    """Raised when SSH cannot be confirmed running."""


class SshService:
    def __init__(
        self,
        runner: CommandRunner,
        run_log: RunLog,
        sshd_path: str = "/usr/sbin/sshd",
        settle_delay: float = 2.0,
    ) -> None:
        self._runner = runner
        self._log = run_log
        self._sshd_path = Path(sshd_path)
        self._settle_delay = settle_delay
        self._process: asyncio.subprocess.Process | None = None

    async def is_running(self) -> bool:
        for name in SERVICE_NAMES:
            if (await self._runner.run("pgrep", "-x", name)).ok:
                return True
            if (await self._runner.run("systemctl", "is-active", "--quiet", name)).ok:
                return True
        return False

    async def start(self) -> None:
        """Start SSH if needed and confirm it is up.

        Raises:
            SshError: If no start method works or SSH is not running afterwards.
        """
        if await self.is_running():
            self._log.info("SSH already running")
        elif not await self._start_via_service_manager():
            await self._start_directly()

        await asyncio.sleep(self._settle_delay)
        if not await self.is_running():
            self._log.warning("SSH may not be running")
            raise SshError("SSH daemon is not running", step="ssh")
        self._log.info("SSH confirmed running")

    async def _start_via_service_manager(self) -> bool:
        for cmd in START_COMMANDS:
            if (await self._runner.run(*cmd)).ok:
                self._log.info(f"SSH started via {' '.join(cmd)}")
                return True
        return False

    async def _start_directly(self) -> None:
        if not self._sshd_path.exists():
            self._log.error("No way to start SSH")
            raise SshError(f"No service manager could start SSH and {self._sshd_path} is missing", step="ssh")
        try:
            process = await self._runner.spawn(str(self._sshd_path), "-D")
        except OSError as e:
            self._log.error("Could not start SSH daemon")
            raise SshError(f"Cannot execute {self._sshd_path}: {e}", step="ssh") from e
        if not self._runner.is_alive(process):
            self._log.error("Could not start SSH daemon")
            raise SshError("sshd exited immediately", step="ssh")
        self._process = process
        self._log.info(f"SSH started directly (PID: {process.pid})")

"""dnsmasq-based DHCP service for hosts plugged into the OTG port.

dnsmasq runs with DNS disabled (``port=0``) and hands out addresses from
a small pool on the gadget interface, advertising the device itself as
gateway and DNS server.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from handheldkit.errors import ProvisioningError
from handheldkit.otg.runlog import RunLog
from handheldkit.system.runner import CommandRunner

logger = logging.getLogger(__name__)

# How long dnsmasq gets to fail on a bad config before we call it started
DEFAULT_START_CHECK_DELAY = 0.5
STOP_TIMEOUT = 5.0


class DhcpError(ProvisioningError):
    """Raised when the DHCP service cannot be started."""


class DhcpService:
    """Owns one dnsmasq instance bound to the gadget interface."""

    def __init__(
        self,
        runner: CommandRunner,
        run_log: RunLog,
        iface: str = "usb0",
        address: str = "192.168.7.1",
        range_start: str = "192.168.7.100",
        range_end: str = "192.168.7.200",
        lease: str = "12h",
        config_path: str = "/tmp/usb_dhcp.conf",
        start_check_delay: float = DEFAULT_START_CHECK_DELAY,
    ) -> None:
        self._runner = runner
        self._log = run_log
        self._iface = iface
        self._address = address
        self._range_start = range_start
        self._range_end = range_end
        self._lease = lease
        self._config_path = Path(config_path)
        self._start_check_delay = start_check_delay
        self._process: asyncio.subprocess.Process | None = None

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    @property
    def _match_pattern(self) -> str:
        return f"dnsmasq.*{self._config_path.name}"

    def render_config(self) -> str:
        return "\n".join([
            "port=0",
            f"interface={self._iface}",
            f"dhcp-range={self._range_start},{self._range_end},{self._lease}",
            f"dhcp-option=3,{self._address}",
            f"dhcp-option=6,{self._address}",
        ]) + "\n"

    async def start(self) -> int:
        """Write the config and launch dnsmasq.

        Returns:
            PID of the running dnsmasq.

        Raises:
            DhcpError: If dnsmasq is missing or exits immediately.
        """
        if not self._runner.which("dnsmasq"):
            self._log.error("Dnsmasq not found")
            raise DhcpError("dnsmasq is not installed", step="dhcp")

        await self._runner.run("pkill", "-f", self._match_pattern)

        try:
            self._config_path.write_text(self.render_config())
        except OSError as e:
            raise DhcpError(f"Cannot write {self._config_path}: {e}", step="dhcp") from e

        try:
            # Foreground so the PID we hold is the daemon itself
            process = await self._runner.spawn(
                "dnsmasq", "--keep-in-foreground", "-C", str(self._config_path),
            )
        except OSError as e:
            self._log.error("dnsmasq failed to start")
            raise DhcpError(f"Cannot start dnsmasq: {e}", step="dhcp") from e

        await asyncio.sleep(self._start_check_delay)
        if not self._runner.is_alive(process):
            self._log.error("dnsmasq failed to start")
            raise DhcpError(f"dnsmasq exited with {process.returncode}", step="dhcp")

        self._process = process
        self._log.info(f"DHCP started (PID: {process.pid})")
        return process.pid

    async def stop(self) -> None:
        """Stop dnsmasq and remove its config. Safe to call repeatedly."""
        process, self._process = self._process, None
        if process is not None and self._runner.is_alive(process):
            try:
                process.terminate()
                await asyncio.wait_for(process.wait(), timeout=STOP_TIMEOUT)
            except ProcessLookupError:
                pass
            except asyncio.TimeoutError:
                logger.warning("dnsmasq did not exit, killing pid %d", process.pid)
                process.kill()
                await process.wait()

        await self._runner.run("pkill", "-f", self._match_pattern)
        try:
            self._config_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove %s: %s", self._config_path, e)
        logger.debug("DHCP service stopped")

"""End-to-end SSH-over-OTG session.

Brings up the USB network gadget, addresses it, serves DHCP on it and
makes sure sshd is running, then shows connection details on the console.
The gadget stays up only while the session is held open (until the
closing dialog is dismissed, or until the process is interrupted when no
dialog is shown); everything is torn down again on the way out.

Steps are independent in the sense that a failure is recorded and the
next step still runs, so the final dialog can show the user exactly
which parts worked.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from handheldkit.config.settings import OtgConfig
from handheldkit.domain.models import SessionReport
from handheldkit.errors import ProvisioningError
from handheldkit.otg.console import TtyConsole
from handheldkit.otg.dhcp import DhcpService
from handheldkit.otg.gadget import UsbGadget
from handheldkit.otg.gamepad import GamepadBridge
from handheldkit.otg.network import configure_network
from handheldkit.otg.runlog import RunLog
from handheldkit.otg.ssh import SshService
from handheldkit.system.runner import CommandRunner

logger = logging.getLogger(__name__)

DIALOG_HEIGHT = 12
DIALOG_WIDTH = 70


class OtgSession:
    """Orchestrates one gadget bring-up and its teardown."""

    def __init__(
        self,
        config: OtgConfig,
        runner: CommandRunner | None = None,
        console: TtyConsole | None = None,
        show_dialog: bool = True,
    ) -> None:
        self._config = config
        self._runner = runner or CommandRunner()
        self._show_dialog = show_dialog
        self.run_log = RunLog()

        self.console = console or TtyConsole(
            self._runner, tty=config.tty, font=config.console_font,
        )
        self.gadget = UsbGadget(config, self._runner, self.run_log)
        self.dhcp = DhcpService(
            self._runner,
            self.run_log,
            iface=config.interface,
            address=config.device_ip,
            range_start=config.dhcp_start,
            range_end=config.dhcp_end,
            lease=config.dhcp_lease,
            config_path=config.dhcp_config_path,
        )
        self.ssh = SshService(
            self._runner,
            self.run_log,
            sshd_path=config.sshd_path,
            settle_delay=config.ssh_settle_delay,
        )
        self.gamepad = GamepadBridge(
            self._runner,
            self.run_log,
            session_name=config.session_name,
            gptokeyb_path=config.gptokeyb_path,
            keys_file=config.gptokeyb_keys,
            gamecontroller_db=config.gamecontroller_db,
            uinput_device=config.uinput_device,
        )

    def connection_info(self) -> str:
        cfg = self._config
        # Any free address in the subnet works for a manually configured host
        host_ip = cfg.device_ip.rsplit(".", 1)[0] + ".2"
        return (
            "Plug the USB cable into OTG port and connect via SSH/SFTP:\n"
            f"{cfg.ssh_user}@{cfg.device_ip} (default password is: {cfg.ssh_password})\n\n"
            "If auto-configuration fails, set your network adapter to:\n"
            f"IP: {host_ip}, Netmask: {cfg.netmask}\n\n"
            "OK to exit\n"
        )

    def _steps(self) -> list[tuple[str, str, str, Callable[[], Awaitable[object]]]]:
        cfg = self._config
        return [
            ("gadget", "USB Gadget configured", "USB Gadget configuration failed",
             self.gadget.configure),
            ("network", "Network configured", "Network configuration failed",
             lambda: configure_network(
                 self._runner, self.run_log,
                 iface=cfg.interface, address=cfg.device_ip,
                 netmask=cfg.netmask, prefix_length=cfg.prefix_length,
                 net_class_dir=cfg.net_class_dir,
             )),
            ("dhcp", "DHCP service started", "DHCP service start failed",
             self.dhcp.start),
            ("ssh", "SSH service started", "SSH service start failed",
             self.ssh.start),
        ]

    async def bring_up(self) -> dict[str, bool]:
        """Run every bring-up step, recording success per step."""
        results: dict[str, bool] = {}
        for name, ok_msg, fail_msg, step in self._steps():
            try:
                await step()
            except ProvisioningError as e:
                logger.debug("Step %s failed: %s", name, e)
                self.run_log.error(fail_msg)
                results[name] = False
            else:
                self.run_log.ok(ok_msg)
                results[name] = True
        return results

    async def hold(self) -> None:
        """Keep the session open until the user (or a signal) ends it."""
        if self._show_dialog:
            await self.console.msgbox(
                f"{self.connection_info()}\n{self.run_log.render()}",
                DIALOG_HEIGHT,
                DIALOG_WIDTH,
            )
            return
        logger.info("Session up; interrupt to tear down.\n%s", self.connection_info())
        await asyncio.Event().wait()

    async def run(self) -> SessionReport:
        """Bring up, hold, and always tear down the session."""
        try:
            await self.console.init()
            await self.gamepad.start()
            steps = await self.bring_up()
            await self.hold()
        finally:
            await self.cleanup()
        return SessionReport(steps=steps, log=self.run_log.entries)

    async def cleanup(self) -> None:
        """Tear down everything a session may have started."""
        await self.dhcp.stop()
        await self.gadget.cleanup()
        self.console.restore()
        await self.gamepad.stop()
        logger.info("OTG session cleaned up")

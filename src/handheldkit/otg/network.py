"""Static address assignment for the gadget's network interface."""

from __future__ import annotations

import logging
from pathlib import Path

from handheldkit.errors import ProvisioningError
from handheldkit.otg.runlog import RunLog
from handheldkit.system.runner import CommandRunner

logger = logging.getLogger(__name__)


class NetworkError(ProvisioningError):
    """Raised when the gadget interface cannot be configured."""


async def configure_network(
    runner: CommandRunner,
    run_log: RunLog,
    iface: str = "usb0",
    address: str = "192.168.7.1",
    netmask: str = "255.255.255.0",
    prefix_length: int = 24,
    net_class_dir: str = "/sys/class/net",
) -> str:
    """Give ``iface`` a static address and bring it up.

    Uses iproute2 when available and falls back to net-tools ifconfig.

    Returns:
        Name of the tool that configured the interface.

    Raises:
        NetworkError: If the interface is missing or a command fails.
    """
    if not (Path(net_class_dir) / iface).exists():
        run_log.error(f"{iface} does not exist")
        raise NetworkError(f"Interface {iface} does not exist", step="network")

    if runner.which("ip"):
        # Stale addresses from an earlier session would conflict
        await runner.run("ip", "addr", "flush", "dev", iface)
        if not (await runner.run("ip", "addr", "add", f"{address}/{prefix_length}", "dev", iface)).ok:
            run_log.warning("Could not assign IP with ip")
            raise NetworkError(f"Could not assign {address} to {iface}", step="network")
        if not (await runner.run("ip", "link", "set", iface, "up")).ok:
            run_log.warning(f"Could not bring up {iface} with ip")
            raise NetworkError(f"Could not bring up {iface}", step="network")
        run_log.info(f"interface {iface} brought up with ip")
        return "ip"

    if runner.which("ifconfig"):
        if not (await runner.run("ifconfig", iface, address, "netmask", netmask, "up")).ok:
            run_log.warning(f"Could not configure {iface} with ifconfig")
            raise NetworkError(f"ifconfig failed for {iface}", step="network")
        run_log.info(f"{iface} configured with ifconfig")
        return "ifconfig"

    run_log.error("No ip or ifconfig found")
    raise NetworkError("Neither ip nor ifconfig is installed", step="network")

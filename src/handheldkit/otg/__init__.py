"""SSH over USB-OTG for handhelds running ArkOS-style firmware.

Turns the device's OTG port into a USB network adapter, serves DHCP on
it and ensures sshd is running, so a host computer can reach the device
over SSH/SFTP with nothing but a cable.

Public API:
    OtgSession -- full bring-up, hold and teardown
    UsbGadget, DhcpService, SshService, GamepadBridge -- individual steps
"""

from handheldkit.otg.dhcp import DhcpError, DhcpService
from handheldkit.otg.gadget import GadgetError, UsbGadget
from handheldkit.otg.network import NetworkError, configure_network
from handheldkit.otg.runlog import RunLog
from handheldkit.otg.session import OtgSession
from handheldkit.otg.ssh import SshError, SshService

__all__ = [
    "DhcpError",
    "DhcpService",
    "GadgetError",
    "NetworkError",
    "OtgSession",
    "RunLog",
    "SshError",
    "SshService",
    "UsbGadget",
    "configure_network",
]

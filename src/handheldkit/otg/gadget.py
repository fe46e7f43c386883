"""USB network gadget built through the Linux configfs gadget API.

Creates a composite gadget under /sys/kernel/config/usb_gadget with a
single configuration exposing one network function. RNDIS is preferred
(Windows hosts pick it up without drivers); ECM is the fallback. Once the
gadget is bound to the USB Device Controller the kernel creates the
``usb0`` interface on the device side.

Layout written::

    <gadget>/idVendor, idProduct
    <gadget>/strings/0x409/{serialnumber,manufacturer,product}
    <gadget>/configs/c.1/strings/0x409/configuration
    <gadget>/configs/c.1/MaxPower
    <gadget>/functions/{rndis,ecm}.usb0
    <gadget>/configs/c.1/{rndis,ecm}.usb0 -> functions/...
    <gadget>/UDC
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable

from handheldkit.config.settings import OtgConfig
from handheldkit.errors import ProvisioningError
from handheldkit.otg.runlog import RunLog
from handheldkit.system.runner import CommandRunner

logger = logging.getLogger(__name__)

# USB language id for en-US
LANG_ID = "0x409"
CONFIG_NAME = "c.1"
FUNCTION_KINDS = ("rndis", "ecm")


class GadgetError(ProvisioningError):
    """Raised when the USB gadget cannot be configured."""


class UsbGadget:
    """Configures and tears down the OTG network gadget."""

    def __init__(
        self,
        config: OtgConfig,
        runner: CommandRunner,
        run_log: RunLog,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._runner = runner
        self._log = run_log
        self._clock = clock
        self._root = Path(config.gadget_dir)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def _config_dir(self) -> Path:
        return self._root / "configs" / CONFIG_NAME

    def _function_name(self, kind: str) -> str:
        return f"{kind}.{self._config.interface}"

    def detect_udc(self) -> str:
        """Return the USB Device Controller to bind to.

        Falls back to the configured default when the udc class
        directory is absent (older kernels).

        Raises:
            GadgetError: If the class directory exists but lists no controller.
        """
        udc_dir = Path(self._config.udc_class_dir)
        if not udc_dir.is_dir():
            self._log.info(f"Using default UDC: {self._config.default_udc}")
            return self._config.default_udc
        controllers = sorted(p.name for p in udc_dir.iterdir())
        if not controllers:
            raise GadgetError(f"No USB device controller in {udc_dir}", step="gadget")
        self._log.info(f"Found UDC: {controllers[0]}")
        return controllers[0]

    async def load_modules(self) -> None:
        for module in self._config.kernel_modules:
            result = await self._runner.run("modprobe", module)
            if not result.ok:
                self._log.error(f"Could not load {module}")
                raise GadgetError(f"Could not load kernel module {module}", step="gadget")

    async def configure(self) -> str:
        """Create, bind and wait for the gadget.

        Returns:
            The network function in use, ``"rndis"`` or ``"ecm"``.

        Raises:
            GadgetError: If any stage fails.
        """
        await self.load_modules()
        udc = self.detect_udc()
        await self.cleanup()

        loop = asyncio.get_running_loop()
        kind = await loop.run_in_executor(None, self._build_tree)

        try:
            await loop.run_in_executor(None, self._write_attr, self._root / "UDC", udc)
        except OSError as e:
            self._log.error("Could not start USB gadget")
            raise GadgetError(f"Could not bind gadget to {udc}: {e}", step="gadget") from e
        logger.info("Gadget bound to %s using %s", udc, kind)

        await asyncio.sleep(self._config.settle_delay)
        await self.wait_for_interface()
        return kind

    def _build_tree(self) -> str:
        cfg = self._config
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._log.error("Could not create gadget dir")
            raise GadgetError(f"Could not create {self._root}: {e}", step="gadget") from e

        try:
            self._write_attr(self._root / "idVendor", cfg.id_vendor)
            self._write_attr(self._root / "idProduct", cfg.id_product)

            strings = self._root / "strings" / LANG_ID
            strings.mkdir(parents=True, exist_ok=True)
            self._write_attr(strings / "serialnumber", f"{cfg.serial_prefix}{int(self._clock())}")
            self._write_attr(strings / "manufacturer", cfg.manufacturer)
            self._write_attr(strings / "product", cfg.product)

            config_strings = self._config_dir / "strings" / LANG_ID
            config_strings.mkdir(parents=True, exist_ok=True)
            self._write_attr(config_strings / "configuration", cfg.configuration)
            self._write_attr(self._config_dir / "MaxPower", str(cfg.max_power))
        except OSError as e:
            raise GadgetError(f"Could not write gadget descriptors: {e}", step="gadget") from e

        for kind in FUNCTION_KINDS:
            function_dir = self._root / "functions" / self._function_name(kind)
            try:
                function_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.debug("Function %s unavailable: %s", kind, e)
                continue
            link = self._config_dir / function_dir.name
            try:
                if link.is_symlink():
                    link.unlink()
                link.symlink_to(function_dir, target_is_directory=True)
            except OSError as e:
                raise GadgetError(f"Could not link {function_dir.name}: {e}", step="gadget") from e
            return kind

        self._log.error("Could not create USB network function")
        raise GadgetError("Neither RNDIS nor ECM function could be created", step="gadget")

    def interface_exists(self) -> bool:
        return (Path(self._config.net_class_dir) / self._config.interface).exists()

    async def wait_for_interface(self) -> None:
        """Poll until the kernel lists the gadget's network interface.

        Raises:
            GadgetError: If the interface never shows up.
        """
        iface = self._config.interface
        retries = self._config.link_retries
        for attempt in range(1, retries + 1):
            if self.interface_exists():
                return
            self._log.warning(f"{iface} not ready (try {attempt}/{retries})")
            await asyncio.sleep(self._config.link_retry_interval)
        self._log.error(f"{iface} not found")
        raise GadgetError(f"Interface {iface} did not appear", step="gadget")

    async def cleanup(self) -> None:
        """Unbind and remove the gadget. Best effort; never raises."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._remove_tree)

    def _remove_tree(self) -> None:
        if not self._root.is_dir():
            return
        self._quietly(self._write_attr, self._root / "UDC", "")
        for kind in FUNCTION_KINDS:
            link = self._config_dir / self._function_name(kind)
            if link.is_symlink():
                self._quietly(link.unlink)
        # configfs only lets a directory go once its children are gone
        for path in (
            self._config_dir / "strings" / LANG_ID,
            self._config_dir,
            *(self._root / "functions" / self._function_name(k) for k in FUNCTION_KINDS),
            self._root / "strings" / LANG_ID,
            self._root,
        ):
            if path.is_dir():
                self._quietly(path.rmdir)
        logger.debug("Gadget %s cleaned up", self._root)

    @staticmethod
    def _write_attr(path: Path, value: str) -> None:
        path.write_text(f"{value}\n")

    @staticmethod
    def _quietly(fn: Callable[..., object], *args: object) -> None:
        try:
            fn(*args)
        except OSError as e:
            logger.debug("Cleanup step %s failed: %s", getattr(fn, "__name__", fn), e)

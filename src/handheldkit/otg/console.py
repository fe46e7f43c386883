"""Drawing on the handheld's framebuffer console (/dev/tty1)."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from handheldkit.system.runner import CommandRunner

logger = logging.getLogger(__name__)

CLEAR_SCREEN = "\033c"
HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?25h"

BACKTITLE = "SSH over OTG for ArkOS by AlternativeRoom4499 & carrothu-cn"
TITLE = "SSH over OTG for ArkOS"


class TtyConsole:
    """Writes escape sequences and dialog boxes to a console tty.

    Console output is cosmetic: every failure here is logged and swallowed
    so it can never abort provisioning.
    """

    def __init__(
        self,
        runner: CommandRunner,
        tty: str = "/dev/tty1",
        font: str | None = None,
        loading_delay: float = 1.0,
    ) -> None:
        self._runner = runner
        self._tty = Path(tty)
        self._font = font
        self._loading_delay = loading_delay

    def write(self, text: str) -> None:
        try:
            with open(self._tty, "w") as fh:
                fh.write(text)
        except OSError as e:
            logger.debug("Cannot write to %s: %s", self._tty, e)

    async def init(self) -> None:
        self.write(CLEAR_SCREEN + HIDE_CURSOR)
        if self._font:
            await self._runner.run("setfont", self._font)
        self.write(f"{CLEAR_SCREEN}{TITLE} loading, please wait...")
        await asyncio.sleep(self._loading_delay)

    async def msgbox(self, text: str = "Done.", height: int = 6, width: int = 40) -> None:
        """Show a blocking dialog message box until the user dismisses it."""
        try:
            with open(self._tty, "w") as fh:
                result = await self._runner.run(
                    "dialog", "--backtitle", BACKTITLE, "--title", TITLE,
                    "--msgbox", text, str(height), str(width),
                    stdout=fh,
                )
        except OSError as e:
            logger.warning("Cannot open %s for dialog: %s", self._tty, e)
            return
        if not result.ok:
            logger.warning("dialog exited with %d", result.returncode)

    def restore(self) -> None:
        self.write(CLEAR_SCREEN + SHOW_CURSOR)

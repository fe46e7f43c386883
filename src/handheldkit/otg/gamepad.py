"""gptokeyb bridge so the session's dialogs can be driven from the gamepad."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from handheldkit.otg.runlog import RunLog
from handheldkit.system.runner import CommandRunner

logger = logging.getLogger(__name__)

UINPUT_MODE = 0o666


class GamepadBridge:
    """Runs gptokeyb for the lifetime of a session, when it is installed."""

    def __init__(
        self,
        runner: CommandRunner,
        run_log: RunLog,
        session_name: str,
        gptokeyb_path: str = "/opt/inttools/gptokeyb",
        keys_file: str = "/opt/inttools/keys.gptk",
        gamecontroller_db: str = "/opt/inttools/gamecontrollerdb.txt",
        uinput_device: str = "/dev/uinput",
    ) -> None:
        self._runner = runner
        self._log = run_log
        self._session_name = session_name
        self._gptokeyb = Path(gptokeyb_path)
        self._keys_file = keys_file
        self._gamecontroller_db = gamecontroller_db
        self._uinput = Path(uinput_device)

    @property
    def _match_pattern(self) -> str:
        return f"gptokeyb -1 {self._session_name}"

    async def start(self) -> bool:
        """Launch gptokeyb. Missing pieces are logged, never raised."""
        if not self._runner.which(str(self._gptokeyb)):
            self._log.warning("Gamepad support disabled. gptokeyb not found.")
            return False

        if self._uinput.exists():
            try:
                os.chmod(self._uinput, UINPUT_MODE)
            except OSError as e:
                logger.debug("chmod %s failed: %s", self._uinput, e)
                self._log.warning(f"Could not change {self._uinput} permissions")

        env = dict(os.environ)
        env["SDL_GAMECONTROLLERCONFIG_FILE"] = self._gamecontroller_db

        await self._runner.run("pkill", "-f", self._match_pattern)
        try:
            await self._runner.spawn(
                str(self._gptokeyb), "-1", self._session_name, "-c", self._keys_file,
                env=env,
            )
        except OSError as e:
            self._log.warning(f"Could not start gptokeyb: {e}")
            return False
        return True

    async def stop(self) -> None:
        await self._runner.run("pkill", "-f", self._match_pattern)

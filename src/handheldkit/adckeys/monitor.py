"""Long-running gamepad monitor for boards with ADC-wired menu keys.

On these boards Select/Start/Back arrive on a separate input device that
the emulator front-end does not understand. The monitor grabs that
device through ``evtest --grab`` (so the raw events do not leak to other
readers) and turns each mapped event into one call of a helper command,
which injects the proper key combination.
"""

from __future__ import annotations

import asyncio
import logging

from handheldkit.adckeys.events import parse_event_line
from handheldkit.adckeys.keymap import KeyMap
from handheldkit.system.runner import CommandRunner

logger = logging.getLogger(__name__)


class AdcKeyMonitor:
    def __init__(
        self,
        keymap: KeyMap,
        device: str,
        helper_command: list[str],
        runner: CommandRunner | None = None,
        restart_delay: float = 1.0,
    ) -> None:
        self._keymap = keymap
        self._device = device
        self._helper = list(helper_command)
        self._runner = runner or CommandRunner()
        self._restart_delay = restart_delay
        self._dispatched = 0

    @property
    def dispatched(self) -> int:
        return self._dispatched

    async def dispatch(self, action: str) -> bool:
        """Run the helper for one action; failures are logged only."""
        result = await self._runner.run(*self._helper, action)
        self._dispatched += 1
        if not result.ok:
            logger.warning(
                "Helper failed for %s (exit %d): %s",
                action, result.returncode, result.stderr.strip(),
            )
            return False
        logger.debug("Dispatched %s", action)
        return True

    async def run_session(self) -> None:
        """Read events until evtest exits."""
        try:
            async for line in self._runner.lines("evtest", "--grab", self._device):
                event = parse_event_line(line)
                if event is None:
                    continue
                action = self._keymap.resolve(event)
                if action is not None:
                    await self.dispatch(action)
        except OSError as e:
            logger.error("Cannot run evtest on %s: %s", self._device, e)

    async def run(self, max_sessions: int | None = None) -> None:
        """Keep evtest running, restarting it whenever it exits."""
        sessions = 0
        while max_sessions is None or sessions < max_sessions:
            await self.run_session()
            sessions += 1
            logger.info("evtest on %s exited, restarting in %.1fs", self._device, self._restart_delay)
            await asyncio.sleep(self._restart_delay)

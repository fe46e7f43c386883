"""Asynchronous wrapper around the OS utilities the provisioning steps drive.

Every external command (modprobe, ip, dnsmasq, systemctl, evtest, ...)
goes through a CommandRunner so the steps can be exercised in tests with
a recording fake instead of a real system.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from typing import IO, AsyncIterator

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

# Shell convention for "command not found"
EXIT_NOT_FOUND = 127


class CommandResult(BaseModel):
    """Outcome of a finished command."""

    model_config = ConfigDict(frozen=True)

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs external commands with asyncio subprocesses."""

    async def run(self, *args: str, stdout: IO | None = None) -> CommandResult:
        """Run a command to completion and capture its output.

        A missing executable is reported as returncode 127 rather than
        raised, so callers can treat it like any other failed command.
        If ``stdout`` is given the command writes there directly (used
        for drawing on the console tty) and no output is captured.
        """
        logger.debug("Running: %s", " ".join(args))
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=stdout if stdout is not None else asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as e:
            logger.debug("Cannot execute %s: %s", args[0], e)
            return CommandResult(args=args, returncode=EXIT_NOT_FOUND, stderr=str(e))

        try:
            out, err = await process.communicate()
        except asyncio.CancelledError:
            # A cancelled caller must not leave the child behind
            if process.returncode is None:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
            await process.wait()
            raise
        result = CommandResult(
            args=args,
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=out.decode(errors="replace") if out else "",
            stderr=err.decode(errors="replace") if err else "",
        )
        if not result.ok:
            logger.debug("%s exited with %d: %s", args[0], result.returncode, result.stderr.strip())
        return result

    async def spawn(
        self,
        *args: str,
        env: dict[str, str] | None = None,
        stdout: IO | int | None = asyncio.subprocess.DEVNULL,
    ) -> asyncio.subprocess.Process:
        """Start a background process and return without waiting for it.

        Raises:
            OSError: If the executable cannot be started.
        """
        logger.debug("Spawning: %s", " ".join(args))
        return await asyncio.create_subprocess_exec(
            *args,
            stdout=stdout,
            stderr=asyncio.subprocess.DEVNULL,
            env=env,
        )

    async def lines(self, *args: str) -> AsyncIterator[str]:
        """Yield stdout lines of a long-running command as they arrive.

        The process is killed when the consumer stops iterating.

        Raises:
            OSError: If the executable cannot be started.
        """
        logger.debug("Streaming: %s", " ".join(args))
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
        assert process.stdout is not None
        try:
            while True:
                raw = await process.stdout.readline()
                if not raw:
                    break
                yield raw.decode(errors="replace").rstrip("\n")
        finally:
            if process.returncode is None:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
            await process.wait()

    def which(self, name: str) -> str | None:
        return shutil.which(name)

    @staticmethod
    def is_alive(process: asyncio.subprocess.Process) -> bool:
        return process.returncode is None

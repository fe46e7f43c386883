"""Interactive console model selection and asset installation.

The user picks a console model from a numbered menu; its device-tree
directory (``consoles/<real>``) and matching boot logo directory are
merged into the target directory (normally the root of the boot
partition), and a language marker file is dropped next to them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Sequence

from handheldkit.config.settings import ConsoleEntry
from handheldkit.domain.models import ConsoleOption, InstallReport
from handheldkit.dtb.copier import CopyError, copy_directory
from handheldkit.errors import ProvisioningError

logger = logging.getLogger(__name__)

QUIT_WORDS = frozenset({"q", "quit", "exit"})


class SourceNotFoundError(ProvisioningError):
    """Raised when a console's asset directory is missing."""


def options_from_config(entries: Sequence[ConsoleEntry]) -> list[ConsoleOption]:
    return [ConsoleOption(display=e.display, real=e.real, logo=e.logo) for e in entries]


def find_option(options: Sequence[ConsoleOption], name: str) -> ConsoleOption | None:
    """Look up an option by directory name or menu label, ignoring case."""
    wanted = name.strip().lower()
    for opt in options:
        if wanted in (opt.real.lower(), opt.display.lower()):
            return opt
    return None


class ConsoleSelector:
    """Numbered text menu over a list of console options.

    Input and output are injectable so the menu can be driven from tests.
    """

    def __init__(
        self,
        options: Sequence[ConsoleOption],
        title: str = "XIFAN",
        input_fn: Callable[[str], str] | None = None,
        output_fn: Callable[[str], None] | None = None,
    ) -> None:
        self._options = list(options)
        self._title = title
        self._input = input_fn
        self._output = output_fn

    def _read(self, prompt: str) -> str:
        # Builtins are looked up per call so a patched input() is honoured
        return self._input(prompt) if self._input is not None else input(prompt)

    def _write(self, text: str) -> None:
        if self._output is not None:
            self._output(text)
        else:
            print(text)

    def read_choice(self, prompt: str) -> int:
        """Read a menu number; quit words map to 0.

        Raises:
            EOFError: If input ends before a number is entered.
        """
        while True:
            resp = self._read(prompt).strip()
            if resp.lower() in QUIT_WORDS:
                return 0
            try:
                return int(resp)
            except ValueError:
                self._write("Enter a number, or q to quit")

    def show_menu(self) -> None:
        self._write(f"====== {self._title} model selection ======")
        for i, opt in enumerate(self._options, start=1):
            self._write(f"  {i}. {opt.display}")
        self._write("  0. Exit (or q)")
        self._write("=" * 27)

    def select(self) -> ConsoleOption | None:
        """Show the menu until a valid option is picked or the user quits."""
        self.show_menu()
        while True:
            choice = self.read_choice("Select: ")
            if choice == 0:
                return None
            if 0 < choice <= len(self._options):
                return self._options[choice - 1]
            self._write("Invalid choice, try again.")


def install(
    option: ConsoleOption,
    consoles_dir: Path | str,
    target_dir: Path | str = ".",
    marker: str | None = ".cn",
) -> InstallReport:
    """Copy a console's assets and logo into ``target_dir``.

    Raises:
        SourceNotFoundError: If ``consoles_dir/<real>`` does not exist.
        CopyError: If a copy step fails.
    """
    consoles_dir, target_dir = Path(consoles_dir), Path(target_dir)

    src = consoles_dir / option.real
    if not src.exists():
        raise SourceNotFoundError(f"Source directory not found: {src}", step="console")
    logger.info("Copying console %s from %s", option.display, src)
    try:
        files = copy_directory(src, target_dir)
    except OSError as e:
        raise CopyError(f"Failed to copy console {option.display}: {e}", step="console") from e

    logo_copied = False
    if option.logo:
        logo_src = consoles_dir / option.logo
        if logo_src.exists():
            logger.info("Copying logo %s", option.logo)
            try:
                files += copy_directory(logo_src, target_dir)
            except OSError as e:
                raise CopyError(f"Failed to copy logo {option.logo}: {e}", step="logo") from e
            logo_copied = True
        else:
            logger.warning("Logo directory %s not found, skipping", logo_src)

    marker_path = None
    if marker:
        marker_path = target_dir / marker
        try:
            marker_path.write_bytes(b"")
        except OSError as e:
            raise CopyError(f"Failed to create marker {marker_path}: {e}", step="marker") from e
        logger.info("Created language marker %s", marker_path)

    return InstallReport(
        option=option,
        files_copied=files,
        logo_copied=logo_copied,
        marker_path=marker_path,
    )

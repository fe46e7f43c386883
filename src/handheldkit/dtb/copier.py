"""File and directory copy helpers for console asset installation."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from handheldkit.errors import ProvisioningError

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 32 * 1024


class CopyError(ProvisioningError):
    """Raised when console assets cannot be copied."""


def copy_file(src: Path | str, dst: Path | str) -> None:
    """Copy one file, creating parent directories and truncating ``dst``."""
    src, dst = Path(src), Path(dst)
    with open(src, "rb") as fin:
        dst.parent.mkdir(parents=True, exist_ok=True)
        with open(dst, "wb") as fout:
            while True:
                chunk = fin.read(COPY_CHUNK_SIZE)
                if not chunk:
                    break
                fout.write(chunk)


def copy_directory(src: Path | str, dst: Path | str) -> int:
    """Merge the contents of ``src`` into ``dst`` recursively.

    Existing files in ``dst`` are overwritten; files only present in
    ``dst`` are left alone.

    Returns:
        Number of files copied.

    Raises:
        FileNotFoundError: If ``src`` does not exist.
        CopyError: If ``src`` is not a directory.
    """
    src, dst = Path(src), Path(dst)
    if not src.exists():
        raise FileNotFoundError(f"No such directory: {src}")
    if not src.is_dir():
        raise CopyError(f"Source is not a directory: {src}", step="copy")

    copied = 0
    for dirpath, dirnames, filenames in os.walk(src):
        rel = Path(dirpath).relative_to(src)
        (dst / rel).mkdir(parents=True, exist_ok=True)
        dirnames.sort()
        for name in sorted(filenames):
            copy_file(Path(dirpath) / name, dst / rel / name)
            copied += 1
    logger.debug("Copied %d files from %s to %s", copied, src, dst)
    return copied

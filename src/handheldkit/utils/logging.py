"""Logging setup for the handheldkit command-line tools.

Everything logs under the ``handheldkit`` logger. The OTG run log is
mirrored here too, so a log file keeps a record of each bring-up after
the dialog is gone.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from handheldkit.config.settings import LoggingConfig

PACKAGE_LOGGER = "handheldkit"


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Configure the ``handheldkit`` logger and return it.

    Existing handlers are replaced, so calling this twice does not
    duplicate output.

    Args:
        config: Logging configuration. If None, uses defaults
                (INFO level, stderr output).
    """
    if config is None:
        config = LoggingConfig()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)

    if config.console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        package_logger.addHandler(console_handler)

    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    if not package_logger.handlers:
        package_logger.addHandler(logging.NullHandler())

    package_logger.debug("Logging initialized at %s level", config.level)
    return package_logger

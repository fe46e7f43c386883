"""Console asset selector: device tree and boot logo installation.

Public API:
    ConsoleSelector -- numbered menu over console models
    install -- copy a model's assets into the boot partition
    copy_directory -- recursive merge copy
"""

from handheldkit.dtb.copier import CopyError, copy_directory, copy_file
from handheldkit.dtb.selector import (
    ConsoleSelector,
    SourceNotFoundError,
    find_option,
    install,
    options_from_config,
)

__all__ = [
    "ConsoleSelector",
    "CopyError",
    "SourceNotFoundError",
    "copy_directory",
    "copy_file",
    "find_option",
    "install",
    "options_from_config",
]

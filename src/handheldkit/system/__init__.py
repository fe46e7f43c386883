"""Thin layer over the host operating system's command-line utilities."""

from handheldkit.system.runner import CommandResult, CommandRunner

__all__ = ["CommandResult", "CommandRunner"]

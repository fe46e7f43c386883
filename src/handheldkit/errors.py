"""Exception hierarchy shared by the provisioning subsystems."""

from __future__ import annotations


class ProvisioningError(Exception):
    """Base class for failures while provisioning a device."""

    def __init__(self, message: str, step: str = "") -> None:
        super().__init__(message)
        self.step = step

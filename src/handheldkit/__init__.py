"""handheldkit -- provisioning tools for handheld retro gaming consoles.

Bundles the small jobs needed to prepare a handheld: copying the device
tree and boot logo for a chosen console model, exposing SSH over a USB-OTG
network gadget, and remapping the ADC gamepad keys on boards that need it.
"""

__version__ = "0.1.0"

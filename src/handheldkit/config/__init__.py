"""Configuration management for handheldkit.

Loads and validates YAML-based configuration with Pydantic models.
Supports environment variable overrides with the HANDHELDKIT_ prefix.
"""

from handheldkit.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]

"""Configuration management for Blueprint."""
from __future__ import annotations

from blueprint.config.paths import BlueprintPaths, get_paths, reset_paths
from blueprint.config.settings import Settings, get_settings_path, settings

__all__ = [
    "BlueprintPaths",
    "Settings",
    "get_paths",
    "get_settings_path",
    "reset_paths",
    "settings",
]

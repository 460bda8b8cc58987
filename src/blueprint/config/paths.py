"""Centralized path management for Blueprint.

Follows XDG Base Directory Specification:
- Config: $XDG_CONFIG_HOME/blueprint (default: ~/.config/blueprint)

Project snapshots live in the workspace, under ``.blueprint/projects/``.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _xdg_config_home() -> Path:
    """Get XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


@dataclass
class BlueprintPaths:
    """Centralized path management following XDG spec."""

    workspace: Path  # Current working directory

    # XDG config directory (computed once at init)
    _config_home: Path = field(default_factory=_xdg_config_home)

    # === WORKSPACE PATHS (project-local) ===

    @property
    def workspace_config(self) -> Path:
        """Workspace .blueprint/ directory."""
        return self.workspace / ".blueprint"

    @property
    def projects_dir(self) -> Path:
        """Workspace projects directory."""
        return self.workspace_config / "projects"

    @property
    def debug_log(self) -> Path:
        """Debug log: .blueprint/debug.log"""
        return self.workspace_config / "debug.log"

    # === GLOBAL PATHS (XDG compliant) ===

    @property
    def global_config_dir(self) -> Path:
        """Global config: ~/.config/blueprint/"""
        return self._config_home / "blueprint"

    @property
    def global_settings(self) -> Path:
        """Global settings file: ~/.config/blueprint/settings.json"""
        return self.global_config_dir / "settings.json"


# Singleton instance
_paths: BlueprintPaths | None = None


def get_paths(workspace: Path | None = None) -> BlueprintPaths:
    """Get the paths singleton.

    On first call, optionally set the workspace directory.
    Subsequent calls return the same instance.

    Args:
        workspace: The workspace directory. If not provided on first call,
                   defaults to current working directory.

    Returns:
        The BlueprintPaths singleton instance.
    """
    global _paths
    if _paths is None:
        _paths = BlueprintPaths(workspace=workspace or Path.cwd())
    return _paths


def reset_paths() -> None:
    """Reset paths singleton (for testing)."""
    global _paths
    _paths = None

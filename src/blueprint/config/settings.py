"""Configuration and settings persistence."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from blueprint.config.paths import get_paths
from blueprint.models.validation import UnmatchedActivityPolicy, ValidationPolicy

logger = logging.getLogger(__name__)

# Truthy spellings accepted by BLUEPRINT_STRICT
_TRUE_VALUES = {"1", "true", "yes", "on"}


def get_config_dir() -> Path:
    """Get the blueprint config directory, creating if needed.

    Returns XDG-compliant path: ~/.config/blueprint/
    """
    config_dir = get_paths().global_config_dir
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_settings_path() -> Path:
    """Get the path to the settings file."""
    return get_paths().global_settings


class Settings:
    """Persistent settings for Blueprint."""

    _defaults: dict[str, Any] = {}

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        """Load settings from disk."""
        path = get_settings_path()
        if path.exists():
            try:
                self._data = json.loads(path.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError):
                self._data = {}
        else:
            self._data = {}

    def _save(self) -> None:
        """Save settings to disk."""
        path = get_settings_path()
        try:
            get_config_dir()
            path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
            logger.info("Saved settings to %s: %s", path, self._data)
        except OSError as e:
            logger.error("Failed to save settings: %s", e)

    def get(self, key: str) -> Any:
        """Get a setting value, falling back to default."""
        return self._data.get(key, self._defaults.get(key))

    def set(self, key: str, value: Any) -> None:
        """Set a setting value and persist to disk."""
        self._data[key] = value
        self._save()

    @property
    def project_directory(self) -> Path:
        """Get the projects directory path.

        Returns the configured project directory, or defaults to
        the centralized paths workspace projects directory.
        """
        saved = self._data.get("project_directory")
        if saved:
            return Path(saved).expanduser().resolve()
        return get_paths().projects_dir

    @project_directory.setter
    def project_directory(self, value: str | Path) -> None:
        """Set the projects directory."""
        self.set("project_directory", str(value))

    # --- Validation Settings ---

    def _get_validation_settings(self) -> dict[str, Any]:
        raw = self._data.get("validation", {})
        if isinstance(raw, dict):
            return raw
        return {}

    def _set_validation_value(self, key: str, value: Any) -> None:
        validation = self._get_validation_settings()
        validation[key] = value
        self.set("validation", validation)

    def _get_threshold(self, key: str, default: int) -> int:
        raw = self._get_validation_settings().get(key, default)
        try:
            value = int(raw)
        except (TypeError, ValueError):
            return default
        return max(0, value)

    @property
    def strict_deliverables(self) -> bool:
        """Whether deliverable stages enforce their thresholds.

        Priority: BLUEPRINT_STRICT env var > settings > False
        """
        env = os.environ.get("BLUEPRINT_STRICT")
        if env is not None and env.strip():
            return env.strip().lower() in _TRUE_VALUES
        return bool(self._get_validation_settings().get("strict", False))

    @strict_deliverables.setter
    def strict_deliverables(self, value: bool) -> None:
        self._set_validation_value("strict", bool(value))

    @property
    def min_phases(self) -> int:
        """Minimum phases before leaving the phases stage."""
        return self._get_threshold("min_phases", 2)

    @min_phases.setter
    def min_phases(self, value: int) -> None:
        self._set_validation_value("min_phases", max(0, int(value)))

    @property
    def min_milestones(self) -> int:
        """Minimum milestones in strict mode."""
        return self._get_threshold("min_milestones", 1)

    @min_milestones.setter
    def min_milestones(self, value: int) -> None:
        self._set_validation_value("min_milestones", max(0, int(value)))

    @property
    def min_rubric_criteria(self) -> int:
        """Minimum rubric criteria in strict mode."""
        return self._get_threshold("min_rubric_criteria", 2)

    @min_rubric_criteria.setter
    def min_rubric_criteria(self, value: int) -> None:
        self._set_validation_value("min_rubric_criteria", max(0, int(value)))

    @property
    def require_impact(self) -> bool:
        """Whether strict mode requires an impact plan."""
        return bool(self._get_validation_settings().get("require_impact", True))

    @require_impact.setter
    def require_impact(self, value: bool) -> None:
        self._set_validation_value("require_impact", bool(value))

    @property
    def unmatched_activity_policy(self) -> UnmatchedActivityPolicy:
        """What to do with activities that name no known phase."""
        raw = str(self._get_validation_settings().get("unmatched_activities", ""))
        try:
            return UnmatchedActivityPolicy(raw.strip().lower())
        except ValueError:
            return UnmatchedActivityPolicy.FIRST_PHASE

    @unmatched_activity_policy.setter
    def unmatched_activity_policy(self, value: UnmatchedActivityPolicy | str) -> None:
        policy = UnmatchedActivityPolicy(
            value.value if isinstance(value, UnmatchedActivityPolicy) else value
        )
        self._set_validation_value("unmatched_activities", policy.value)

    def validation_policy(self, strict: bool | None = None) -> ValidationPolicy:
        """Build the gate policy from settings.

        Args:
            strict: Overrides ``strict_deliverables`` when given.
        """
        return ValidationPolicy(
            strict=self.strict_deliverables if strict is None else strict,
            min_phases=self.min_phases,
            min_milestones=self.min_milestones,
            min_rubric_criteria=self.min_rubric_criteria,
            require_impact=self.require_impact,
            unmatched_activities=self.unmatched_activity_policy,
        )


# Global settings instance
settings = Settings()

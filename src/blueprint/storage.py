"""Snapshot persistence.

The session depends only on the ``SnapshotStore`` shape, so any backend
offering ``load``/``save`` by project id can be plugged in.
"""

from __future__ import annotations

import copy
import json
import logging
import re
import tempfile
from pathlib import Path
from typing import Any, Protocol

from blueprint.models.schema import dumps_snapshot

logger = logging.getLogger(__name__)

SNAPSHOT_FILENAME = "journey.json"


def slugify(name: str) -> str:
    """Convert a project name to a filesystem-friendly slug.

    Examples:
        "Water Quality Study" -> "water-quality-study"
        "Grade 7: Bridges" -> "grade-7-bridges"
    """
    slug = name.lower()
    slug = re.sub(r"[\s_.]+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    return slug or "unnamed-project"


class SnapshotStore(Protocol):
    """Load and save snapshots by project id."""

    def load(self, project_id: str) -> dict[str, Any] | None: ...

    def save(self, project_id: str, snapshot: dict[str, Any]) -> None: ...


class MemorySnapshotStore:
    """In-process store, mainly for tests and embedding."""

    def __init__(self) -> None:
        self._snapshots: dict[str, dict[str, Any]] = {}

    def load(self, project_id: str) -> dict[str, Any] | None:
        snapshot = self._snapshots.get(project_id)
        return copy.deepcopy(snapshot) if snapshot is not None else None

    def save(self, project_id: str, snapshot: dict[str, Any]) -> None:
        self._snapshots[project_id] = copy.deepcopy(snapshot)

    def project_ids(self) -> list[str]:
        return sorted(self._snapshots)


class JsonFileSnapshotStore:
    """One ``<root>/<slug>/journey.json`` file per project."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, project_id: str) -> Path:
        return self.root / slugify(project_id) / SNAPSHOT_FILENAME

    def exists(self, project_id: str) -> bool:
        return self.path_for(project_id).exists()

    def load(self, project_id: str) -> dict[str, Any] | None:
        """Read a snapshot; unreadable files are logged and treated as missing."""
        path = self.path_for(project_id)
        if not path.exists():
            return None
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not read snapshot %s: %s", path, e)
            return None
        if not isinstance(raw, dict):
            logger.warning("Snapshot %s is not a JSON object", path)
            return None
        return raw

    def save(self, project_id: str, snapshot: dict[str, Any]) -> None:
        """Write a snapshot atomically (temp file, then rename)."""
        path = self.path_for(project_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=path.parent,
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_path = Path(handle.name)
                handle.write(dumps_snapshot(snapshot))
            temp_path.replace(path)
        except Exception:
            # Clean up temp file on error
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise
        logger.debug("Saved snapshot for %s to %s", project_id, path)

    def project_ids(self) -> list[str]:
        """Slugs of every project with a snapshot under the root."""
        if not self.root.exists():
            return []
        return sorted(
            entry.name
            for entry in self.root.iterdir()
            if (entry / SNAPSHOT_FILENAME).exists()
        )

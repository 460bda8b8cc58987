"""Schema versioning for journey snapshots.

A snapshot is the plain-data form of a ``JourneyMachine``:

    {"version": "1", "state": "JOURNEY_PHASES", "data": {...},
     "furthestState": ..., "skipped": [...], "editMode": false, "history": [...]}

Version bumps are additive, so a newer snapshot is still read best-effort.
Older snapshots are upgraded one step at a time through registered
migrators. Exports from the first release carried no version and a
``currentIndex`` instead of a state name; they are treated as version "0".
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

from blueprint.models.journey import STATE_ORDER

logger = logging.getLogger(__name__)

CURRENT_VERSION = "1"
LEGACY_VERSION = "0"


class SnapshotError(Exception):
    """Base exception for snapshot-related errors."""

    pass


class MigrationNotFoundError(SnapshotError):
    """Raised when no migration path exists."""

    def __init__(self, from_version: str, to_version: str) -> None:
        self.from_version = from_version
        self.to_version = to_version
        super().__init__(f"No snapshot migration from {from_version} to {to_version}")


class InvalidSnapshotError(SnapshotError):
    """Raised when a snapshot cannot be read at all."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid snapshot: {message}")


# Migration registry
Migrator = Callable[[dict[str, Any]], dict[str, Any]]
MIGRATORS: dict[str, tuple[str, Migrator]] = {}


def register_migrator(from_version: str, to_version: str) -> Callable[[Migrator], Migrator]:
    """Decorator to register a snapshot migration step.

    Example:
        @register_migrator("1", "2")
        def migrate_1_to_2(snapshot: dict) -> dict:
            ...
    """

    def decorator(fn: Migrator) -> Migrator:
        MIGRATORS[from_version] = (to_version, fn)
        logger.debug("Registered snapshot migrator: %s -> %s", from_version, to_version)
        return fn

    return decorator


def snapshot_version(snapshot: Mapping[str, Any]) -> str:
    """Return the schema version a snapshot was written with."""
    version = snapshot.get("version")
    if version is None:
        if "currentIndex" in snapshot:
            return LEGACY_VERSION
        logger.debug("Snapshot has no version; reading as %s", CURRENT_VERSION)
        return CURRENT_VERSION
    return str(version)


def _is_newer(version: str) -> bool:
    try:
        return int(version) > int(CURRENT_VERSION)
    except ValueError:
        return False


def migrate_snapshot(snapshot: Any) -> dict[str, Any]:
    """Upgrade a snapshot to the current version.

    Returns:
        A new dict at CURRENT_VERSION (or at its own version when it is
        newer than this release understands).

    Raises:
        InvalidSnapshotError: If the snapshot is not a mapping.
        MigrationNotFoundError: If an older version has no migration path.
    """
    if not isinstance(snapshot, Mapping):
        raise InvalidSnapshotError(f"expected an object, got {type(snapshot).__name__}")

    result = dict(snapshot)
    version = snapshot_version(result)
    seen: set[str] = set()

    while version != CURRENT_VERSION:
        if _is_newer(version):
            logger.warning(
                "Snapshot version %s is newer than %s; reading best-effort",
                version,
                CURRENT_VERSION,
            )
            return result
        step = MIGRATORS.get(version)
        if step is None or version in seen:
            raise MigrationNotFoundError(version, CURRENT_VERSION)
        seen.add(version)
        target, migrator = step
        logger.info("Migrating snapshot from %s to %s", version, target)
        result = migrator(result)
        result["version"] = target
        version = target

    result["version"] = CURRENT_VERSION
    return result


def dumps_snapshot(snapshot: Mapping[str, Any]) -> str:
    """Serialize a snapshot to JSON text."""
    return json.dumps(snapshot, indent=2, ensure_ascii=False)


def loads_snapshot(text: str) -> dict[str, Any]:
    """Parse JSON text and migrate it to the current version.

    Raises:
        InvalidSnapshotError: If the text is not a JSON object.
        MigrationNotFoundError: If the version cannot be upgraded.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidSnapshotError(f"not valid JSON ({e})") from e
    return migrate_snapshot(raw)


# =============================================================================
# Legacy Migration (0 -> 1)
# =============================================================================


def _legacy_milestone(raw: Any) -> Any:
    """Turn ``dueWeek: 3`` into ``dueLabel: "Week 3"``."""
    if not isinstance(raw, Mapping):
        return raw
    milestone = dict(raw)
    week = milestone.pop("dueWeek", None)
    if week is not None and not milestone.get("dueLabel"):
        milestone["dueLabel"] = f"Week {week}"
    return milestone


@register_migrator(LEGACY_VERSION, "1")
def _migrate_legacy(snapshot: dict[str, Any]) -> dict[str, Any]:
    """Convert the unversioned ``{currentIndex, data, editMode, history}`` export.

    The index becomes a state name, ``dueWeek`` becomes ``dueLabel`` and
    the ``{state, timestamp}`` history entries become transition records.
    """
    index = snapshot.get("currentIndex")
    if not isinstance(index, int) or isinstance(index, bool):
        index = 0
    index = min(max(index, 0), len(STATE_ORDER) - 1)
    state = STATE_ORDER[index]

    data = snapshot.get("data")
    if isinstance(data, Mapping):
        data = dict(data)
        deliverables = data.get("deliverables")
        if isinstance(deliverables, Mapping):
            deliverables = dict(deliverables)
            milestones = deliverables.get("milestones")
            if isinstance(milestones, list):
                deliverables["milestones"] = [_legacy_milestone(m) for m in milestones]
            data["deliverables"] = deliverables

    history: list[dict[str, str]] = []
    previous: str | None = None
    raw_history = snapshot.get("history")
    for entry in raw_history if isinstance(raw_history, list) else []:
        if not isinstance(entry, Mapping) or not entry.get("state"):
            continue
        current = str(entry["state"])
        if previous is not None and previous != current:
            history.append(
                {
                    "from": previous,
                    "to": current,
                    "at": str(entry.get("timestamp", "")),
                    "reason": "legacy",
                }
            )
        previous = current

    return {
        "version": "1",
        "state": state.value,
        "data": data if data is not None else {},
        "furthestState": state.value,
        "skipped": [],
        "editMode": bool(snapshot.get("editMode", False)),
        "history": history,
    }

"""Tests for snapshot versioning and migration."""

import json
from typing import Any

import pytest

from blueprint.models import schema
from blueprint.models.schema import (
    CURRENT_VERSION,
    MIGRATORS,
    InvalidSnapshotError,
    MigrationNotFoundError,
    dumps_snapshot,
    loads_snapshot,
    migrate_snapshot,
    snapshot_version,
)


def _legacy_snapshot(**overrides: Any) -> dict[str, Any]:
    snapshot: dict[str, Any] = {
        "currentIndex": 2,
        "data": {
            "phases": [{"id": "p1", "name": "Research"}],
            "deliverables": {
                "milestones": [{"id": "m1", "name": "Kickoff", "dueWeek": 3}],
            },
        },
        "editMode": False,
        "history": [
            {"state": "JOURNEY_OVERVIEW", "timestamp": "2024-01-01T00:00:00Z"},
            {"state": "JOURNEY_PHASES", "timestamp": "2024-01-01T00:05:00Z"},
            {"state": "JOURNEY_ACTIVITIES", "timestamp": "2024-01-01T00:09:00Z"},
        ],
    }
    snapshot.update(overrides)
    return snapshot


class TestSnapshotVersion:
    """Tests for version detection."""

    def test_explicit_version(self) -> None:
        assert snapshot_version({"version": 1}) == "1"

    def test_legacy_detected_by_index(self) -> None:
        assert snapshot_version({"currentIndex": 0}) == "0"

    def test_unversioned_snapshot_read_as_current(self) -> None:
        assert snapshot_version({"state": "COMPLETE"}) == CURRENT_VERSION


class TestLegacyMigration:
    """Tests for the unversioned export migrator."""

    def test_index_becomes_state(self) -> None:
        migrated = migrate_snapshot(_legacy_snapshot())
        assert migrated["version"] == CURRENT_VERSION
        assert migrated["state"] == "JOURNEY_ACTIVITIES"
        assert migrated["furthestState"] == "JOURNEY_ACTIVITIES"
        assert migrated["skipped"] == []

    def test_index_is_clamped(self) -> None:
        assert migrate_snapshot(_legacy_snapshot(currentIndex=99))["state"] == "COMPLETE"
        assert migrate_snapshot(_legacy_snapshot(currentIndex=-4))["state"] == "JOURNEY_OVERVIEW"

    def test_due_week_becomes_label(self) -> None:
        migrated = migrate_snapshot(_legacy_snapshot())
        milestone = migrated["data"]["deliverables"]["milestones"][0]
        assert milestone["dueLabel"] == "Week 3"
        assert "dueWeek" not in milestone

    def test_history_becomes_transitions(self) -> None:
        history = migrate_snapshot(_legacy_snapshot())["history"]
        assert history == [
            {
                "from": "JOURNEY_OVERVIEW",
                "to": "JOURNEY_PHASES",
                "at": "2024-01-01T00:05:00Z",
                "reason": "legacy",
            },
            {
                "from": "JOURNEY_PHASES",
                "to": "JOURNEY_ACTIVITIES",
                "at": "2024-01-01T00:09:00Z",
                "reason": "legacy",
            },
        ]

    def test_input_not_modified(self) -> None:
        legacy = _legacy_snapshot()
        migrate_snapshot(legacy)
        assert legacy["data"]["deliverables"]["milestones"][0]["dueWeek"] == 3


class TestMigrateSnapshot:
    """Tests for the migration chain."""

    def test_current_snapshot_passes_through(self) -> None:
        snapshot = {"version": "1", "state": "JOURNEY_PHASES", "data": {}}
        assert migrate_snapshot(snapshot) == snapshot

    def test_newer_version_read_best_effort(self) -> None:
        snapshot = {"version": "7", "state": "JOURNEY_PHASES", "extra": True}
        assert migrate_snapshot(snapshot) == snapshot

    def test_unknown_older_version_raises(self) -> None:
        with pytest.raises(MigrationNotFoundError) as exc_info:
            migrate_snapshot({"version": "0.5"})
        assert exc_info.value.from_version == "0.5"
        assert exc_info.value.to_version == CURRENT_VERSION

    def test_not_a_mapping(self) -> None:
        with pytest.raises(InvalidSnapshotError):
            migrate_snapshot(["JOURNEY_PHASES"])

    def test_chain_of_migrators(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A legacy snapshot is upgraded step by step to the newest version."""

        def add_title(snapshot: dict[str, Any]) -> dict[str, Any]:
            return {**snapshot, "title": "untitled"}

        monkeypatch.setattr(schema, "CURRENT_VERSION", "2")
        monkeypatch.setitem(MIGRATORS, "1", ("2", add_title))

        migrated = migrate_snapshot(_legacy_snapshot())
        assert migrated["version"] == "2"
        assert migrated["title"] == "untitled"
        assert migrated["state"] == "JOURNEY_ACTIVITIES"


class TestSnapshotText:
    """Tests for the JSON helpers."""

    def test_loads_migrates(self) -> None:
        snapshot = loads_snapshot(json.dumps(_legacy_snapshot()))
        assert snapshot["state"] == "JOURNEY_ACTIVITIES"

    def test_loads_rejects_bad_json(self) -> None:
        with pytest.raises(InvalidSnapshotError, match="not valid JSON"):
            loads_snapshot("{oops")

    def test_loads_rejects_non_object(self) -> None:
        with pytest.raises(InvalidSnapshotError):
            loads_snapshot("[1, 2]")

    def test_dumps_keeps_unicode(self) -> None:
        text = dumps_snapshot({"version": "1", "data": {"reflections": ["café"]}})
        assert "café" in text

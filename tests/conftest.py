from __future__ import annotations

import copy
from collections.abc import Iterator
from pathlib import Path

import pytest

from blueprint.config.paths import reset_paths
from blueprint.config.settings import settings


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Prevent tests from persisting settings to disk or reading user overrides."""
    original_data = copy.deepcopy(settings._data)

    def _noop_save() -> None:
        return None

    monkeypatch.setattr(settings, "_save", _noop_save)
    monkeypatch.delenv("BLUEPRINT_STRICT", raising=False)
    settings._data = {}
    try:
        yield
    finally:
        settings._data = original_data


@pytest.fixture(autouse=True)
def isolate_workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Run each test from its own workspace directory."""
    monkeypatch.chdir(tmp_path)
    reset_paths()
    try:
        yield tmp_path
    finally:
        reset_paths()

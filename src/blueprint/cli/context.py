"""Shared context helpers for CLI command modules."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from blueprint.config.settings import settings
from blueprint.models.validation import ValidationPolicy
from blueprint.session import WorkflowSession
from blueprint.storage import JsonFileSnapshotStore, slugify


def get_projects_root() -> Path:
    """Return the resolved projects root (honors user override)."""
    return settings.project_directory


def get_store() -> JsonFileSnapshotStore:
    return JsonFileSnapshotStore(get_projects_root())


def policy_from_args(args: argparse.Namespace) -> ValidationPolicy:
    """Build the gate policy from settings and the --strict flag."""
    strict = True if getattr(args, "strict", False) else None
    return settings.validation_policy(strict=strict)


def open_session_or_error(args: argparse.Namespace) -> WorkflowSession | None:
    """Open the session for ``args.project`` or print an error and return None."""
    store = get_store()
    slug = slugify(args.project)
    if not store.exists(slug):
        print(f"Error: Project '{args.project}' not found", file=sys.stderr)
        print(f"  Looked in: {store.root}", file=sys.stderr)
        return None

    session = WorkflowSession(slug, store, policy=policy_from_args(args))
    result = session.open()
    if result is None or not result.success:
        print(f"Error: Could not load project '{args.project}'", file=sys.stderr)
        return None
    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    return session

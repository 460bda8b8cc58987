"""Import command for journey snapshots."""

from __future__ import annotations

import argparse
import sys

from blueprint.cli.context import get_store, policy_from_args
from blueprint.models.schema import SnapshotError, loads_snapshot
from blueprint.session import WorkflowSession
from blueprint.storage import slugify


def _default_slug(args: argparse.Namespace) -> str:
    name = args.file.name
    for suffix in (".journey.json", ".json"):
        if name.endswith(suffix):
            name = name[: -len(suffix)]
            break
    return slugify(name)


def cmd_import(args: argparse.Namespace) -> int:
    """Load a snapshot file into a project, replacing its journey."""
    try:
        text = args.file.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1

    try:
        snapshot = loads_snapshot(text)
    except SnapshotError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    slug = slugify(args.project) if args.project else _default_slug(args)
    session = WorkflowSession(slug, get_store(), policy=policy_from_args(args))
    result = session.import_snapshot(snapshot)
    if not result.success:
        print(f"Error: {result.message}", file=sys.stderr)
        return 1

    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    print(f"Imported {args.file} into project: {slug}")
    print(f"  Stage: {session.machine.state.value}")
    return 0

"""New and list commands."""

from __future__ import annotations

import argparse
import sys

from blueprint.cli.context import get_store, policy_from_args
from blueprint.models.schema import CURRENT_VERSION
from blueprint.session import WorkflowSession
from blueprint.storage import slugify


def cmd_new(args: argparse.Namespace) -> int:
    """Create an empty project snapshot."""
    store = get_store()
    slug = slugify(args.project)
    if store.exists(slug) and not args.force:
        print(f"Error: Project '{slug}' already exists", file=sys.stderr)
        print("  Use --force to start it over", file=sys.stderr)
        return 1

    session = WorkflowSession(slug, store, policy=policy_from_args(args))
    session.save()
    print(f"Created project: {slug}")
    print(f"  Path: {store.path_for(slug)}")
    print()
    print(session.prompt())
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """List projects and the stage each one is at."""
    store = get_store()
    slugs = store.project_ids()
    if not slugs:
        print("No projects found.")
        print(f"  Looked in: {store.root}")
        return 0

    for slug in slugs:
        snapshot = store.load(slug) or {}
        state = snapshot.get("state", "unreadable")
        version = snapshot.get("version", "?")
        suffix = "" if str(version) == CURRENT_VERSION else f" (snapshot v{version})"
        print(f"{slug}: {state}{suffix}")
    return 0

"""Export command for journey snapshots."""

from __future__ import annotations

import argparse

from blueprint.cli.context import open_session_or_error
from blueprint.models.schema import dumps_snapshot


def cmd_export(args: argparse.Namespace) -> int:
    """Write a project's snapshot to a file or stdout."""
    session = open_session_or_error(args)
    if session is None:
        return 1

    text = dumps_snapshot(session.export())
    if args.output is None:
        print(text)
        return 0

    args.output.write_text(text + "\n", encoding="utf-8")
    print(f"Exported {session.project_id} to {args.output}")
    return 0

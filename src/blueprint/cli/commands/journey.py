"""Navigation commands: advance, skip, edit and reset."""

from __future__ import annotations

import argparse
import sys

from blueprint.cli.context import open_session_or_error
from blueprint.models.machine import TransitionResult
from blueprint.session import WorkflowSession


def _report(session: WorkflowSession, result: TransitionResult) -> int:
    if not result.success:
        print(f"Error: {result.message}", file=sys.stderr)
        return 1
    state = result.new_state if result.new_state is not None else session.machine.state
    print(f"Now at {state.value}")
    print(session.prompt())
    return 0


def cmd_advance(args: argparse.Namespace) -> int:
    """Move to the next stage if the current one is complete."""
    session = open_session_or_error(args)
    if session is None:
        return 1
    return _report(session, session.advance())


def cmd_skip(args: argparse.Namespace) -> int:
    """Skip an optional stage."""
    session = open_session_or_error(args)
    if session is None:
        return 1
    return _report(session, session.skip())


def cmd_edit(args: argparse.Namespace) -> int:
    """Return to an earlier stage."""
    session = open_session_or_error(args)
    if session is None:
        return 1
    return _report(session, session.edit(args.state))


def cmd_reset(args: argparse.Namespace) -> int:
    """Start the project over, optionally keeping some data."""
    session = open_session_or_error(args)
    if session is None:
        return 1

    preserve: bool | list[str] = True if args.keep_upstream else (args.keep or False)
    session.reset(preserve)
    kept = (
        "ideation, phases, reflections"
        if preserve is True
        else ", ".join(preserve or []) or "nothing"
    )
    print(f"Reset {session.project_id} (kept: {kept})")
    print(session.prompt())
    return 0

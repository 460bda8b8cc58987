"""Conversational commands: say, chat and input."""

from __future__ import annotations

import argparse
import sys

from blueprint.cli.context import open_session_or_error
from blueprint.session import TurnOutcome

EXIT_WORDS = {"quit", "exit", ":q"}


def _print_outcome(outcome: TurnOutcome) -> None:
    print(outcome.message)
    if outcome.pending is not None:
        print("(reply 'yes' to confirm, or tell me what to change)")


def cmd_say(args: argparse.Namespace) -> int:
    """Run one conversational turn.

    A confirmation prompt is not remembered between invocations; use
    ``chat`` to answer one.
    """
    session = open_session_or_error(args)
    if session is None:
        return 1
    outcome = session.handle(" ".join(args.text))
    _print_outcome(outcome)
    return 0


def cmd_chat(args: argparse.Namespace) -> int:
    """Read messages from stdin until EOF or 'quit'."""
    session = open_session_or_error(args)
    if session is None:
        return 1

    print(session.prompt())
    for line in sys.stdin:
        text = line.strip()
        if text.lower() in EXIT_WORDS:
            break
        if not text:
            continue
        _print_outcome(session.handle(text))
        if session.machine.is_complete:
            break
    return 0


def cmd_input(args: argparse.Namespace) -> int:
    """Parse text for the current stage and store it."""
    session = open_session_or_error(args)
    if session is None:
        return 1

    result = session.process_input(" ".join(args.text).replace("\\n", "\n"))
    if not result.success:
        print(f"Error: {result.message}", file=sys.stderr)
        return 1

    for group in result.unmatched_groups:
        first = session.machine.data.phases[0].name
        print(f"Warning: '{group}' matched no phase; added to '{first}'", file=sys.stderr)
    if result.ready_for_next:
        print("Saved. Ready for the next stage (run 'advance').")
    else:
        print(f"Saved. {result.message}")
    return 0

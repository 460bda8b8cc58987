"""Argument parser construction for Blueprint CLI."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path

from blueprint.models.entities import JourneyData


def _add_project(parser: argparse.ArgumentParser, help_text: str) -> None:
    parser.add_argument("project", help=help_text)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level CLI parser."""
    parser = argparse.ArgumentParser(
        description="Blueprint - stage-gated project design for educators"
    )
    parser.add_argument(
        "--workdir",
        "-w",
        type=Path,
        help="Working directory for project artifacts (default: current directory)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Enforce milestone, rubric and impact requirements",
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("list", help="List projects in the workspace")

    new_parser = subparsers.add_parser("new", help="Start a new project design")
    _add_project(new_parser, "Project name or slug")
    new_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing project",
    )

    status_parser = subparsers.add_parser("status", help="Show where a project stands")
    _add_project(status_parser, "Project slug")

    say_parser = subparsers.add_parser(
        "say",
        help="Send one conversational message to a project",
    )
    _add_project(say_parser, "Project slug")
    say_parser.add_argument("text", nargs="+", help="What to say")

    chat_parser = subparsers.add_parser(
        "chat",
        help="Design a project interactively (reads messages from stdin)",
    )
    _add_project(chat_parser, "Project slug")

    input_parser = subparsers.add_parser(
        "input",
        help="Add structured text to the current stage without advancing",
    )
    _add_project(input_parser, "Project slug")
    input_parser.add_argument("text", nargs="+", help="Text for the current stage")

    advance_parser = subparsers.add_parser("advance", help="Move to the next stage")
    _add_project(advance_parser, "Project slug")

    skip_parser = subparsers.add_parser("skip", help="Skip an optional stage")
    _add_project(skip_parser, "Project slug")

    edit_parser = subparsers.add_parser(
        "edit",
        help="Return to a stage that was already reached",
    )
    _add_project(edit_parser, "Project slug")
    edit_parser.add_argument(
        "state",
        help="Stage to return to (e.g. JOURNEY_PHASES or phases)",
    )

    reset_parser = subparsers.add_parser("reset", help="Start a project over")
    _add_project(reset_parser, "Project slug")
    keep_group = reset_parser.add_mutually_exclusive_group()
    keep_group.add_argument(
        "--keep",
        action="append",
        choices=JourneyData.FIELDS,
        metavar="FIELD",
        help=f"Data to keep; repeatable ({', '.join(JourneyData.FIELDS)})",
    )
    keep_group.add_argument(
        "--keep-upstream",
        action="store_true",
        help="Keep ideation, phases and reflections",
    )

    export_parser = subparsers.add_parser("export", help="Export a project snapshot")
    _add_project(export_parser, "Project slug to export")
    export_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output file path (default: print to stdout)",
    )

    import_parser = subparsers.add_parser("import", help="Import a project snapshot")
    import_parser.add_argument("file", type=Path, help="Path to a snapshot JSON file")
    import_parser.add_argument(
        "--project",
        "-p",
        help="Project slug to import into (default: from file name)",
    )

    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments from argv (or sys.argv when omitted)."""
    parser = build_parser()
    if argv is None:
        return parser.parse_args()
    return parser.parse_args(list(argv))

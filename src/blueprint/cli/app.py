"""CLI orchestration and command routing."""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Callable, Sequence
from pathlib import Path

from blueprint.cli.commands import (
    cmd_advance,
    cmd_chat,
    cmd_edit,
    cmd_export,
    cmd_import,
    cmd_input,
    cmd_list,
    cmd_new,
    cmd_reset,
    cmd_say,
    cmd_skip,
    cmd_status,
)
from blueprint.cli.parser import parse_args
from blueprint.config.paths import get_paths, reset_paths

logger = logging.getLogger(__name__)


def dispatch(args: argparse.Namespace) -> int:
    """Route parsed args to the correct command handler."""
    command_handlers: dict[str, Callable[[argparse.Namespace], int]] = {
        "list": cmd_list,
        "new": cmd_new,
        "status": cmd_status,
        "say": cmd_say,
        "chat": cmd_chat,
        "input": cmd_input,
        "advance": cmd_advance,
        "skip": cmd_skip,
        "edit": cmd_edit,
        "reset": cmd_reset,
        "export": cmd_export,
        "import": cmd_import,
    }

    if args.command is None:
        return cmd_list(args)

    handler = command_handlers.get(args.command)
    if handler is None:
        return cmd_list(args)

    return handler(args)


def run(
    argv: Sequence[str] | None = None,
    *,
    configure_logging: Callable[[], None] | None = None,
) -> int:
    """Parse args, apply shared CLI setup, and execute command."""
    args = parse_args(argv)

    if args.workdir:
        workdir = args.workdir.resolve()
        workdir.mkdir(parents=True, exist_ok=True)
        os.chdir(workdir)
        # Paths were bound to the old cwd when settings loaded
        reset_paths()
        get_paths(workdir)

    if configure_logging is not None:
        configure_logging()

    logger.info("Working directory: %s", Path.cwd())
    return dispatch(args)

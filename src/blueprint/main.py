"""Main module for blueprint."""

import logging
import os
import sys

from blueprint.cli.app import run
from blueprint.config.paths import get_paths
from blueprint.config.settings import settings


def setup_logging() -> None:
    """Configure logging to file for debugging."""
    paths = get_paths()
    paths.workspace_config.mkdir(parents=True, exist_ok=True)
    log_file = paths.debug_log

    # Set level from env var, default to INFO
    level = os.environ.get("BLUEPRINT_LOG_LEVEL", "INFO").upper()

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_file, mode="a"),
        ],
    )
    logging.info("Blueprint starting, logging to %s", log_file)
    logging.info("Projects root: %s", settings.project_directory)


def main() -> None:
    """Entry point for the Blueprint CLI."""
    sys.exit(run(configure_logging=setup_logging))


if __name__ == "__main__":
    main()

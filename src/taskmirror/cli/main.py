# src/taskmirror/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (re-hydrating the local task cache),
loads the first page when configured and online, then runs the console REPL.
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..tasks.task_fetcher import FetchError
from ..tasks.task_persistence import MemoryTaskPersistence

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="taskmirror", description="Console task list synced with an Airtable table.")
    parser.add_argument("--offline", action="store_true", help="start offline (no loading, edits fail)")
    parser.add_argument("--no-persist", action="store_true", help="keep the task cache in memory only")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    settings = get_settings()

    setup_logging(settings)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(
        settings=settings,
        persistence=MemoryTaskPersistence() if args.no_persist else None,
    )
    if args.offline:
        state.connectivity.online = False

    with asyncio.Runner() as runner:
        try:
            if state.is_configured and state.connectivity.is_online():
                result = runner.run(state.loader.load_more())
                if isinstance(result, FetchError):
                    logger.warning("First page failed to load; showing cached tasks. Use /more to retry.")

            run_console_loop(state, runner)
        finally:
            runner.run(state.client.aclose())
            logger.info("Bye.")


if __name__ == "__main__":
    main()

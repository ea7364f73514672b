# src/taskmirror/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

CONFIG_BANNER = (
    "[CONFIG] Remote table is not configured: set TASKMIRROR_AIRTABLE_TOKEN, "
    "TASKMIRROR_AIRTABLE_BASE and TASKMIRROR_AIRTABLE_TABLE (in .env) to sync tasks."
)
OFFLINE_BANNER = "[OFFLINE] Loading is paused and edits will fail until you are back online (/online)."


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _banners(state: AppState) -> list[str]:
    out: list[str] = []
    if not state.is_configured:
        out.append(CONFIG_BANNER)
    if not state.connectivity.is_online():
        out.append(OFFLINE_BANNER)
    return out


def run_console_loop(state: AppState, runner: asyncio.Runner) -> None:
    """
    Blocking REPL. Every command runs to completion on `runner`'s event loop
    (the same loop the HTTP client is bound to) before the next prompt.
    """
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /list to see open tasks, /help for commands, /exit to quit.\n")

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    shown: list[str] = []

    while True:
        banners = _banners(state)
        if banners != shown:
            for line in banners:
                _print_ts(line)
            shown = banners

        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            _print_ts("Commands start with '/'. Use /help to list them.")
            continue

        try:
            reply = runner.run(command_registry.handle(state, user_input, emit=emit))
        except KeyboardInterrupt:
            _print_ts("Interrupted.")
            continue
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is not None:
            print(f"[{_ts_local()}] {reply}")

    logger.info("Console connector finished.")

# src/taskmirror/core/notify.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class LoggingNotifier:
    """Notifier that only writes to the log (headless runs)."""

    def success(self, text: str) -> None:
        logger.info("%s", text)

    def error(self, text: str) -> None:
        logger.warning("%s", text)


class ConsoleNotifier(LoggingNotifier):
    """Prints notifications as timestamped console lines, and logs them."""

    def success(self, text: str) -> None:
        super().success(text)
        print(f"[{_ts_local()}] [ok] {text}", flush=True)

    def error(self, text: str) -> None:
        super().error(text)
        print(f"[{_ts_local()}] [error] {text}", flush=True)


@dataclass(slots=True)
class StaticConnectivity:
    """Connectivity flag flipped explicitly (console /online and /offline)."""

    online: bool = True

    def is_online(self) -> bool:
        return self.online

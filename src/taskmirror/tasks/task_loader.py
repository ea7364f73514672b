# src/taskmirror/tasks/task_loader.py

from __future__ import annotations

"""
Pagination loop driving the fetcher into the store.

The loader owns the cursor (never persisted):
- first page -> store.replace_all
- later pages -> store.append
- stops on Exhausted, on a page without a successor, or on FetchError

A busy flag keeps page requests from overlapping. An in-flight request cannot
be cancelled, and a hung request keeps the loader busy.
"""

import logging

from ..core.ports import Connectivity
from .task_fetcher import DEFAULT_PAGE_SIZE, FetchError, PageResult, TaskFetcher
from .task_store import TaskStore

logger = logging.getLogger(__name__)


class TaskLoader:
    def __init__(
        self,
        fetcher: TaskFetcher,
        store: TaskStore,
        *,
        connectivity: Connectivity | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._connectivity = connectivity
        self.page_size = page_size

        self.cursor: str | None = None
        self.has_more = True
        self.busy = False
        self.pages_loaded = 0
        self.last_error: Exception | None = None

    def reset(self) -> None:
        """Forget the cursor; the next load replaces the cache again."""
        self.cursor = None
        self.has_more = True
        self.pages_loaded = 0
        self.last_error = None

    def retry(self) -> bool:
        """Re-open the loop after a FetchError. Returns False if there was no error."""
        if self.last_error is None:
            return False
        self.last_error = None
        self.has_more = True
        return True

    def can_load(self) -> bool:
        if self.busy or not self.has_more:
            return False
        if self._connectivity is not None and not self._connectivity.is_online():
            return False
        return True

    async def load_more(self) -> PageResult | None:
        """Load the next page. Returns None when gated (offline / busy / exhausted)."""
        if not self.can_load():
            logger.debug(
                "load_more skipped (busy=%s has_more=%s)",
                self.busy,
                self.has_more,
            )
            return None

        self.busy = True
        try:
            first = self.pages_loaded == 0
            result = await self._fetcher.load_page(self.cursor, self.page_size)

            if isinstance(result, FetchError):
                # Keep the cursor so retry() resumes at the failed page.
                self.last_error = result.error
                self.has_more = False
                return result

            if first:
                self._store.replace_all(result.tasks)
            else:
                self._store.append(result.tasks)

            self.pages_loaded += 1
            self.last_error = None
            self.cursor = result.next_cursor
            self.has_more = result.has_more
            logger.info(
                "Loaded page %d: %d tasks (has_more=%s)",
                self.pages_loaded,
                len(result.tasks),
                self.has_more,
            )
            return result
        finally:
            self.busy = False

    async def load_all(self) -> int:
        """Page until the loop stops. Returns the number of tasks received."""
        received = 0
        while True:
            result = await self.load_more()
            if result is None:
                break
            received += len(result.tasks)
        return received

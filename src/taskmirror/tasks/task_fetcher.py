# src/taskmirror/tasks/task_fetcher.py

from __future__ import annotations

"""
Paginated task fetcher.

One call = one page, sorted ascending by due date. Failures never escape:
the caller gets a FetchError result and stops paging instead of retrying.

has_more is a heuristic: a page with exactly page_size records is assumed to
have a successor. A table whose size is an exact multiple of page_size
therefore costs one extra request that comes back Exhausted.
"""

import logging
from dataclasses import dataclass, field

from ..core.ports import RecordTable
from .record_mapper import FIELD_DUE_DATE, from_remote_record
from .task_models import Task

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 25


@dataclass(slots=True, frozen=True)
class Page:
    tasks: list[Task]
    next_cursor: str | None = None

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None


@dataclass(slots=True, frozen=True)
class Exhausted:
    """The remote returned no records for this cursor."""

    tasks: list[Task] = field(default_factory=list)
    next_cursor: None = None

    @property
    def has_more(self) -> bool:
        return False


@dataclass(slots=True, frozen=True)
class FetchError:
    """Loading failed; paging stops. tasks is always empty."""

    error: Exception
    tasks: list[Task] = field(default_factory=list)
    next_cursor: None = None

    @property
    def has_more(self) -> bool:
        return False


PageResult = Page | Exhausted | FetchError


class TaskFetcher:
    def __init__(self, table: RecordTable) -> None:
        self._table = table

    async def load_page(self, cursor: str | None = None, page_size: int = DEFAULT_PAGE_SIZE) -> PageResult:
        try:
            records = await self._table.select(
                page_size=page_size,
                sort_field=FIELD_DUE_DATE,
                direction="asc",
                offset=cursor,
            )
            tasks = [from_remote_record(r) for r in records]
        except Exception as e:
            logger.warning("Failed to load tasks (cursor=%s): %s", cursor, e)
            return FetchError(error=e)

        if not tasks:
            logger.debug("No tasks at cursor=%s; exhausted", cursor)
            return Exhausted()

        next_cursor = tasks[-1].id if len(tasks) == page_size else None
        logger.debug("Loaded page: %d tasks, next_cursor=%s", len(tasks), next_cursor)
        return Page(tasks=tasks, next_cursor=next_cursor)

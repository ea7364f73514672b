# src/taskmirror/tasks/task_store.py

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone
from typing import Any

from ..core.errors import OfflineError, RemoteServiceError
from ..core.ports import Connectivity, Notifier, RecordTable, TaskPersistence
from .record_mapper import to_remote_fields
from .task_models import DELAY_OPTIONS, NewTask, Task, TaskStatus

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = frozenset(f.name for f in dataclasses.fields(Task)) - {"id"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStore:
    """
    Authoritative in-memory task cache mirroring the remote table.

    Mutation flow (create / update / advance_status / delay):
    - resolve the cached task (unknown id -> silent no-op, returns None)
    - build the merged task and send the FULL field set to the remote
    - only after the remote acknowledged: commit locally, persist, notify
    - on failure: notify, leave the cache untouched, re-raise

    Concurrency:
    - meant for a single event loop; two in-flight mutations of the same id
      are not serialized (the last response to land wins)
    """

    def __init__(
        self,
        table: RecordTable,
        persistence: TaskPersistence,
        notifier: Notifier,
        *,
        connectivity: Connectivity | None = None,
        clock: Callable[[], datetime] = _utcnow,
        tasks: Iterable[Task] | None = None,
    ) -> None:
        self._table = table
        self._persistence = persistence
        self._notifier = notifier
        self._connectivity = connectivity
        self._clock = clock
        self._tasks: list[Task] = list(tasks or [])
        self.selected_task_id: str | None = None

    @classmethod
    def hydrate(
        cls,
        table: RecordTable,
        persistence: TaskPersistence,
        notifier: Notifier,
        **kwargs: Any,
    ) -> TaskStore:
        """Build a store pre-filled from persistence (call before any UI reads it)."""
        return cls(table, persistence, notifier, tasks=persistence.load(), **kwargs)

    # ---- read API ----

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def get(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    @property
    def selected_task(self) -> Task | None:
        if self.selected_task_id is None:
            return None
        return self.get(self.selected_task_id)

    def select_task(self, task_id: str | None) -> None:
        self.selected_task_id = task_id

    # ---- bulk (pagination) ----

    def replace_all(self, tasks: Iterable[Task]) -> None:
        self._tasks = list(tasks)
        self._persist()

    def append(self, tasks: Iterable[Task]) -> None:
        """
        Append a later page in arrival order.

        A record already cached (page re-fetched) is refreshed in place instead
        of being duplicated.
        """
        index = {t.id: i for i, t in enumerate(self._tasks)}
        refreshed = 0
        for task in tasks:
            pos = index.get(task.id)
            if pos is not None:
                self._tasks[pos] = task
                refreshed += 1
                continue
            index[task.id] = len(self._tasks)
            self._tasks.append(task)
        if refreshed:
            logger.debug("append: refreshed %d already cached tasks", refreshed)
        self._persist()

    # ---- mutations ----

    async def create(self, new_task: NewTask) -> Task:
        try:
            self._ensure_online()
            record = await self._table.create(to_remote_fields(new_task))
            record_id = record.get("id")
            if not record_id:
                raise RemoteServiceError("Failed to create task: no id returned")
        except Exception:
            logger.exception("Failed to create task title=%r", new_task.title)
            self._notifier.error("Failed to create task")
            raise

        task = new_task.with_id(str(record_id))
        self._tasks.append(task)
        self._persist()
        logger.info("Task created id=%s", task.id)
        self._notifier.success("Task created successfully")
        return task

    async def update(self, task_id: str, **changes: Any) -> Task | None:
        def merge(task: Task) -> Task:
            unknown = set(changes) - _EDITABLE_FIELDS
            if unknown:
                raise TypeError(f"Unknown task fields: {', '.join(sorted(unknown))}")
            fields = dict(changes)
            if "status" in fields:
                fields["status"] = TaskStatus(fields["status"])
            return dataclasses.replace(task, **fields)

        return await self._sync(
            task_id,
            merge,
            success="Task updated successfully",
            failure="Failed to update task",
        )

    async def advance_status(self, task_id: str, status: TaskStatus | str) -> Task | None:
        new_status = TaskStatus(status)

        def merge(task: Task) -> Task:
            if new_status is TaskStatus.DONE:
                # Never cleared when the status later moves back.
                return dataclasses.replace(task, status=new_status, completed_date=self._clock())
            return dataclasses.replace(task, status=new_status)

        return await self._sync(
            task_id,
            merge,
            success=f"Task marked as {new_status.value}",
            failure="Failed to update task status",
        )

    async def delay(self, task_id: str, days: int) -> Task | None:
        if days not in DELAY_OPTIONS:
            raise ValueError(f"days must be one of {DELAY_OPTIONS}, got {days!r}")

        def merge(task: Task) -> Task:
            if task.due_date is None:
                raise ValueError(f"Task {task.id} has no valid due date to delay")
            return dataclasses.replace(task, due_date=task.due_date + timedelta(days=days))

        return await self._sync(
            task_id,
            merge,
            success=f"Task delayed by {days} day{'s' if days > 1 else ''}",
            failure="Failed to delay task",
        )

    # ---- internals ----

    def _ensure_online(self) -> None:
        if self._connectivity is not None and not self._connectivity.is_online():
            raise OfflineError("Offline: changes are not queued, try again when back online")

    async def _sync(
        self,
        task_id: str,
        merge: Callable[[Task], Task],
        *,
        success: str,
        failure: str,
    ) -> Task | None:
        current = self.get(task_id)
        if current is None:
            logger.debug("Task %s not in cache; nothing to sync", task_id)
            return None

        try:
            self._ensure_online()
            updated = merge(current)
            await self._table.update(updated.id, to_remote_fields(updated))
        except Exception:
            logger.exception("%s id=%s", failure, task_id)
            self._notifier.error(failure)
            raise

        self._commit(updated)
        self._notifier.success(success)
        return updated

    def _commit(self, updated: Task) -> None:
        self._tasks = [updated if t.id == updated.id else t for t in self._tasks]
        self._persist()
        logger.info("Task %s committed (status=%s)", updated.id, updated.status.value)

    def _persist(self) -> None:
        try:
            self._persistence.save(self._tasks)
        except Exception:
            # The remote already holds the change; only the local copy is stale.
            logger.exception("Failed to persist task cache")

# src/taskmirror/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task store, fetcher and loader depend on Protocols instead of concrete
implementations, so the remote service, local storage and user-facing
notifications can be swapped for in-memory fakes in tests.
"""

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import Task

RemoteRecord = dict[str, Any]
# Raw remote record: {"id": "rec...", "fields": {...}, "createdTime": "..."}.


class RecordTable(Protocol):
    """Remote record table (one base + table of the spreadsheet service)."""

    async def select(
        self,
        *,
        page_size: int,
        sort_field: str | None = None,
        direction: str = "asc",
        offset: str | None = None,
    ) -> list[RemoteRecord]: ...

    async def create(self, fields: dict[str, Any]) -> RemoteRecord: ...

    async def update(self, record_id: str, fields: dict[str, Any]) -> RemoteRecord: ...


class TaskPersistence(Protocol):
    """Durable local copy of the task cache."""

    def load(self) -> list[Task]: ...
    def save(self, tasks: list[Task]) -> None: ...


class Notifier(Protocol):
    """Transient user-facing notifications (success / failure of an operation)."""

    def success(self, text: str) -> None: ...
    def error(self, text: str) -> None: ...


class Connectivity(Protocol):
    def is_online(self) -> bool: ...

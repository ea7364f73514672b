# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from taskmirror.core.errors import RemoteServiceError
from taskmirror.core.ports import RecordTable, RemoteRecord


def make_record(
    record_id: str,
    title: str = "Task",
    *,
    status: str = "To do",
    due: str | None = "2024-01-01",
    notes: str | None = None,
    completed: str | None = None,
    photos: list[str] | None = None,
) -> RemoteRecord:
    fields: dict[str, Any] = {"Task": title, "Status": status}
    if due is not None:
        fields["To Do Date"] = due
    if notes is not None:
        fields["Notes"] = notes
    if completed is not None:
        fields["Completed Date"] = completed
    if photos:
        fields["Photos"] = [{"id": f"att{i}", "url": u, "filename": f"p{i}.jpg"} for i, u in enumerate(photos)]
    return {"id": record_id, "createdTime": "2024-01-01T00:00:00.000Z", "fields": fields}


@dataclass(slots=True)
class SelectCall:
    page_size: int
    sort_field: str | None
    direction: str
    offset: str | None


class FakeRecordTable(RecordTable):
    """
    In-memory RecordTable.

    - Captures calls for assertions
    - select() pages over `records`, treating offset as "after this record id"
    - fail_next / fail_select inject RemoteServiceError
    """

    def __init__(self, records: list[RemoteRecord] | None = None) -> None:
        self.records: list[RemoteRecord] = list(records or [])
        self.selects: list[SelectCall] = []
        self.creates: list[dict[str, Any]] = []
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.fail_next = False
        self.fail_select = False
        self._next_id = 1

    def _maybe_fail(self) -> None:
        if self.fail_next:
            self.fail_next = False
            raise RemoteServiceError("simulated transport error")

    async def select(
        self,
        *,
        page_size: int,
        sort_field: str | None = None,
        direction: str = "asc",
        offset: str | None = None,
    ) -> list[RemoteRecord]:
        self.selects.append(SelectCall(page_size, sort_field, direction, offset))
        if self.fail_select:
            raise RemoteServiceError("simulated transport error")
        start = 0
        if offset is not None:
            ids = [r["id"] for r in self.records]
            start = ids.index(offset) + 1
        return self.records[start : start + page_size]

    async def create(self, fields: dict[str, Any]) -> RemoteRecord:
        self._maybe_fail()
        self.creates.append(fields)
        record = {"id": f"recNEW{self._next_id}", "fields": dict(fields)}
        self._next_id += 1
        self.records.append(record)
        return record

    async def update(self, record_id: str, fields: dict[str, Any]) -> RemoteRecord:
        self._maybe_fail()
        self.updates.append((record_id, fields))
        return {"id": record_id, "fields": dict(fields)}

    # Meta / upload calls used by console commands.

    async def list_bases(self) -> list[dict[str, str]]:
        return [{"id": "appTEST", "name": "Test base"}]

    async def list_tables(self, base_id: str | None = None) -> list[dict[str, str]]:
        return [{"id": "tblTEST", "name": "Tasks"}]

    async def upload_image(self, endpoint: str, *, filename: str, content: bytes, content_type: str = "") -> str:
        return f"https://files.example.com/{filename}"


@dataclass(slots=True)
class RecordingNotifier:
    successes: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def success(self, text: str) -> None:
        self.successes.append(text)

    def error(self, text: str) -> None:
        self.errors.append(text)


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

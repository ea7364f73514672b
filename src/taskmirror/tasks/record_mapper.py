# src/taskmirror/tasks/record_mapper.py

"""
Conversion between remote records and local Task objects.

Remote records look like {"id": "rec...", "fields": {"Task": ..., "Notes": ...}}.
Both directions are pure; fields missing on one side are omitted, not defaulted.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from .task_models import NewTask, Priority, Task, TaskStatus

logger = logging.getLogger(__name__)

FIELD_TITLE = "Task"
FIELD_NOTES = "Notes"
FIELD_STATUS = "Status"
FIELD_DUE_DATE = "To Do Date"
FIELD_COMPLETED_DATE = "Completed Date"
FIELD_PHOTOS = "Photos"


def parse_remote_date(raw: Any) -> datetime | None:
    """
    Parse a remote date ("2024-01-01" or a full ISO timestamp) into an aware UTC datetime.

    Returns None for missing or malformed values instead of raising.
    """
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        dt = datetime.fromisoformat(raw.strip())
    except ValueError:
        logger.debug("Unparseable remote date %r", raw)
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_remote_date(dt: datetime) -> str:
    """Calendar date (UTC) without a time component."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.date().isoformat()


def _image_urls(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    urls: list[str] = []
    for item in raw:
        if isinstance(item, dict) and isinstance(item.get("url"), str):
            urls.append(item["url"])
    return urls


def from_remote_record(record: dict[str, Any]) -> Task:
    fields = record.get("fields") or {}

    return Task(
        id=str(record["id"]),
        title=str(fields.get(FIELD_TITLE) or ""),
        description=str(fields.get(FIELD_NOTES) or ""),
        status=TaskStatus.from_remote(fields.get(FIELD_STATUS)),
        due_date=parse_remote_date(fields.get(FIELD_DUE_DATE)),
        completed_date=parse_remote_date(fields.get(FIELD_COMPLETED_DATE)),
        priority=Priority.MEDIUM,
        images=_image_urls(fields.get(FIELD_PHOTOS)),
        # The remote table has no assignee column.
        assignee_id=None,
    )


def to_remote_fields(task: Task | NewTask) -> dict[str, Any]:
    fields: dict[str, Any] = {
        FIELD_TITLE: task.title,
        FIELD_NOTES: task.description,
        FIELD_STATUS: task.status.value,
    }
    if task.due_date is not None:
        fields[FIELD_DUE_DATE] = format_remote_date(task.due_date)
    if task.completed_date is not None:
        fields[FIELD_COMPLETED_DATE] = format_remote_date(task.completed_date)
    fields[FIELD_PHOTOS] = [{"url": url} for url in task.images]
    return fields

# src/taskmirror/tasks/task_persistence.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .task_models import Employee, Priority, Task, TaskStatus

logger = logging.getLogger(__name__)

STORAGE_NAME = "task-storage"
STORAGE_VERSION = 1
EMPLOYEES_FILE_NAME = "employees.json"


def _date_to_text(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt is not None else None


def _text_to_date(raw: Any) -> datetime | None:
    if not isinstance(raw, str) or not raw:
        return None
    try:
        dt = datetime.fromisoformat(raw)
    except ValueError:
        return None
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "status": task.status.value,
        "dueDate": _date_to_text(task.due_date),
        "completedDate": _date_to_text(task.completed_date),
        "priority": task.priority.value,
        "images": list(task.images),
        "assigneeId": task.assignee_id,
    }


def task_from_dict(data: dict[str, Any]) -> Task:
    try:
        priority = Priority(data.get("priority") or Priority.MEDIUM)
    except ValueError:
        priority = Priority.MEDIUM
    images = data.get("images")
    return Task(
        id=str(data["id"]),
        title=str(data.get("title") or ""),
        description=str(data.get("description") or ""),
        status=TaskStatus.from_remote(data.get("status")),
        due_date=_text_to_date(data.get("dueDate")),
        completed_date=_text_to_date(data.get("completedDate")),
        priority=priority,
        images=[str(u) for u in images] if isinstance(images, list) else [],
        assignee_id=data.get("assigneeId"),
    )


class JsonTaskPersistence:
    """
    Task cache persisted as one JSON blob ("task-storage") on disk.

    Load is best-effort: a missing, empty or corrupt file means "first run"
    and yields an empty list. Save is atomic (tmp file + os.replace).
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Task]:
        if not self._path.exists():
            logger.info("No task storage at %s; starting empty", self._path)
            return []
        try:
            raw = self._path.read_text("utf-8")
            if not raw.strip():
                return []
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            logger.exception("Failed to read task storage from %s; starting empty", self._path)
            return []

        state = data.get("state") if isinstance(data, dict) else None
        items = state.get("tasks") if isinstance(state, dict) else None
        if not isinstance(items, list):
            logger.warning("Task storage at %s has no task list; starting empty", self._path)
            return []

        tasks: list[Task] = []
        for item in items:
            if not isinstance(item, dict) or "id" not in item:
                continue
            tasks.append(task_from_dict(item))
        logger.info("Loaded %d tasks from %s", len(tasks), self._path)
        return tasks

    def save(self, tasks: list[Task]) -> None:
        payload = {
            "name": STORAGE_NAME,
            "version": STORAGE_VERSION,
            "state": {"tasks": [task_to_dict(t) for t in tasks]},
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, self._path)
        with contextlib.suppress(OSError):
            os.chmod(self._path, 0o600)
        logger.debug("Saved %d tasks to %s", len(tasks), self._path)


class MemoryTaskPersistence:
    """In-process persistence (tests, --no-persist runs). Stores serialized copies."""

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self._items: list[dict[str, Any]] = [task_to_dict(t) for t in tasks or []]
        self.saves = 0

    def load(self) -> list[Task]:
        return [task_from_dict(d) for d in self._items]

    def save(self, tasks: list[Task]) -> None:
        self._items = [task_to_dict(t) for t in tasks]
        self.saves += 1


def load_employees(path: str | Path) -> list[Employee]:
    """
    Read the read-only employee directory: a JSON list of {"id", "name", "avatar"}.

    Missing or unreadable files give an empty directory; malformed entries are skipped.
    """
    path = Path(path)
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text("utf-8") or "[]")
    except (OSError, json.JSONDecodeError):
        logger.exception("Failed to read employee directory from %s", path)
        return []
    if not isinstance(data, list):
        logger.warning("Employee directory at %s is not a list; ignoring it", path)
        return []

    employees: list[Employee] = []
    for item in data:
        if not isinstance(item, dict) or not item.get("id"):
            continue
        employees.append(
            Employee(
                id=str(item["id"]),
                name=str(item.get("name") or item["id"]),
                avatar=str(item.get("avatar") or ""),
            )
        )
    logger.info("Loaded %d employees from %s", len(employees), path)
    return employees

# src/taskmirror/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

DELAY_OPTIONS: tuple[int, ...] = (1, 2, 7, 14)


class TaskStatus(StrEnum):
    """
    Task lifecycle status, spelled exactly like the remote single-select options.

    The "advance" action walks TO_DO -> IN_PROGRESS -> DONE one step at a time;
    a direct edit may assign any value.
    """

    TO_DO = "To do"
    IN_PROGRESS = "In progress"
    DONE = "Done"

    @classmethod
    def from_remote(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.TO_DO
        try:
            return cls(raw)
        except ValueError:
            return cls.TO_DO


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(slots=True)
class Task:
    """
    Local mirror of one remote record.

    due_date is None when the remote value was missing or malformed
    (the "invalid date" sentinel); formatting renders it as "No date set".
    """

    id: str
    title: str
    status: TaskStatus
    due_date: datetime | None
    description: str = ""
    completed_date: datetime | None = None
    priority: Priority = Priority.MEDIUM
    images: list[str] = field(default_factory=list)
    assignee_id: str | None = None


@dataclass(slots=True)
class NewTask:
    """A task that has not been created remotely yet (no id)."""

    title: str
    status: TaskStatus
    due_date: datetime | None
    description: str = ""
    completed_date: datetime | None = None
    priority: Priority = Priority.MEDIUM
    images: list[str] = field(default_factory=list)
    assignee_id: str | None = None

    def with_id(self, task_id: str) -> Task:
        return Task(
            id=task_id,
            title=self.title,
            status=self.status,
            due_date=self.due_date,
            description=self.description,
            completed_date=self.completed_date,
            priority=self.priority,
            images=list(self.images),
            assignee_id=self.assignee_id,
        )


@dataclass(frozen=True, slots=True)
class Employee:
    id: str
    name: str
    avatar: str

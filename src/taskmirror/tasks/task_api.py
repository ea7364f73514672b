# src/taskmirror/tasks/task_api.py

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from .task_models import Employee, Task, TaskStatus

NO_DATE_LABEL = "No date set"

DELAY_LABELS: dict[int, str] = {
    1: "1 day",
    2: "2 days",
    7: "1 week",
    14: "2 weeks",
}


def next_status(status: TaskStatus) -> TaskStatus:
    """The "advance" action: To do -> In progress -> Done (Done stays Done)."""
    if status is TaskStatus.TO_DO:
        return TaskStatus.IN_PROGRESS
    return TaskStatus.DONE


def format_due_date(dt: datetime | None, *, long: bool = False) -> str:
    """Render like "Jan 8, 2024" ("January 8, 2024" with long=True); None renders as NO_DATE_LABEL."""
    if dt is None:
        return NO_DATE_LABEL
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    month = dt.strftime("%B" if long else "%b")
    return f"{month} {dt.day}, {dt.year}"


def open_tasks(tasks: Iterable[Task]) -> list[Task]:
    """
    Tasks that are not Done, soonest due first.

    Tasks without a valid due date sort first (they count as epoch).
    """
    epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
    pending = [t for t in tasks if t.status is not TaskStatus.DONE]
    return sorted(pending, key=lambda t: t.due_date or epoch)


def find_employee(employees: Iterable[Employee], employee_id: str | None) -> Employee | None:
    if not employee_id:
        return None
    return next((e for e in employees if e.id == employee_id), None)


def describe_task(task: Task, employees: Iterable[Employee] = ()) -> str:
    lines = [
        f"{task.title}  [{task.status.value}]",
        f"  id: {task.id}",
        f"  due: {format_due_date(task.due_date, long=True)}",
    ]
    if task.completed_date is not None:
        lines.append(f"  completed: {format_due_date(task.completed_date, long=True)}")
    # Unknown assignee ids are not shown.
    assignee = find_employee(employees, task.assignee_id)
    if assignee is not None:
        lines.append(f"  assignee: {assignee.name}")
    if task.description:
        lines.append(f"  notes: {task.description}")
    for url in task.images:
        lines.append(f"  photo: {url}")
    return "\n".join(lines)

# tests/test_record_mapper.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from taskmirror.tasks.record_mapper import (
    format_remote_date,
    from_remote_record,
    parse_remote_date,
    to_remote_fields,
)
from taskmirror.tasks.task_models import Priority, Task, TaskStatus

from .fakes import make_record


def test_from_remote_record_maps_all_fields() -> None:
    record = make_record(
        "recA",
        "Buy milk",
        status="In progress",
        due="2024-02-10",
        notes="2 litres",
        completed="2024-02-11",
        photos=["https://x/1.jpg", "https://x/2.jpg"],
    )

    task = from_remote_record(record)

    assert task.id == "recA"
    assert task.title == "Buy milk"
    assert task.description == "2 litres"
    assert task.status is TaskStatus.IN_PROGRESS
    assert task.due_date == datetime(2024, 2, 10, tzinfo=timezone.utc)
    assert task.completed_date == datetime(2024, 2, 11, tzinfo=timezone.utc)
    assert task.images == ["https://x/1.jpg", "https://x/2.jpg"]
    assert task.priority is Priority.MEDIUM
    assert task.assignee_id is None


def test_from_remote_record_soft_failures() -> None:
    record = {"id": "recB", "fields": {"Task": "No date", "To Do Date": "not-a-date", "Status": "Blocked"}}

    task = from_remote_record(record)

    assert task.due_date is None
    assert task.completed_date is None
    assert task.description == ""
    assert task.images == []
    # Unknown single-select values fall back to the first state.
    assert task.status is TaskStatus.TO_DO


def test_parse_remote_date_variants() -> None:
    assert parse_remote_date("2024-01-01") == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert parse_remote_date("2024-01-01T12:00:00.000Z") == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
    assert parse_remote_date(None) is None
    assert parse_remote_date("") is None
    assert parse_remote_date(20240101) is None


def test_to_remote_fields_shape() -> None:
    task = Task(
        id="recC",
        title="Call mum",
        status=TaskStatus.TO_DO,
        due_date=datetime(2024, 5, 1, 18, 45, tzinfo=timezone.utc),
        images=["https://x/a.png"],
    )

    fields = to_remote_fields(task)

    assert fields == {
        "Task": "Call mum",
        "Notes": "",
        "Status": "To do",
        "To Do Date": "2024-05-01",
        "Photos": [{"url": "https://x/a.png"}],
    }
    assert "Completed Date" not in fields


def test_format_remote_date_uses_utc_calendar_day() -> None:
    plus_two = timezone(timedelta(hours=2))
    # 01:00 at +02:00 is still the previous day in UTC.
    assert format_remote_date(datetime(2024, 1, 2, 1, 0, tzinfo=plus_two)) == "2024-01-01"


def test_round_trip_preserves_fields() -> None:
    with_completed = Task(
        id="recD",
        title="Ship release",
        description="v1.2",
        status=TaskStatus.DONE,
        due_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        completed_date=datetime(2024, 1, 3, tzinfo=timezone.utc),
        images=["https://x/1.jpg"],
    )
    without_completed = Task(
        id="recE",
        title="Draft notes",
        status=TaskStatus.TO_DO,
        due_date=datetime(2024, 6, 30, tzinfo=timezone.utc),
    )

    for original in (with_completed, without_completed):
        back = from_remote_record({"id": original.id, "fields": to_remote_fields(original)})
        assert back.title == original.title
        assert back.description == original.description
        assert back.status == original.status
        assert back.due_date == original.due_date
        assert back.images == original.images
        assert back.completed_date == original.completed_date

# tests/test_task_persistence.py

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from taskmirror.tasks.task_models import Task, TaskStatus
from taskmirror.tasks.task_persistence import JsonTaskPersistence, load_employees
from taskmirror.tasks.task_store import TaskStore

from .fakes import FakeRecordTable, RecordingNotifier


def _done_task() -> Task:
    return Task(
        id="recDone",
        title="File taxes",
        description="Before April",
        status=TaskStatus.DONE,
        due_date=datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc),
        completed_date=datetime(2024, 3, 2, 17, 5, 30, tzinfo=timezone.utc),
        images=["https://x/receipt.png"],
    )


def test_round_trip_rehydrates_dates(tmp_path: Path) -> None:
    path = tmp_path / "task-storage.json"
    open_task = Task(id="recOpen", title="Open", status=TaskStatus.TO_DO, due_date=None)

    JsonTaskPersistence(path).save([_done_task(), open_task])
    loaded = JsonTaskPersistence(path).load()

    assert len(loaded) == 2
    done = loaded[0]
    assert isinstance(done.completed_date, datetime)
    assert done.completed_date == _done_task().completed_date
    assert done.due_date == _done_task().due_date
    assert done == _done_task()
    assert loaded[1].due_date is None
    assert loaded[1].completed_date is None


def test_dates_are_stored_as_text(tmp_path: Path) -> None:
    path = tmp_path / "task-storage.json"
    JsonTaskPersistence(path).save([_done_task()])

    data = json.loads(path.read_text("utf-8"))
    stored = data["state"]["tasks"][0]
    assert stored["completedDate"] == "2024-03-02T17:05:30+00:00"
    assert stored["dueDate"] == "2024-03-01T08:00:00+00:00"
    assert data["name"] == "task-storage"


def test_missing_empty_and_corrupt_storage_start_empty(tmp_path: Path) -> None:
    missing = tmp_path / "nope" / "task-storage.json"
    assert JsonTaskPersistence(missing).load() == []

    empty = tmp_path / "empty.json"
    empty.write_text("", "utf-8")
    assert JsonTaskPersistence(empty).load() == []

    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json", "utf-8")
    assert JsonTaskPersistence(corrupt).load() == []

    wrong_shape = tmp_path / "shape.json"
    wrong_shape.write_text(json.dumps({"state": {"tasks": "oops"}}), "utf-8")
    assert JsonTaskPersistence(wrong_shape).load() == []

    state_not_object = tmp_path / "state.json"
    state_not_object.write_text(json.dumps({"state": []}), "utf-8")
    assert JsonTaskPersistence(state_not_object).load() == []

    not_object = tmp_path / "list.json"
    not_object.write_text(json.dumps([1, 2]), "utf-8")
    assert JsonTaskPersistence(not_object).load() == []


def test_save_creates_parent_dirs(tmp_path: Path) -> None:
    path = tmp_path / "a" / "b" / "task-storage.json"
    JsonTaskPersistence(path).save([])
    assert path.exists()
    assert not path.with_suffix(".tmp").exists()


def test_store_hydrates_from_persistence(tmp_path: Path) -> None:
    persistence = JsonTaskPersistence(tmp_path / "task-storage.json")
    persistence.save([_done_task()])

    store = TaskStore.hydrate(FakeRecordTable(), persistence, RecordingNotifier())

    assert [t.id for t in store.tasks] == ["recDone"]
    assert store.get("recDone").completed_date == _done_task().completed_date


def test_load_employees_skips_bad_entries(tmp_path: Path) -> None:
    path = tmp_path / "employees.json"
    path.write_text(
        json.dumps(
            [
                {"id": "emp1", "name": "Ada Park", "avatar": "https://img.example.com/ada.png"},
                {"name": "No id"},
                "junk",
                {"id": "emp2"},
            ]
        ),
        "utf-8",
    )

    staff = load_employees(path)

    assert [(e.id, e.name, e.avatar) for e in staff] == [
        ("emp1", "Ada Park", "https://img.example.com/ada.png"),
        ("emp2", "emp2", ""),
    ]


def test_load_employees_missing_or_corrupt_is_empty(tmp_path: Path) -> None:
    assert load_employees(tmp_path / "nope.json") == []

    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("[{", "utf-8")
    assert load_employees(corrupt) == []

    not_list = tmp_path / "obj.json"
    not_list.write_text(json.dumps({"emp1": "Ada"}), "utf-8")
    assert load_employees(not_list) == []

# tests/test_bootstrap.py

from __future__ import annotations

import json

from taskmirror.cli.bootstrap import create_initial_state
from taskmirror.tasks.task_models import Task, TaskStatus
from taskmirror.tasks.task_persistence import EMPLOYEES_FILE_NAME, JsonTaskPersistence

from .fakes import FakeRecordTable, RecordingNotifier


def test_bootstrap_hydrates_store_before_use(settings) -> None:
    JsonTaskPersistence(settings.task_storage_path).save(
        [Task(id="recK", title="Kept", status=TaskStatus.TO_DO, due_date=None)]
    )

    state = create_initial_state(settings=settings, client=FakeRecordTable(), notifier=RecordingNotifier())

    assert [t.id for t in state.store.tasks] == ["recK"]
    assert state.connectivity.is_online() is True
    assert state.loader.page_size == 25
    assert state.employees == []


def test_bootstrap_reads_employee_directory(settings) -> None:
    (settings.data_dir / EMPLOYEES_FILE_NAME).write_text(
        json.dumps([{"id": "emp1", "name": "Ada Park", "avatar": "https://img.example.com/ada.png"}]),
        "utf-8",
    )

    state = create_initial_state(settings=settings, client=FakeRecordTable(), notifier=RecordingNotifier())

    assert [(e.id, e.name) for e in state.employees] == [("emp1", "Ada Park")]

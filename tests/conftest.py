# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskmirror.core.notify import StaticConnectivity
from taskmirror.core.state import AppState
from taskmirror.tasks.task_fetcher import TaskFetcher
from taskmirror.tasks.task_loader import TaskLoader
from taskmirror.tasks.task_models import Task, TaskStatus
from taskmirror.tasks.task_persistence import MemoryTaskPersistence
from taskmirror.tasks.task_store import TaskStore

from .fakes import FakeRecordTable, FixedClock, RecordingNotifier

NOW = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the developer's .env.
    """
    return SimpleNamespace(
        is_configured=True,
        page_size=25,
        upload_endpoint="https://upload.example.com",
        data_dir=tmp_path,
        task_storage_path=tmp_path / "task-storage.json",
        start_online=True,
    )


@pytest.fixture()
def table() -> FakeRecordTable:
    return FakeRecordTable()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def persistence() -> MemoryTaskPersistence:
    return MemoryTaskPersistence()


@pytest.fixture()
def connectivity() -> StaticConnectivity:
    return StaticConnectivity(online=True)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture()
def sample_task() -> Task:
    return Task(
        id="rec1",
        title="Water plants",
        description="Balcony only",
        status=TaskStatus.TO_DO,
        due_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        images=["https://img.example.com/a.jpg"],
    )


@pytest.fixture()
def store(table, persistence, notifier, connectivity, clock, sample_task) -> TaskStore:
    """Store pre-filled with one task (rec1); the fake table is empty."""
    return TaskStore(
        table,
        persistence,
        notifier,
        connectivity=connectivity,
        clock=clock,
        tasks=[sample_task],
    )


@pytest.fixture()
def state(settings, table, store, connectivity) -> AppState:
    """AppState wired with in-memory fakes."""
    loader = TaskLoader(TaskFetcher(table), store, connectivity=connectivity, page_size=settings.page_size)
    return AppState(
        settings=settings,
        client=table,
        store=store,
        loader=loader,
        connectivity=connectivity,
    )

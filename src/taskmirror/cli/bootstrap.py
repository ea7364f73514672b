# src/taskmirror/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the remote client, persistence and notifier into the task store,
- re-hydrates the persisted task cache before anything renders it,
- reads the employee directory used to show assignees.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.notify import ConsoleNotifier, StaticConnectivity
from ..core.ports import Notifier, TaskPersistence
from ..core.state import AppState
from ..remote.airtable_client import AirtableClient
from ..tasks.task_fetcher import TaskFetcher
from ..tasks.task_loader import TaskLoader
from ..tasks.task_persistence import EMPLOYEES_FILE_NAME, JsonTaskPersistence, load_employees
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.task_storage_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    persistence: TaskPersistence | None = None,
    notifier: Notifier | None = None,
    client: AirtableClient | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping collaborators injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if client is None:
        client = AirtableClient.from_settings(settings)
    if persistence is None:
        persistence = JsonTaskPersistence(settings.task_storage_path)
    if notifier is None:
        notifier = ConsoleNotifier()

    connectivity = StaticConnectivity(online=bool(settings.start_online))
    store = TaskStore.hydrate(client, persistence, notifier, connectivity=connectivity)
    loader = TaskLoader(
        TaskFetcher(client),
        store,
        connectivity=connectivity,
        page_size=settings.page_size,
    )

    employees = load_employees(settings.data_dir / EMPLOYEES_FILE_NAME)

    logger.info(
        "State ready: %d cached tasks, %d employees, configured=%s, online=%s",
        len(store.tasks),
        len(employees),
        settings.is_configured,
        connectivity.online,
    )
    return AppState(
        settings=settings,
        client=client,
        store=store,
        loader=loader,
        connectivity=connectivity,
        employees=employees,
    )

# src/taskmirror/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..core.notify import StaticConnectivity
from ..remote.airtable_client import AirtableClient
from ..tasks.task_loader import TaskLoader
from ..tasks.task_models import Employee
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    """
    Explicit application context handed to the console and commands.

    Replaces a process-wide store singleton: everything a command may touch is
    reachable from here, and tests build it from fakes.
    """

    settings: Any
    client: AirtableClient
    store: TaskStore
    loader: TaskLoader
    connectivity: StaticConnectivity
    employees: list[Employee] = field(default_factory=list)

    @property
    def is_configured(self) -> bool:
        return bool(getattr(self.settings, "is_configured", False))

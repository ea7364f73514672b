# src/taskmirror/cli/commands.py

from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import cast

from ..core.errors import ConfigurationError, OfflineError, RemoteServiceError
from ..core.state import AppState
from ..tasks.record_mapper import parse_remote_date
from ..tasks.task_api import DELAY_LABELS, describe_task, format_due_date, next_status, open_tasks
from ..tasks.task_fetcher import Exhausted, FetchError
from ..tasks.task_models import DELAY_OPTIONS, NewTask, Task, TaskStatus

CommandEmitter = Callable[[str], None]
CommandResult = str | Awaitable[str]
CommandHandler2 = Callable[[AppState, list[str]], CommandResult]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], CommandResult]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_SYNC_ERRORS = (ConfigurationError, OfflineError, RemoteServiceError, ValueError)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /list, /advance, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            result = cast(CommandHandler3, handler)(state, args, emit)
        else:
            result = cast(CommandHandler2, handler)(state, args)

        if inspect.isawaitable(result):
            return await result
        return result

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _resolve_task(state: AppState, ref: str | None) -> Task | None:
    """
    A task reference is either a remote id ("rec...") or a 1-based position in /list.
    No reference means the selected task.
    """
    if not ref:
        return state.store.selected_task
    task = state.store.get(ref)
    if task is not None:
        return task
    if ref.isdigit():
        listed = open_tasks(state.store.tasks)
        idx = int(ref) - 1
        if 0 <= idx < len(listed):
            return listed[idx]
    return None


_DAY_SHAPE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _looks_like_day(raw: str) -> bool:
    return _DAY_SHAPE.fullmatch(raw) is not None


def _parse_day(raw: str) -> datetime | None:
    if not _looks_like_day(raw):
        return None
    return parse_remote_date(raw)


def _today() -> datetime:
    now = datetime.now(timezone.utc)
    return datetime(now.year, now.month, now.day, tzinfo=timezone.utc)


def _list_line(n: int, task: Task, selected_id: str | None) -> str:
    mark = "*" if task.id == selected_id else " "
    return f"{mark}{n:>3}. {task.title}  ({task.status.value}, due {format_due_date(task.due_date)})"


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    loader = state.loader
    tasks = state.store.tasks
    lines = [
        "Status:",
        f"  configured: {'yes' if state.is_configured else 'NO (set TASKMIRROR_AIRTABLE_TOKEN/BASE/TABLE)'}",
        f"  connection: {'online' if state.connectivity.is_online() else 'offline'}",
        f"  cached tasks: {len(tasks)} ({len(open_tasks(tasks))} open)",
        f"  pages loaded: {loader.pages_loaded} (more: {'yes' if loader.has_more else 'no'})",
    ]
    if loader.last_error is not None:
        lines.append(f"  last load error: {loader.last_error}")
    return "\n".join(lines)


def cmd_list(state: AppState, args: list[str]) -> str:
    listed = open_tasks(state.store.tasks)
    if not listed:
        return "No open tasks."
    sel = state.store.selected_task_id
    return "\n".join(_list_line(i, t, sel) for i, t in enumerate(listed, start=1))


def cmd_all(state: AppState, args: list[str]) -> str:
    tasks = state.store.tasks
    if not tasks:
        return "Task cache is empty."
    return "\n".join(f"  {t.id}  {t.title}  ({t.status.value}, due {format_due_date(t.due_date)})" for t in tasks)


async def cmd_more(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    loader = state.loader
    if not state.is_configured:
        return "Not configured: set TASKMIRROR_AIRTABLE_TOKEN, TASKMIRROR_AIRTABLE_BASE and TASKMIRROR_AIRTABLE_TABLE."
    if loader.last_error is not None and loader.retry() and emit is not None:
        emit("Retrying the page that failed...")

    result = await loader.load_more()
    if result is None:
        if not state.connectivity.is_online():
            return "Offline: not loading."
        if loader.busy:
            return "A page is already loading."
        return "All tasks loaded."
    if isinstance(result, FetchError):
        return f"Loading failed: {result.error}. Use /more to retry."
    if isinstance(result, Exhausted):
        return "No more tasks."
    tail = "more available (/more)" if result.has_more else "that was the last page"
    return f"Loaded {len(result.tasks)} tasks; {tail}."


async def cmd_reload(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    state.loader.reset()
    return await cmd_more(state, args, emit)


def cmd_show(state: AppState, args: list[str]) -> str:
    task = _resolve_task(state, args[0] if args else None)
    if task is None:
        return "No such task (use /list, or /select a task first)."
    return describe_task(task, state.employees)


def cmd_select(state: AppState, args: list[str]) -> str:
    if not args or args[0].lower() in ("none", "-"):
        state.store.select_task(None)
        return "Selection cleared."
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"
    state.store.select_task(task.id)
    return f"Selected: {task.title}"


async def cmd_add(state: AppState, args: list[str]) -> str:
    """/add [YYYY-MM-DD] <title...> (due today when no date is given)."""
    if not args:
        return "Usage: /add [YYYY-MM-DD] <title>"
    due = _parse_day(args[0])
    if due is None and _looks_like_day(args[0]):
        return f"Bad date: {args[0]!r} (expected YYYY-MM-DD)"
    title_parts = args[1:] if due is not None else args
    if not title_parts:
        return "Usage: /add [YYYY-MM-DD] <title>"

    new_task = NewTask(
        title=" ".join(title_parts),
        status=TaskStatus.TO_DO,
        due_date=due or _today(),
    )
    try:
        task = await state.store.create(new_task)
    except _SYNC_ERRORS as e:
        return f"Task not created: {e}"
    return f"Created {task.id}: {task.title}"


_EDIT_FIELDS = {
    "title": "title",
    "notes": "description",
    "description": "description",
    "status": "status",
    "due": "due_date",
}


async def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <task> <title|notes|status|due> <value...>"""
    if len(args) < 3:
        return "Usage: /edit <task> <title|notes|status|due> <value>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"

    field_name = _EDIT_FIELDS.get(args[1].lower())
    if field_name is None:
        return f"Unknown field: {args[1]} (title, notes, status, due)"
    raw = " ".join(args[2:])

    value: object = raw
    if field_name == "status":
        try:
            value = TaskStatus(raw)
        except ValueError:
            return f"Unknown status: {raw!r} (one of: {', '.join(s.value for s in TaskStatus)})"
    elif field_name == "due_date":
        value = _parse_day(raw)
        if value is None:
            return f"Bad date: {raw!r} (expected YYYY-MM-DD)"

    try:
        await state.store.update(task.id, **{field_name: value})
    except _SYNC_ERRORS as e:
        return f"Changes were not saved: {e}"
    return describe_task(state.store.get(task.id) or task, state.employees)


async def cmd_advance(state: AppState, args: list[str]) -> str:
    task = _resolve_task(state, args[0] if args else None)
    if task is None:
        return "No such task."
    if task.status is TaskStatus.DONE:
        return f"Already done: {task.title}"
    try:
        updated = await state.store.advance_status(task.id, next_status(task.status))
    except _SYNC_ERRORS as e:
        return f"Status not changed: {e}"
    return f"{task.title}: {task.status.value} -> {updated.status.value}" if updated else "No such task."


async def cmd_done(state: AppState, args: list[str]) -> str:
    task = _resolve_task(state, args[0] if args else None)
    if task is None:
        return "No such task."
    try:
        await state.store.advance_status(task.id, TaskStatus.DONE)
    except _SYNC_ERRORS as e:
        return f"Status not changed: {e}"
    return f"Done: {task.title}"


async def cmd_delay(state: AppState, args: list[str]) -> str:
    options = ", ".join(f"{d} ({DELAY_LABELS[d]})" for d in DELAY_OPTIONS)
    if len(args) != 2 or not args[1].isdigit() or int(args[1]) not in DELAY_OPTIONS:
        return f"Usage: /delay <task> <days>, days one of: {options}"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"
    try:
        updated = await state.store.delay(task.id, int(args[1]))
    except _SYNC_ERRORS as e:
        return f"Task not delayed: {e}"
    if updated is None:
        return "No such task."
    return f"{task.title}: now due {format_due_date(updated.due_date)}"


async def cmd_photo(state: AppState, args: list[str]) -> str:
    """/photo <task> <file> - upload an image and attach its URL to the task."""
    if len(args) != 2:
        return "Usage: /photo <task> <file>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"
    path = Path(args[1]).expanduser()
    try:
        content = path.read_bytes()
    except OSError as e:
        return f"Cannot read {path}: {e.strerror or e}"

    endpoint = str(getattr(state.settings, "upload_endpoint", "") or "")
    try:
        url = await state.client.upload_image(endpoint, filename=path.name, content=content)
        await state.store.update(task.id, images=[*task.images, url])
    except _SYNC_ERRORS as e:
        return f"Photo not attached: {e}"
    return f"Attached {url}"


async def cmd_bases(state: AppState, args: list[str]) -> str:
    try:
        bases = await state.client.list_bases()
    except (ConfigurationError, RemoteServiceError) as e:
        return f"Could not list bases: {e}"
    if not bases:
        return "No bases visible to this token."
    return "\n".join(f"  {b['id']}  {b['name']}" for b in bases)


async def cmd_tables(state: AppState, args: list[str]) -> str:
    try:
        tables = await state.client.list_tables(args[0] if args else None)
    except (ConfigurationError, RemoteServiceError) as e:
        return f"Could not list tables: {e}"
    if not tables:
        return "No tables in this base."
    return "\n".join(f"  {t['id']}  {t['name']}" for t in tables)


def cmd_online(state: AppState, args: list[str]) -> str:
    state.connectivity.online = True
    return "Online: syncing enabled. Use /more to continue loading."


def cmd_offline(state: AppState, args: list[str]) -> str:
    state.connectivity.online = False
    return "Offline: loading paused; edits will fail until you are back online."


registry.register("help", cmd_help, "show this help", aliases=["h", "?"])
registry.register("status", cmd_status, "configuration, connection and loading state")
registry.register("list", cmd_list, "open tasks, soonest due first", aliases=["ls"])
registry.register("all", cmd_all, "every cached task in arrival order")
registry.register("more", cmd_more, "load the next page of tasks")
registry.register("reload", cmd_reload, "reload from the first page")
registry.register("show", cmd_show, "/show [task] - task details")
registry.register("select", cmd_select, "/select <task|none> - focus a task")
registry.register("add", cmd_add, "/add [YYYY-MM-DD] <title> - create a task")
registry.register("edit", cmd_edit, "/edit <task> <title|notes|status|due> <value>")
registry.register("advance", cmd_advance, "/advance [task] - To do -> In progress -> Done", aliases=["next"])
registry.register("done", cmd_done, "/done [task] - mark as Done")
registry.register("delay", cmd_delay, "/delay <task> <1|2|7|14> - push the due date")
registry.register("photo", cmd_photo, "/photo <task> <file> - upload and attach an image")
registry.register("bases", cmd_bases, "list bases visible to the token")
registry.register("tables", cmd_tables, "/tables [baseId] - list tables of a base")
registry.register("online", cmd_online, "mark the connection as online")
registry.register("offline", cmd_offline, "mark the connection as offline")

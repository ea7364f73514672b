# src/taskmirror/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time: an unconfigured app still starts and
  shows a configuration banner instead of syncing.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "TASKMIRROR"

DEFAULT_API_URL = "https://api.airtable.com/v0"
DEFAULT_PAGE_SIZE = 25

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float | None) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Remote service (Airtable) ----
    airtable_token: Optional[str]
    airtable_base: Optional[str]
    airtable_table: Optional[str]
    airtable_api_url: str

    # ---- Sync tuning ----
    page_size: int
    http_timeout_seconds: Optional[float]
    start_online: bool

    # ---- Image upload (stub endpoint) ----
    upload_endpoint: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    task_storage_path: Path

    @property
    def is_configured(self) -> bool:
        return bool(self.airtable_token and self.airtable_base and self.airtable_table)

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskmirror") or "taskmirror"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        # Accept the plain AIRTABLE_* names too, they are what most .env files carry.
        airtable_token = _first_env(_k("AIRTABLE_TOKEN"), "AIRTABLE_TOKEN", default=None)
        airtable_base = _first_env(_k("AIRTABLE_BASE"), "AIRTABLE_BASE", default=None)
        airtable_table = _first_env(_k("AIRTABLE_TABLE"), "AIRTABLE_TABLE", default=None)
        airtable_api_url = _env(_k("AIRTABLE_API_URL"), DEFAULT_API_URL).rstrip("/")

        page_size = _env_int(_k("PAGE_SIZE"), DEFAULT_PAGE_SIZE)
        if page_size <= 0:
            page_size = DEFAULT_PAGE_SIZE

        # No timeout unless asked for: a hung request blocks pagination, as before.
        http_timeout_seconds = _env_float(_k("HTTP_TIMEOUT_SECONDS"), None)
        start_online = _env_bool(_k("START_ONLINE"), True)

        upload_endpoint = _env(_k("UPLOAD_ENDPOINT"), "").strip()

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskmirror"))
        task_storage_path = _env_path(_k("TASK_STORAGE_PATH"), data_dir / "task-storage.json")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            airtable_token=(airtable_token or "").strip() or None,
            airtable_base=(airtable_base or "").strip() or None,
            airtable_table=(airtable_table or "").strip() or None,
            airtable_api_url=airtable_api_url,
            page_size=page_size,
            http_timeout_seconds=http_timeout_seconds,
            start_online=start_online,
            upload_endpoint=upload_endpoint,
            data_dir=data_dir,
            task_storage_path=task_storage_path,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS

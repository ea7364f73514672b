# src/taskmirror/core/errors.py

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Token, base or table is missing; no remote operation can run."""


class RemoteServiceError(RuntimeError):
    """Transport failure, non-2xx response or undecodable body from the remote service."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OfflineError(RuntimeError):
    """A write was attempted while offline. Writes are not queued."""

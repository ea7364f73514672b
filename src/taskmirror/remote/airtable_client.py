# src/taskmirror/remote/airtable_client.py

"""Thin Airtable REST client.

All HTTP calls use httpx.AsyncClient so they do not block the event loop.
Only the handful of endpoints the task mirror needs are covered:
meta (bases/tables), record select/create/update, plus the image upload stub.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from ..config import DEFAULT_API_URL
from ..core.errors import ConfigurationError, RemoteServiceError

logger = logging.getLogger(__name__)


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    *,
    method: str = "GET",
    token: str,
    params: dict[str, Any] | None = None,
    body: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Perform one JSON request. Any failure surfaces as RemoteServiceError."""
    headers = {"Authorization": f"Bearer {token}"}
    try:
        resp = await client.request(method, url, headers=headers, params=params, json=body)
    except httpx.HTTPError as e:
        raise RemoteServiceError(f"{method} {url} failed: {e.__class__.__name__}: {e}") from e

    if resp.status_code >= 400:
        detail = resp.text[:300]
        raise RemoteServiceError(
            f"{method} {url} returned HTTP {resp.status_code}: {detail}",
            status_code=resp.status_code,
        )

    raw = resp.content
    if not raw:
        return {}
    try:
        data = json.loads(raw.decode())
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise RemoteServiceError(f"{method} {url} returned a non-JSON body") from e
    if not isinstance(data, dict):
        raise RemoteServiceError(f"{method} {url} returned unexpected JSON ({type(data).__name__})")
    return data


def _id_name_pairs(items: Any) -> list[dict[str, str]]:
    if not isinstance(items, list):
        return []
    out: list[dict[str, str]] = []
    for item in items:
        if isinstance(item, dict) and "id" in item:
            out.append({"id": str(item["id"]), "name": str(item.get("name", ""))})
    return out


class AirtableClient:
    """
    Record-table client bound to one base + table.

    The client itself can be constructed without credentials; every call checks
    configuration first and raises ConfigurationError when something is missing.
    """

    def __init__(
        self,
        *,
        token: str | None,
        base_id: str | None,
        table_name: str | None,
        api_url: str = DEFAULT_API_URL,
        timeout: float | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._token = (token or "").strip()
        self._base_id = (base_id or "").strip()
        self._table_name = (table_name or "").strip()
        self._api_url = api_url.rstrip("/")
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @classmethod
    def from_settings(cls, settings) -> AirtableClient:
        return cls(
            token=settings.airtable_token,
            base_id=settings.airtable_base,
            table_name=settings.airtable_table,
            api_url=settings.airtable_api_url,
            timeout=settings.http_timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._token and self._base_id and self._table_name)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> AirtableClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ---- helpers ----

    def _require_token(self) -> str:
        if not self._token:
            raise ConfigurationError("Airtable token is missing. Set TASKMIRROR_AIRTABLE_TOKEN.")
        return self._token

    def _table_url(self) -> str:
        self._require_token()
        if not self._base_id or not self._table_name:
            raise ConfigurationError(
                "Airtable configuration is missing. Set TASKMIRROR_AIRTABLE_BASE and TASKMIRROR_AIRTABLE_TABLE."
            )
        return f"{self._api_url}/{quote(self._base_id, safe='')}/{quote(self._table_name, safe='')}"

    # ---- meta API ----

    async def list_bases(self) -> list[dict[str, str]]:
        token = self._require_token()
        data = await _request_async(self._http, f"{self._api_url}/meta/bases", token=token)
        return _id_name_pairs(data.get("bases"))

    async def list_tables(self, base_id: str | None = None) -> list[dict[str, str]]:
        token = self._require_token()
        base = (base_id or self._base_id).strip()
        if not base:
            raise ConfigurationError("No base id given and none configured.")
        url = f"{self._api_url}/meta/bases/{quote(base, safe='')}/tables"
        data = await _request_async(self._http, url, token=token)
        return _id_name_pairs(data.get("tables"))

    # ---- records ----

    async def select(
        self,
        *,
        page_size: int,
        sort_field: str | None = None,
        direction: str = "asc",
        offset: str | None = None,
    ) -> list[dict[str, Any]]:
        """Return one page of raw records ({"id", "fields", ...})."""
        url = self._table_url()
        params: dict[str, Any] = {"pageSize": int(page_size)}
        if sort_field:
            params["sort[0][field]"] = sort_field
            params["sort[0][direction]"] = direction
        if offset:
            params["offset"] = offset

        data = await _request_async(self._http, url, token=self._token, params=params)
        records = data.get("records")
        if not isinstance(records, list):
            raise RemoteServiceError("Record listing has no 'records' array")
        return [r for r in records if isinstance(r, dict) and "id" in r]

    async def create(self, fields: dict[str, Any]) -> dict[str, Any]:
        url = self._table_url()
        data = await _request_async(self._http, url, method="POST", token=self._token, body={"fields": fields})
        if "id" not in data:
            raise RemoteServiceError("Create response has no record id")
        logger.debug("Created record id=%s", data["id"])
        return data

    async def update(self, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._table_url()}/{quote(record_id, safe='')}"
        data = await _request_async(self._http, url, method="PATCH", token=self._token, body={"fields": fields})
        logger.debug("Updated record id=%s", record_id)
        return data

    # ---- image upload (stub endpoint) ----

    async def upload_image(
        self,
        endpoint: str,
        *,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """
        POST the file as multipart form data and return the "url" from the JSON reply.

        There is no default endpoint; an empty one is a configuration error.
        """
        if not endpoint or not endpoint.strip():
            raise ConfigurationError("Image upload endpoint is not configured. Set TASKMIRROR_UPLOAD_ENDPOINT.")

        try:
            resp = await self._http.post(endpoint, files={"file": (filename, content, content_type)})
        except httpx.HTTPError as e:
            raise RemoteServiceError(f"Image upload failed: {e.__class__.__name__}: {e}") from e

        if resp.status_code >= 400:
            raise RemoteServiceError(f"Image upload returned HTTP {resp.status_code}", status_code=resp.status_code)
        try:
            url = resp.json().get("url")
        except (ValueError, AttributeError) as e:
            raise RemoteServiceError("Image upload returned an unexpected body") from e
        if not isinstance(url, str) or not url:
            raise RemoteServiceError("Image upload reply has no url")
        return url

"""REST adapter for a Firebase-Realtime-Database-style document store."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from geotrail._redact import redact_for_log
from geotrail._store import StoredRecord, order_value
from geotrail._store.push_id import generate_push_id
from geotrail.exceptions import RemoteStoreError

_logger = logging.getLogger(__name__)


def _records_from_body(body: Any, order_field: str) -> list[StoredRecord]:
    """Turn a ``{key: document}`` response into records sorted by *order_field*.

    Filtered REST queries return an unordered JSON object, so ordering is
    re-applied here, ranking mixed value types the way the database does.
    Push ids sort chronologically, which makes the key a stand-in for
    insertion order on ties.
    """
    if body is None:
        return []
    if not isinstance(body, dict):
        raise RemoteStoreError(f"Expected a JSON object, got {type(body).__name__}")

    records = [StoredRecord(key=str(key), fields=value if isinstance(value, dict) else {}) for key, value in body.items()]
    return sorted(records, key=lambda record: (order_value(record.fields.get(order_field)), record.key))


class RestRemoteStore:
    """:class:`~geotrail._store.RemoteStore` over the database REST API.

    Parameters
    ----------
    base_url : str
        Database root, e.g. ``https://example-default-rtdb.firebaseio.com``.
    http_session : aiohttp.ClientSession
        Session used for every request; owned by the caller.
    auth_token : str or None
        Database secret or ID token passed as the ``auth`` query parameter.
    timeout : float
        Total per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        http_session: aiohttp.ClientSession,
        *,
        auth_token: str | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http_session
        self._auth_token = auth_token
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def _url(self, path: str, record_id: str | None = None) -> str:
        clean = path.strip("/")
        if record_id is not None:
            clean = f"{clean}/{record_id}"
        return f"{self._base_url}/{clean}.json"

    def _params(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        params: dict[str, str] = dict(extra or {})
        if self._auth_token:
            params["auth"] = self._auth_token
        return params

    async def _request(
        self,
        method: str,
        path: str,
        *,
        record_id: str | None = None,
        params: Mapping[str, str] | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        url = self._url(path, record_id)
        data = json.dumps(payload, separators=(",", ":")) if payload is not None else None

        _logger.debug("%s %s params=%s body=%s", method, url, redact_for_log(dict(params or {})), redact_for_log(payload))

        try:
            async with self._http.request(
                method,
                url,
                params=self._params(params),
                data=data,
                headers={"content-type": "application/json; charset=UTF-8"},
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                if resp.status < 200 or resp.status >= 300:
                    raise RemoteStoreError(
                        f"HTTP {resp.status} from {method} {path}: {text[:200]}",
                        path=path,
                        status_code=resp.status,
                    )
        except RemoteStoreError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise RemoteStoreError(f"{method} {path} failed: {exc!r}", path=path) from exc

        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise RemoteStoreError(f"Invalid JSON from {method} {path}: {text[:200]}", path=path) from exc

    async def _query(self, path: str, order_field: str, extra: Mapping[str, str] | None = None) -> list[StoredRecord]:
        params = {"orderBy": json.dumps(order_field)}
        params.update(extra or {})
        body = await self._request("GET", path, params=params)
        try:
            return _records_from_body(body, order_field)
        except RemoteStoreError as exc:
            raise RemoteStoreError(str(exc), path=path) from exc

    async def get_ordered(self, path: str, order_field: str) -> list[StoredRecord]:
        return await self._query(path, order_field)

    async def get_ordered_last(self, path: str, order_field: str, n: int) -> list[StoredRecord]:
        if n <= 0:
            return []
        return await self._query(path, order_field, {"limitToLast": str(n)})

    async def get_ordered_first(self, path: str, order_field: str, n: int) -> list[StoredRecord]:
        if n <= 0:
            return []
        return await self._query(path, order_field, {"limitToFirst": str(n)})

    async def count(self, path: str) -> int:
        body = await self._request("GET", path, params={"shallow": "true"})
        if body is None:
            return 0
        if not isinstance(body, dict):
            raise RemoteStoreError(f"Expected a JSON object from shallow read of {path}", path=path)
        return len(body)

    async def generate_id(self, path: str) -> str:
        # Push ids are generated client-side; no round-trip needed.
        return generate_push_id()

    async def write(self, path: str, record_id: str, value: Mapping[str, Any]) -> None:
        await self._request("PUT", path, record_id=record_id, payload=value)

    async def delete(self, path: str, record_id: str) -> None:
        await self._request("DELETE", path, record_id=record_id)

    async def remove_all(self, path: str) -> None:
        await self._request("DELETE", path)

"""Remote store implementations: in-memory store, push ids and the REST adapter."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

import aiohttp
import pytest

from geotrail._constants import PUSH_CHARS
from geotrail._store import order_value
from geotrail._store.memory import InMemoryRemoteStore
from geotrail._store.push_id import PushIdGenerator
from geotrail._store.rest import RestRemoteStore
from geotrail.exceptions import RemoteStoreError

# ------------------------------------------------------------------
# Push ids
# ------------------------------------------------------------------


def test_push_ids_sort_chronologically() -> None:
    gen = PushIdGenerator()
    ids = [gen(ts) for ts in (1_700_000_000_000, 1_700_000_000_001, 1_700_000_100_000)]
    assert ids == sorted(ids)
    assert all(len(i) == 20 for i in ids)
    assert all(ch in PUSH_CHARS for i in ids for ch in i)


def test_push_ids_within_same_millisecond_are_distinct_and_ordered() -> None:
    gen = PushIdGenerator()
    ids = [gen(1_700_000_000_000) for _ in range(50)]
    assert len(set(ids)) == 50
    assert ids == sorted(ids)


# ------------------------------------------------------------------
# In-memory store
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_memory_store_ordered_reads() -> None:
    store = InMemoryRemoteStore()
    for key, ts in (("a", 3), ("b", 1), ("c", 2)):
        await store.write("p", key, {"timestamp": ts})

    assert [r.key for r in await store.get_ordered("p", "timestamp")] == ["b", "c", "a"]
    assert [r.key for r in await store.get_ordered_last("p", "timestamp", 1)] == ["a"]
    assert [r.key for r in await store.get_ordered_first("p", "timestamp", 2)] == ["b", "c"]
    assert await store.get_ordered_first("p", "timestamp", 0) == []
    assert await store.count("p") == 3


@pytest.mark.asyncio
async def test_memory_store_orders_mixed_value_types() -> None:
    store = InMemoryRemoteStore()
    for key, ts in (("s", "oops"), ("n2", 2), ("none", None), ("obj", {"a": 1}), ("n1", 1.5), ("flag", True)):
        await store.write("p", key, {"timestamp": ts})
    await store.write("p", "missing", {})

    ordered = [r.key for r in await store.get_ordered("p", "timestamp")]

    assert ordered == ["none", "missing", "flag", "n1", "n2", "s", "obj"]
    assert [r.key for r in await store.get_ordered_last("p", "timestamp", 1)] == ["obj"]


@pytest.mark.asyncio
async def test_memory_store_overwrite_keeps_position_and_delete() -> None:
    store = InMemoryRemoteStore()
    await store.write("p", "a", {"timestamp": 1})
    await store.write("p", "b", {"timestamp": 1})
    await store.write("p", "a", {"timestamp": 1, "v": 2})

    ordered = await store.get_ordered("p", "timestamp")
    assert [r.key for r in ordered] == ["a", "b"]
    assert ordered[0].fields["v"] == 2

    await store.delete("p", "a")
    await store.delete("p", "missing")
    assert await store.count("p") == 1

    await store.remove_all("p")
    assert await store.count("p") == 0


@pytest.mark.asyncio
async def test_memory_store_injected_failures() -> None:
    store = InMemoryRemoteStore(fail_operations={"count"})
    with pytest.raises(RemoteStoreError):
        await store.count("p")
    assert store.calls["count"] == 1


@pytest.mark.asyncio
async def test_memory_store_returns_copies() -> None:
    store = InMemoryRemoteStore()
    value = {"timestamp": 1, "encryptedData": [1, 2]}
    await store.write("p", "a", value)
    value["encryptedData"].append(3)

    (record,) = await store.get_ordered("p", "timestamp")
    record.fields["encryptedData"].append(4)
    assert store.documents("p")["a"]["encryptedData"] == [1, 2]


# ------------------------------------------------------------------
# REST adapter
# ------------------------------------------------------------------


@dataclass
class _FakeResponse:
    status: int
    body: str

    async def text(self) -> str:
        return self.body

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


@dataclass
class _FakeSession:
    """Minimal stand-in for ``aiohttp.ClientSession.request``."""

    responses: list[tuple[int, Any]] = field(default_factory=list)
    calls: list[dict[str, Any]] = field(default_factory=list)
    raise_exc: BaseException | None = None

    def request(self, method: str, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.raise_exc is not None:
            raise self.raise_exc
        status, body = self.responses.pop(0)
        text = body if isinstance(body, str) else json.dumps(body)
        return _FakeResponse(status, text)


def _store(session: _FakeSession, **kwargs: Any) -> RestRemoteStore:
    return RestRemoteStore("https://db.example.com/", session, **kwargs)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_rest_ordered_last_builds_query_and_sorts() -> None:
    session = _FakeSession(
        responses=[(200, {"k2": {"timestamp": 20}, "k1": {"timestamp": 10}})],
    )
    store = _store(session, auth_token="tok")

    records = await store.get_ordered_last("locations", "timestamp", 2)

    assert [r.key for r in records] == ["k1", "k2"]
    call = session.calls[0]
    assert call["method"] == "GET"
    assert urlsplit(call["url"]).path == "/locations.json"
    assert call["params"] == {"orderBy": '"timestamp"', "limitToLast": "2", "auth": "tok"}


@pytest.mark.asyncio
async def test_rest_ordered_first_and_empty_collection() -> None:
    session = _FakeSession(responses=[(200, "null")])
    store = _store(session)

    assert await store.get_ordered_first("locations", "timestamp", 3) == []
    assert session.calls[0]["params"] == {"orderBy": '"timestamp"', "limitToFirst": "3"}


@pytest.mark.asyncio
async def test_rest_count_uses_shallow_read() -> None:
    session = _FakeSession(responses=[(200, {"a": True, "b": True}), (200, "null")])
    store = _store(session)

    assert await store.count("locations") == 2
    assert await store.count("locations") == 0
    assert session.calls[0]["params"] == {"shallow": "true"}


@pytest.mark.asyncio
async def test_rest_write_and_delete_target_record_urls() -> None:
    session = _FakeSession(responses=[(200, {"id": "x"}), (200, "null"), (200, "null")])
    store = _store(session)

    await store.write("logs", "x", {"id": "x", "encryptedData": [1], "timestamp": 1, "size": 1})
    await store.delete("logs", "x")
    await store.remove_all("logs")

    assert [c["method"] for c in session.calls] == ["PUT", "DELETE", "DELETE"]
    assert session.calls[0]["url"] == "https://db.example.com/logs/x.json"
    assert json.loads(session.calls[0]["data"])["encryptedData"] == [1]
    assert session.calls[2]["url"] == "https://db.example.com/logs.json"


@pytest.mark.asyncio
async def test_rest_generate_id_is_local() -> None:
    session = _FakeSession()
    store = _store(session)

    first = await store.generate_id("locations")
    second = await store.generate_id("locations")

    assert first != second
    assert session.calls == []


@pytest.mark.asyncio
async def test_rest_http_error_raises() -> None:
    session = _FakeSession(responses=[(401, {"error": "Permission denied"})])
    store = _store(session)

    with pytest.raises(RemoteStoreError) as exc_info:
        await store.count("locations")
    assert exc_info.value.status_code == 401
    assert exc_info.value.path == "locations"


@pytest.mark.asyncio
async def test_rest_client_error_raises() -> None:
    session = _FakeSession(raise_exc=aiohttp.ClientConnectionError("boom"))
    store = _store(session)

    with pytest.raises(RemoteStoreError):
        await store.write("locations", "x", {"timestamp": 1})


@pytest.mark.asyncio
async def test_rest_invalid_json_raises() -> None:
    session = _FakeSession(responses=[(200, "<html>")])
    store = _store(session)

    with pytest.raises(RemoteStoreError):
        await store.get_ordered("locations", "timestamp")


@pytest.mark.asyncio
async def test_rest_non_object_body_raises() -> None:
    session = _FakeSession(responses=[(200, [1, 2])])
    store = _store(session)

    with pytest.raises(RemoteStoreError):
        await store.get_ordered("locations", "timestamp")


@pytest.mark.asyncio
async def test_rest_sorts_mixed_value_types() -> None:
    session = _FakeSession(
        responses=[(200, {"b": {"timestamp": "oops"}, "a": {"timestamp": 1}, "c": {"timestamp": [1]}, "d": "scalar"})],
    )
    store = _store(session)

    records = await store.get_ordered("locations", "timestamp")

    assert [r.key for r in records] == ["d", "a", "b", "c"]


def test_order_value_ranks_types() -> None:
    values = ["z", 10, None, False, {"k": 1}, -3.5]
    assert sorted(values, key=order_value) == [None, False, -3.5, 10, "z", {"k": 1}]

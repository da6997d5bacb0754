"""Dict-backed remote store for tests and dry runs."""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from geotrail._store import StoredRecord, order_value
from geotrail._store.push_id import PushIdGenerator
from geotrail.exceptions import RemoteStoreError

_logger = logging.getLogger(__name__)


class InMemoryRemoteStore:
    """In-process :class:`~geotrail._store.RemoteStore` implementation.

    Documents keep their first-insertion position on overwrite, so ties on
    the order field resolve by insertion order.  ``fail_operations`` names
    operations (``"write"``, ``"delete"``, ...) that raise
    :class:`RemoteStoreError`, for exercising failure paths.
    """

    def __init__(self, *, fail_operations: set[str] | None = None) -> None:
        self._paths: dict[str, dict[str, dict[str, Any]]] = {}
        self._ids = PushIdGenerator()
        self.fail_operations: set[str] = set(fail_operations or ())
        self.calls: dict[str, int] = {}

    def _record_call(self, operation: str, path: str) -> None:
        self.calls[operation] = self.calls.get(operation, 0) + 1
        if operation in self.fail_operations:
            raise RemoteStoreError(f"{operation} failed (injected)", path=path)

    def _sorted(self, path: str, order_field: str) -> list[StoredRecord]:
        docs = self._paths.get(path, {})
        records = [StoredRecord(key=key, fields=copy.deepcopy(value)) for key, value in docs.items()]
        # Stable sort: ties stay in insertion order.
        return sorted(records, key=lambda record: order_value(record.fields.get(order_field)))

    def documents(self, path: str) -> dict[str, dict[str, Any]]:
        """Snapshot of the raw documents stored at *path*."""
        return copy.deepcopy(self._paths.get(path, {}))

    async def get_ordered(self, path: str, order_field: str) -> list[StoredRecord]:
        self._record_call("get_ordered", path)
        return self._sorted(path, order_field)

    async def get_ordered_last(self, path: str, order_field: str, n: int) -> list[StoredRecord]:
        self._record_call("get_ordered_last", path)
        if n <= 0:
            return []
        return self._sorted(path, order_field)[-n:]

    async def get_ordered_first(self, path: str, order_field: str, n: int) -> list[StoredRecord]:
        self._record_call("get_ordered_first", path)
        if n <= 0:
            return []
        return self._sorted(path, order_field)[:n]

    async def count(self, path: str) -> int:
        self._record_call("count", path)
        return len(self._paths.get(path, {}))

    async def generate_id(self, path: str) -> str:
        self._record_call("generate_id", path)
        return self._ids()

    async def write(self, path: str, record_id: str, value: Mapping[str, Any]) -> None:
        self._record_call("write", path)
        self._paths.setdefault(path, {})[record_id] = copy.deepcopy(dict(value))
        _logger.debug("Wrote %s/%s", path, record_id)

    async def delete(self, path: str, record_id: str) -> None:
        self._record_call("delete", path)
        self._paths.get(path, {}).pop(record_id, None)

    async def remove_all(self, path: str) -> None:
        self._record_call("remove_all", path)
        self._paths.pop(path, None)

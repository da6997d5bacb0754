"""Remote document store interface.

:class:`RetentionStore` and :class:`LogCapture` only ever talk to this
protocol.  Implementations raise :class:`~geotrail.exceptions.RemoteStoreError`
on failure; the callers convert that into a success flag.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class StoredRecord:
    """A document read back from the store: its key plus its field map."""

    key: str
    fields: dict[str, Any] = field(default_factory=dict)


def order_value(value: Any) -> tuple[int, Any]:
    """Sort key for an order-field value of any JSON type.

    Mirrors the database's ordering of mixed types: missing/null, then
    booleans, numbers, strings, and finally objects and arrays.
    """
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, int(value))
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, str):
        return (3, value)
    return (4, json.dumps(value, sort_keys=True, default=str))


class RemoteStore(Protocol):
    """Structural interface for a path-addressed, schema-less document store.

    All ordered reads return records sorted ascending by *order_field*,
    ties broken by insertion order.
    """

    async def get_ordered(self, path: str, order_field: str) -> list[StoredRecord]: ...

    async def get_ordered_last(self, path: str, order_field: str, n: int) -> list[StoredRecord]: ...

    async def get_ordered_first(self, path: str, order_field: str, n: int) -> list[StoredRecord]: ...

    async def count(self, path: str) -> int: ...

    async def generate_id(self, path: str) -> str: ...

    async def write(self, path: str, record_id: str, value: Mapping[str, Any]) -> None: ...

    async def delete(self, path: str, record_id: str) -> None: ...

    async def remove_all(self, path: str) -> None: ...


__all__ = ["RemoteStore", "StoredRecord", "order_value"]

"""Base model and boundary coercions for stored documents.

Every stored-document model inherits from :class:`TrailBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase wire keys (``encryptedData``)
  map to snake_case fields.
* Frozen instances; updates go through ``model_copy(update=...)``.

:data:`ByteList` normalizes the ``encryptedData`` field, which older
writers stored either as a JSON array or as its comma-joined text, and
sometimes as signed bytes.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


def parse_byte_list(value: Any) -> list[int]:
    """Coerce a stored payload into a list of byte values.

    Accepts a list/tuple of ints, a ``"1,2,3"`` or ``"[1, 2, 3]"`` string,
    or a mapping keyed by ``"0"``, ``"1"``, ... (how some document stores
    return arrays).  Raises :class:`ValueError` for anything else.
    """
    if isinstance(value, str):
        text = value.strip().strip("[]").strip()
        if not text:
            return []
        items: list[Any] = [part.strip() for part in text.split(",")]
    elif isinstance(value, Mapping):
        try:
            ordered = sorted(value.items(), key=lambda kv: int(kv[0]))
        except (TypeError, ValueError) as exc:
            raise ValueError("payload mapping must be keyed by indices") from exc
        items = [v for _, v in ordered]
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        raise ValueError(f"unsupported payload type {type(value).__name__}")

    return [_parse_byte(item) for item in items]


def _parse_byte(item: Any) -> int:
    """One payload byte; signed values (-128..-1) are folded into 128..255."""
    if isinstance(item, bool):
        raise ValueError("payload bytes must be integers")
    if isinstance(item, float) and not item.is_integer():
        raise ValueError(f"payload byte is not integral: {item!r}")
    try:
        number = int(item)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"payload byte is not an integer: {item!r}") from exc
    if not -128 <= number <= 255:
        raise ValueError(f"payload byte out of range: {number}")
    return number & 0xFF


ByteList = Annotated[list[int], BeforeValidator(parse_byte_list)]
"""Annotated type that normalizes stored payloads to ``list[int]``."""


class TrailBaseModel(BaseModel):
    """Base for documents exchanged with the remote store."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_document(self) -> dict[str, Any]:
        """Wire representation (camelCase keys)."""
        return self.model_dump(by_alias=True)

"""Helpers for safe debug logging.

Stored payloads are obfuscated byte lists and requests carry an auth
token.  This module redacts both before emitting DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "auth",
        "authtoken",
        "token",
        "authorization",
        "obfuscationkey",
        "key",
    }
)

# Payload fields are summarized by length rather than dumped.
_PAYLOAD_KEYS: frozenset[str] = frozenset({"encrypteddata"})


def _redact_field(name: str, value: Any, max_string: int) -> Any:
    lowered = name.lower()
    if lowered in _SENSITIVE_VALUE_KEYS:
        return "<redacted>"
    if lowered in _PAYLOAD_KEYS:
        size = len(value) if isinstance(value, (str, list, Mapping)) else 0
        return f"<payload:{size}>"
    return redact_for_log(value, max_string=max_string)


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Return a copy of a request body or query map that is safe to log.

    Auth values become ``<redacted>``, ``encryptedData`` becomes
    ``<payload:N>`` and strings longer than *max_string* are truncated.
    Stored documents are JSON, so only dicts, lists and scalars are walked.
    """
    if isinstance(value, Mapping):
        return {str(k): _redact_field(str(k), v, max_string) for k, v in value.items()}
    if isinstance(value, list):
        return [redact_for_log(item, max_string=max_string) for item in value]
    if isinstance(value, str) and len(value) > max_string:
        return f"{value[:max_string]}…<truncated>"
    return value

"""Custom exception hierarchy for geotrail."""

from __future__ import annotations


class GeoTrailError(Exception):
    """Base exception for all geotrail errors."""


class ConfigError(GeoTrailError):
    """Invalid or missing configuration."""


class CodecError(ConfigError):
    """Obfuscation codec misconfigured (e.g. an empty key).

    This is a fatal configuration error, not a runtime path: it is raised
    when a codec is built, never while decoding stored payloads.
    """


class RemoteStoreError(GeoTrailError):
    """Remote document store failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        path: str = "",
        status_code: int | None = None,
    ) -> None:
        self.path = path
        self.status_code = status_code
        super().__init__(message)

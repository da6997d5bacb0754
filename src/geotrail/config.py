"""Client configuration for geotrail."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from geotrail._constants import (
    CAPACITY,
    DEFAULT_LOG_FILE,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SAMPLING_INTERVAL,
    LOCATIONS_PATH,
    LOGS_PATH,
    MERGE_THRESHOLD_METERS,
)
from geotrail.exceptions import ConfigError


@dataclasses.dataclass(frozen=True)
class TrailConfig:
    """Client configuration.

    Parameters
    ----------
    obfuscation_key : str
        Shared key for the XOR payload codec.  Must be non-empty and
        identical on every producer and consumer.
    database_url : str
        Root URL of the remote document store.
    auth_token : str or None
        Token sent as the ``auth`` query parameter.
    locations_path : str
        Collection path for position records.
    logs_path : str
        Collection path for uploaded log snapshots.
    capacity : int
        Maximum number of stored position records.
    merge_threshold_meters : float
        Samples closer than this to the latest record refresh its timestamp.
    log_file : Path
        Local append-only diagnostic log.
    sampling_interval : float
        Seconds between position samples.
    request_timeout : float
        Total timeout in seconds for a single remote request.
    """

    obfuscation_key: str
    database_url: str = ""
    auth_token: str | None = None
    locations_path: str = LOCATIONS_PATH
    logs_path: str = LOGS_PATH
    capacity: int = CAPACITY
    merge_threshold_meters: float = MERGE_THRESHOLD_METERS
    log_file: Path = Path(DEFAULT_LOG_FILE)
    sampling_interval: float = DEFAULT_SAMPLING_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        if not self.obfuscation_key:
            raise ConfigError("obfuscation_key must be non-empty")
        if self.capacity < 1:
            raise ConfigError(f"capacity must be at least 1, got {self.capacity}")
        if self.merge_threshold_meters < 0:
            raise ConfigError("merge_threshold_meters must not be negative")
        if self.sampling_interval <= 0:
            raise ConfigError("sampling_interval must be positive")
        if not isinstance(self.log_file, Path):
            object.__setattr__(self, "log_file", Path(self.log_file))

    @classmethod
    def from_env(cls, **overrides: Any) -> TrailConfig:
        """Create configuration from ``GEOTRAIL_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        ConfigError
            If a numeric variable does not parse or the key is missing.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "GEOTRAIL_OBFUSCATION_KEY": "obfuscation_key",
            "GEOTRAIL_DATABASE_URL": "database_url",
            "GEOTRAIL_AUTH_TOKEN": "auth_token",
            "GEOTRAIL_LOCATIONS_PATH": "locations_path",
            "GEOTRAIL_LOGS_PATH": "logs_path",
            "GEOTRAIL_LOG_FILE": "log_file",
        }
        _ENV_NUM_MAP: dict[str, tuple[str, type]] = {
            "GEOTRAIL_CAPACITY": ("capacity", int),
            "GEOTRAIL_MERGE_THRESHOLD_METERS": ("merge_threshold_meters", float),
            "GEOTRAIL_SAMPLING_INTERVAL": ("sampling_interval", float),
            "GEOTRAIL_REQUEST_TIMEOUT": ("request_timeout", float),
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        for env_key, (field_name, caster) in _ENV_NUM_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = caster(val)
            except ValueError as exc:
                raise ConfigError(f"{env_key} must be a number, got {val!r}") from exc

        if "log_file" in config_kwargs:
            config_kwargs["log_file"] = Path(config_kwargs["log_file"])

        config_kwargs.update(overrides)
        config_kwargs.setdefault("obfuscation_key", "")

        return cls(**config_kwargs)

"""High-level async client wiring the remote store, codec and log capture."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from geotrail._crypto import XorCodec
from geotrail._store import RemoteStore
from geotrail._store.rest import RestRemoteStore
from geotrail.config import TrailConfig
from geotrail.exceptions import ConfigError, GeoTrailError
from geotrail.logcapture import LogCapture
from geotrail.models import PositionFix, PositionRecord
from geotrail.retention import RetentionStore

_logger = logging.getLogger(__name__)


class TrailClient:
    """Async client for a position history stored remotely.

    Usage::

        async with TrailClient(TrailConfig.from_env()) as client:
            await client.save_position(fix)
            history = await client.load_history()

    Pass *store* to use a non-HTTP :class:`RemoteStore` (e.g. the
    in-memory store); no HTTP session is opened in that case.
    """

    def __init__(
        self,
        config: TrailConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        store: RemoteStore | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._codec = XorCodec(config.obfuscation_key)
        self._custom_store = store
        self._retention: RetentionStore | None = None
        self.logs = LogCapture(config.log_file, codec=self._codec, path=config.logs_path)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TrailClient:
        store = self._custom_store
        if store is None:
            if not self._config.database_url:
                raise ConfigError("database_url is required for the REST store")
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            store = RestRemoteStore(
                self._config.database_url,
                self._http_session,
                auth_token=self._config.auth_token,
                timeout=self._config.request_timeout,
            )
        self._retention = RetentionStore(
            store,
            self._codec,
            path=self._config.locations_path,
            capacity=self._config.capacity,
            merge_threshold_meters=self._config.merge_threshold_meters,
        )
        self.logs = LogCapture(
            self._config.log_file,
            store=store,
            codec=self._codec,
            path=self._config.logs_path,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._retention = None

    @property
    def retention(self) -> RetentionStore:
        if self._retention is None:
            raise GeoTrailError("Client not initialized. Use 'async with TrailClient(...) as client:'")
        return self._retention

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    async def save_position(self, position: PositionFix | PositionRecord) -> bool:
        record = position.to_record() if isinstance(position, PositionFix) else position
        return await self.retention.save(record)

    async def load_history(self) -> list[PositionRecord]:
        return await self.retention.load_all()

    async def delete_history(self) -> bool:
        return await self.retention.delete_all()

    # ------------------------------------------------------------------
    # Logs
    # ------------------------------------------------------------------

    async def upload_logs(self) -> bool:
        return await self.logs.upload()

    async def download_logs(self) -> str:
        return await self.logs.download()

    async def delete_remote_logs(self) -> bool:
        return await self.logs.delete_remote()

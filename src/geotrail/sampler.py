"""Periodic position sampling feeding a :class:`RetentionStore`."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from geotrail._constants import DEFAULT_SAMPLING_INTERVAL
from geotrail.logcapture import LogCapture
from geotrail.models import PositionFix
from geotrail.retention import RetentionStore

_logger = logging.getLogger(__name__)


class PositionSource(Protocol):
    """Anything that can deliver the current fix, or ``None`` when it has none."""

    async def current_fix(self) -> PositionFix | None: ...


class PositionSampler:
    """Pull fixes at a fixed cadence and persist them.

    Saves never overlap: the next tick starts only after the previous
    ``save`` completed.  A missing fix or a failing source means "no sample
    this tick", not an error.
    """

    def __init__(
        self,
        source: PositionSource,
        store: RetentionStore,
        *,
        interval: float = DEFAULT_SAMPLING_INTERVAL,
        capture: LogCapture | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._source = source
        self._store = store
        self._interval = interval
        self._capture = capture

    def _note(self, message: str) -> None:
        if self._capture is not None:
            self._capture.append(message)

    async def sample_once(self) -> bool | None:
        """Take one sample.

        Returns the save outcome, or ``None`` when there was no fix.
        """
        try:
            fix = await self._source.current_fix()
        except Exception as exc:  # noqa: BLE001
            _logger.warning("Position source failed: %s", exc)
            self._note(f"Position source failed: {exc}")
            return None

        if fix is None:
            _logger.debug("No fix this tick")
            self._note("Received null location")
            return None

        self._note(f"Processing location - Lat: {fix.latitude}, Lng: {fix.longitude}")
        ok = await self._store.save(fix.to_record())
        if ok:
            self._note("Location encrypted and saved successfully")
        else:
            self._note("Failed to save encrypted location")
        return ok

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """Sample until *stop_event* is set or the task is cancelled."""
        stop = stop_event or asyncio.Event()
        _logger.info("Sampler started, interval %.1fs", self._interval)
        self._note("Sampler started")
        try:
            while not stop.is_set():
                await self.sample_once()
                try:
                    await asyncio.wait_for(stop.wait(), timeout=self._interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            _logger.info("Sampler stopped")
            self._note("Sampler stopped")

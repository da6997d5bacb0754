"""Bounded, obfuscated position history on a remote store.

Each :meth:`RetentionStore.save` re-reads the remote state; nothing is
cached between calls.  A sample within the merge threshold of the most
recent record only refreshes that record's timestamp.  Otherwise the
oldest records are evicted until there is room, then a new record is
appended.
"""

from __future__ import annotations

import asyncio
import logging

from pydantic import ValidationError

from geotrail._constants import CAPACITY, LOCATIONS_PATH, MERGE_THRESHOLD_METERS, ORDER_FIELD
from geotrail._crypto import PayloadCodec
from geotrail._store import RemoteStore, StoredRecord
from geotrail.exceptions import RemoteStoreError
from geotrail.geo import distance_between
from geotrail.models import EncodedRecord, PositionRecord

_logger = logging.getLogger(__name__)


class RetentionStore:
    """Merge-or-append ingestion with oldest-first eviction.

    Parameters
    ----------
    store : RemoteStore
        Remote document store.
    codec : PayloadCodec
        Codec used to obfuscate record payloads.
    path : str
        Collection path for position records.
    capacity : int
        Maximum number of stored records.
    merge_threshold_meters : float
        Samples closer than this to the latest record are merged into it.

    Notes
    -----
    ``save`` calls on one instance are serialized, so the
    read-then-write sequence cannot interleave within a process.  Separate
    processes writing the same path are not coordinated.
    """

    def __init__(
        self,
        store: RemoteStore,
        codec: PayloadCodec,
        *,
        path: str = LOCATIONS_PATH,
        capacity: int = CAPACITY,
        merge_threshold_meters: float = MERGE_THRESHOLD_METERS,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._store = store
        self._codec = codec
        self._path = path
        self._capacity = capacity
        self._merge_threshold = merge_threshold_meters
        self._save_lock = asyncio.Lock()

    @property
    def path(self) -> str:
        return self._path

    @property
    def capacity(self) -> int:
        return self._capacity

    # ------------------------------------------------------------------
    # Codec boundary
    # ------------------------------------------------------------------

    def _encode(self, record: PositionRecord) -> EncodedRecord:
        return EncodedRecord(
            id=record.id,
            encrypted_data=self._codec.encode(record.to_json()),
            timestamp=record.timestamp,
        )

    def _decode(self, stored: StoredRecord) -> PositionRecord | None:
        """Decode a stored document, or ``None`` if it is not a valid record."""
        try:
            encoded = EncodedRecord.model_validate(stored.fields)
        except ValidationError as exc:
            _logger.debug("Skipping malformed document %s/%s: %s", self._path, stored.key, exc)
            return None
        record = PositionRecord.from_json(self._codec.decode(encoded.encrypted_data))
        if record is None:
            return None
        if record.timestamp != encoded.timestamp:
            _logger.debug(
                "Skipping %s/%s: stored timestamp %d does not match payload %d",
                self._path,
                stored.key,
                encoded.timestamp,
                record.timestamp,
            )
            return None
        if not record.id:
            record = record.with_id(stored.key)
        return record

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    async def save(self, record: PositionRecord) -> bool:
        """Store *record*, merging it into the latest record when close enough.

        Returns ``True`` when the final write (merge overwrite or append)
        succeeded.  Remote failures are logged and reported as ``False``;
        nothing is retried here.
        """
        async with self._save_lock:
            try:
                return await self._save(record)
            except RemoteStoreError as exc:
                _logger.warning("Saving position failed: %s", exc)
                return False

    async def _save(self, record: PositionRecord) -> bool:
        latest = await self._store.get_ordered_last(self._path, ORDER_FIELD, 1)
        if latest:
            last_stored = latest[-1]
            last = self._decode(last_stored)
            if last is not None:
                distance = distance_between(record, last)
                if distance < self._merge_threshold:
                    _logger.debug(
                        "Sample %.1fm from %s, refreshing its timestamp",
                        distance,
                        last_stored.key,
                    )
                    merged = last.with_id(last_stored.key).with_timestamp(record.timestamp)
                    await self._store.write(self._path, last_stored.key, self._encode(merged).to_document())
                    return True

        await self._enforce_capacity()

        record_id = await self._store.generate_id(self._path)
        appended = record.with_id(record_id)
        await self._store.write(self._path, record_id, self._encode(appended).to_document())
        _logger.debug("Appended position %s", record_id)
        return True

    async def _enforce_capacity(self) -> None:
        """Evict oldest records so one more append stays within capacity.

        Failures are logged and swallowed: a newer sample is never dropped
        because eviction did not complete.
        """
        try:
            count = await self._store.count(self._path)
            if count < self._capacity:
                return
            to_remove = count - self._capacity + 1
            oldest = await self._store.get_ordered_first(self._path, ORDER_FIELD, to_remove)
        except RemoteStoreError as exc:
            _logger.warning("Capacity check on %s failed, appending anyway: %s", self._path, exc)
            return

        if not oldest:
            return

        results = await asyncio.gather(
            *(self._store.delete(self._path, stored.key) for stored in oldest),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        for failure in failures:
            if not isinstance(failure, Exception):
                raise failure
            _logger.warning("Evicting from %s failed: %s", self._path, failure)
        _logger.info("Evicted %d of %d oldest record(s) from %s", len(oldest) - len(failures), len(oldest), self._path)

    # ------------------------------------------------------------------
    # Read / bulk paths
    # ------------------------------------------------------------------

    async def load_all(self) -> list[PositionRecord]:
        """All decodable records, ascending by timestamp.

        Ties keep the store's insertion order.  Malformed records are
        dropped; a remote failure yields an empty list.
        """
        try:
            stored = await self._store.get_ordered(self._path, ORDER_FIELD)
        except RemoteStoreError as exc:
            _logger.warning("Loading positions failed: %s", exc)
            return []

        records: list[PositionRecord] = []
        for item in stored:
            record = self._decode(item)
            if record is not None:
                records.append(record)
        if len(records) != len(stored):
            _logger.debug("Dropped %d undecodable record(s)", len(stored) - len(records))
        return records

    async def delete_all(self) -> bool:
        """Remove every stored position."""
        try:
            await self._store.remove_all(self._path)
        except RemoteStoreError as exc:
            _logger.warning("Deleting positions failed: %s", exc)
            return False
        return True

"""Local diagnostic log file with remote upload/download.

Every line is written as ``[yyyy-MM-dd HH:mm:ss.SSS] message``.  Read
paths describe failures in the returned text and write paths only log
them, so capturing diagnostics never breaks the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from geotrail._constants import LOG_READ_ERROR_PREFIX, LOG_TIMESTAMP_FORMAT, LOGS_PATH, NO_LOG_FILE, ORDER_FIELD
from geotrail._crypto import PayloadCodec
from geotrail._store import RemoteStore
from geotrail.exceptions import RemoteStoreError
from geotrail.models import LogEntry, now_ms

_logger = logging.getLogger(__name__)


def format_line(message: str, when: datetime | None = None) -> str:
    """Prefix *message* with a millisecond-precision local timestamp."""
    moment = when or datetime.now()
    stamp = f"{moment.strftime(LOG_TIMESTAMP_FORMAT)}.{moment.microsecond // 1000:03d}"
    return f"[{stamp}] {message}\n"


class LogCapture:
    """Append-only local log sink mirrored to the remote ``logs`` collection.

    Parameters
    ----------
    log_file : Path or str
        Local file that accumulates the log lines.
    store : RemoteStore or None
        Remote store for :meth:`upload`, :meth:`download` and
        :meth:`delete_remote`.  Without one those calls report failure.
    codec : PayloadCodec or None
        Codec used to obfuscate uploaded text.
    path : str
        Collection path for uploaded log snapshots.
    clock : callable
        Returns the current local time; injectable for tests.
    """

    def __init__(
        self,
        log_file: Path | str,
        *,
        store: RemoteStore | None = None,
        codec: PayloadCodec | None = None,
        path: str = LOGS_PATH,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._file = Path(log_file)
        self._store = store
        self._codec = codec
        self._path = path
        self._clock = clock

    @property
    def log_file(self) -> Path:
        return self._file

    # ------------------------------------------------------------------
    # Local sink
    # ------------------------------------------------------------------

    def append(self, message: object) -> None:
        """Append one timestamped line.

        The whole line goes out in a single ``write`` on a freshly opened
        append-mode handle.
        """
        text = "null" if message is None else str(message)
        line = format_line(text, self._clock())
        try:
            with self._file.open("a", encoding="utf-8") as fh:
                fh.write(line)
        except OSError as exc:
            _logger.error("Failed to write to log file %s: %s", self._file, exc)

    def read_all(self) -> str:
        """Full log text, :data:`NO_LOG_FILE`, or a description of the read error."""
        try:
            if not self._file.exists():
                return NO_LOG_FILE
            return self._file.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            _logger.error("Failed to read log file %s: %s", self._file, exc)
            return f"{LOG_READ_ERROR_PREFIX}{exc}"

    def clear(self) -> bool:
        """Delete the local log file.  Returns whether a file was removed."""
        try:
            self._file.unlink()
        except FileNotFoundError:
            _logger.debug("Log file %s does not exist", self._file)
            return False
        except OSError as exc:
            _logger.error("Failed to delete log file %s: %s", self._file, exc)
            return False
        _logger.debug("Log file %s deleted", self._file)
        return True

    # ------------------------------------------------------------------
    # Remote mirror
    # ------------------------------------------------------------------

    async def upload(self) -> bool:
        """Upload the current log text as a new remote snapshot.

        Reports ``False`` without contacting the store when there is
        nothing to upload.
        """
        content = self.read_all()
        if not content or content == NO_LOG_FILE or content.startswith(LOG_READ_ERROR_PREFIX):
            _logger.info("No local logs to upload")
            return False
        if self._store is None or self._codec is None:
            _logger.warning("Log upload requested without a remote store configured")
            return False

        try:
            record_id = await self._store.generate_id(self._path)
            entry = LogEntry(
                id=record_id,
                encrypted_data=self._codec.encode(content),
                timestamp=now_ms(),
                size=len(content.encode("utf-8")),
            )
            await self._store.write(self._path, record_id, entry.to_document())
        except RemoteStoreError as exc:
            _logger.warning("Uploading logs failed: %s", exc)
            return False

        _logger.info("Uploaded %d byte(s) of logs as %s", entry.size, record_id)
        return True

    async def download(self) -> str:
        """Text of the most recent uploaded snapshot, or ``""``."""
        if self._store is None or self._codec is None:
            return ""
        try:
            latest = await self._store.get_ordered_last(self._path, ORDER_FIELD, 1)
        except RemoteStoreError as exc:
            _logger.warning("Downloading logs failed: %s", exc)
            return ""
        if not latest:
            return ""

        stored = latest[-1]
        try:
            entry = LogEntry.model_validate(stored.fields)
        except ValidationError as exc:
            _logger.debug("Malformed log snapshot %s: %s", stored.key, exc)
            return ""
        return self._codec.decode(entry.encrypted_data)

    async def delete_remote(self) -> bool:
        """Remove every uploaded log snapshot."""
        if self._store is None:
            return False
        try:
            await self._store.remove_all(self._path)
        except RemoteStoreError as exc:
            _logger.warning("Deleting remote logs failed: %s", exc)
            return False
        return True


class LogCaptureHandler(logging.Handler):
    """Logging handler that mirrors formatted records into a :class:`LogCapture`."""

    def __init__(self, capture: LogCapture, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.capture = capture

    def emit(self, record: logging.LogRecord) -> None:
        # Records about the sink itself would recurse on a failing file.
        if record.name == __name__:
            return
        try:
            message = self.format(record)
        except Exception:  # noqa: BLE001
            self.handleError(record)
            return
        self.capture.append(message)

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

import pytest

from geotrail._constants import NO_LOG_FILE
from geotrail._crypto import XorCodec
from geotrail._store.memory import InMemoryRemoteStore
from geotrail.logcapture import LogCapture, LogCaptureHandler, format_line

KEY = "log-key"
_LINE_RE = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3}\] .*$")


@pytest.fixture
def remote() -> InMemoryRemoteStore:
    return InMemoryRemoteStore()


@pytest.fixture
def capture(tmp_path: Path, remote: InMemoryRemoteStore) -> LogCapture:
    return LogCapture(tmp_path / "trail.log", store=remote, codec=XorCodec(KEY))


def test_format_line_prefix() -> None:
    when = datetime(2026, 3, 4, 5, 6, 7, 89_000)
    assert format_line("hello", when) == "[2026-03-04 05:06:07.089] hello\n"


def test_read_all_without_file_returns_sentinel(capture: LogCapture) -> None:
    assert capture.read_all() == NO_LOG_FILE


def test_append_writes_timestamped_lines(capture: LogCapture) -> None:
    capture.append("first")
    capture.append("second")
    capture.append(None)

    lines = capture.read_all().splitlines()
    assert len(lines) == 3
    assert all(_LINE_RE.match(line) for line in lines)
    assert lines[0].endswith("] first")
    assert lines[2].endswith("] null")


def test_append_uses_injected_clock(tmp_path: Path) -> None:
    capture = LogCapture(tmp_path / "x.log", clock=lambda: datetime(2026, 1, 2, 3, 4, 5, 6_000))
    capture.append("tick")
    assert capture.read_all() == "[2026-01-02 03:04:05.006] tick\n"


def test_append_failure_is_swallowed(tmp_path: Path) -> None:
    capture = LogCapture(tmp_path / "missing-dir" / "x.log")
    capture.append("lost")
    assert capture.read_all() == NO_LOG_FILE


def test_read_failure_is_described(tmp_path: Path) -> None:
    # A directory exists but cannot be read as text.
    capture = LogCapture(tmp_path)
    assert capture.read_all().startswith("Error reading log file: ")


def test_clear_removes_file(capture: LogCapture) -> None:
    capture.append("line")
    assert capture.clear() is True
    assert capture.read_all() == NO_LOG_FILE
    assert capture.clear() is False


@pytest.mark.asyncio
async def test_upload_without_logs_skips_remote(capture: LogCapture, remote: InMemoryRemoteStore) -> None:
    assert await capture.upload() is False
    assert remote.calls == {}


@pytest.mark.asyncio
async def test_upload_empty_file_skips_remote(capture: LogCapture, remote: InMemoryRemoteStore) -> None:
    capture.log_file.write_text("", encoding="utf-8")
    assert await capture.upload() is False
    assert remote.calls == {}


@pytest.mark.asyncio
async def test_upload_then_download_round_trip(capture: LogCapture, remote: InMemoryRemoteStore) -> None:
    capture.append("sampler started")
    capture.append("position saved ✓")
    text = capture.read_all()

    assert await capture.upload() is True

    (doc,) = remote.documents("logs").values()
    assert doc["size"] == len(text.encode("utf-8"))
    assert doc["encryptedData"] != list(text.encode("utf-8"))
    assert await capture.download() == text


@pytest.mark.asyncio
async def test_download_returns_latest_snapshot(capture: LogCapture, remote: InMemoryRemoteStore) -> None:
    codec = XorCodec(KEY)
    await remote.write("logs", "old", {"id": "old", "encryptedData": codec.encode("old text"), "timestamp": 1, "size": 8})
    await remote.write("logs", "new", {"id": "new", "encryptedData": codec.encode("new text"), "timestamp": 2, "size": 8})

    assert await capture.download() == "new text"


@pytest.mark.asyncio
async def test_download_accepts_comma_joined_payload(capture: LogCapture, remote: InMemoryRemoteStore) -> None:
    payload = ",".join(str(b) for b in XorCodec(KEY).encode("legacy text"))
    await remote.write("logs", "legacy", {"id": "legacy", "encryptedData": payload, "timestamp": 5, "size": 11})

    assert await capture.download() == "legacy text"


@pytest.mark.asyncio
async def test_download_empty_collection(capture: LogCapture) -> None:
    assert await capture.download() == ""


@pytest.mark.asyncio
async def test_download_malformed_payload(capture: LogCapture, remote: InMemoryRemoteStore) -> None:
    await remote.write("logs", "bad", {"id": "bad", "encryptedData": "x,y", "timestamp": 5})
    assert await capture.download() == ""


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [[1, None, 3], [1, {"x": 1}]])
async def test_download_non_integer_bytes(capture: LogCapture, remote: InMemoryRemoteStore, payload: list) -> None:
    await remote.write("logs", "bad", {"id": "bad", "encryptedData": payload, "timestamp": 5, "size": 2})
    assert await capture.download() == ""


@pytest.mark.asyncio
async def test_download_accepts_signed_bytes(capture: LogCapture, remote: InMemoryRemoteStore) -> None:
    text = "café ✓"
    signed = [b - 256 if b > 127 else b for b in XorCodec(KEY).encode(text)]
    assert any(b < 0 for b in signed)
    await remote.write("logs", "legacy", {"id": "legacy", "encryptedData": signed, "timestamp": 5, "size": 9})

    assert await capture.download() == text


@pytest.mark.asyncio
async def test_download_with_non_numeric_latest_timestamp(capture: LogCapture, remote: InMemoryRemoteStore) -> None:
    codec = XorCodec(KEY)
    await remote.write("logs", "real", {"id": "real", "encryptedData": codec.encode("real"), "timestamp": 5, "size": 4})
    await remote.write("logs", "odd", {"id": "odd", "encryptedData": codec.encode("odd"), "timestamp": "late", "size": 3})

    # Strings order after numbers, so the odd entry is the newest and fails validation.
    assert await capture.download() == ""


@pytest.mark.asyncio
async def test_remote_failures_report_failure(tmp_path: Path) -> None:
    remote = InMemoryRemoteStore(fail_operations={"write", "get_ordered_last", "remove_all"})
    capture = LogCapture(tmp_path / "x.log", store=remote, codec=XorCodec(KEY))
    capture.append("line")

    assert await capture.upload() is False
    assert await capture.download() == ""
    assert await capture.delete_remote() is False


@pytest.mark.asyncio
async def test_delete_remote(capture: LogCapture, remote: InMemoryRemoteStore) -> None:
    capture.append("line")
    await capture.upload()

    assert await capture.delete_remote() is True
    assert await capture.download() == ""


@pytest.mark.asyncio
async def test_without_store_remote_calls_fail(tmp_path: Path) -> None:
    capture = LogCapture(tmp_path / "x.log")
    capture.append("line")

    assert await capture.upload() is False
    assert await capture.download() == ""
    assert await capture.delete_remote() is False


def test_handler_mirrors_log_records(capture: LogCapture) -> None:
    logger = logging.getLogger("geotrail.tests.handler")
    logger.setLevel(logging.INFO)
    handler = LogCaptureHandler(capture)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    logger.addHandler(handler)
    try:
        logger.info("saved %d record(s)", 3)
    finally:
        logger.removeHandler(handler)

    assert capture.read_all().rstrip("\n").endswith("] INFO saved 3 record(s)")

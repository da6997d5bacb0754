"""Uploaded log snapshot model."""

from __future__ import annotations

from pydantic import Field

from geotrail.models._base import ByteList, TrailBaseModel


class LogEntry(TrailBaseModel):
    """One uploaded copy of the local log file.

    Parameters
    ----------
    id : str
        Remote key.
    encrypted_data : list[int]
        Obfuscated UTF-8 log text.  Older writers stored it as a
        comma-joined string; both forms are accepted on read.
    timestamp : int
        Upload time in epoch milliseconds.
    size : int
        Byte length of the plaintext.
    """

    id: str = ""
    encrypted_data: ByteList = Field(default_factory=list)
    timestamp: int = 0
    size: int = 0

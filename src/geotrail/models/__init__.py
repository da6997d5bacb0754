"""Data models for stored positions and logs."""

from geotrail.models._base import ByteList, TrailBaseModel, now_ms, parse_byte_list
from geotrail.models.log_entry import LogEntry
from geotrail.models.position import EncodedRecord, PositionFix, PositionRecord

__all__ = [
    "ByteList",
    "EncodedRecord",
    "LogEntry",
    "PositionFix",
    "PositionRecord",
    "TrailBaseModel",
    "now_ms",
    "parse_byte_list",
]

"""Position models."""

from __future__ import annotations

import json
import logging

from pydantic import Field, ValidationError

from geotrail.models._base import ByteList, TrailBaseModel, now_ms

_logger = logging.getLogger(__name__)


class PositionRecord(TrailBaseModel):
    """A single stored position.

    Parameters
    ----------
    id : str
        Remote key.  Empty until the record is appended.
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    timestamp : int
        Capture time in epoch milliseconds.  The only field a merge
        ever changes.
    """

    id: str = ""
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    timestamp: int

    def with_timestamp(self, timestamp: int) -> PositionRecord:
        return self.model_copy(update={"timestamp": timestamp})

    def with_id(self, record_id: str) -> PositionRecord:
        return self.model_copy(update={"id": record_id})

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, text: str) -> PositionRecord | None:
        """Parse a decoded payload, returning ``None`` when it is malformed."""
        try:
            return cls.model_validate_json(text)
        except (ValidationError, json.JSONDecodeError, ValueError) as exc:
            _logger.debug("Discarding malformed position payload: %s", exc)
            return None


class EncodedRecord(TrailBaseModel):
    """At-rest form of a :class:`PositionRecord`.

    ``timestamp`` duplicates the value inside the obfuscated payload so the
    store can order and evict without decoding.
    """

    id: str = ""
    encrypted_data: ByteList = Field(default_factory=list)
    timestamp: int = 0


class PositionFix(TrailBaseModel):
    """A fix delivered by a positioning source."""

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    sampled_at: int = Field(default_factory=now_ms)

    def to_record(self) -> PositionRecord:
        return PositionRecord(latitude=self.latitude, longitude=self.longitude, timestamp=self.sampled_at)

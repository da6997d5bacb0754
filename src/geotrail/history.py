"""Presentation helpers for stored position history."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from geotrail.geo import distance_between
from geotrail.models import PositionRecord


def newest_first(records: Sequence[PositionRecord]) -> list[PositionRecord]:
    """List-view ordering."""
    return sorted(records, key=lambda r: r.timestamp, reverse=True)


def route(records: Sequence[PositionRecord]) -> list[PositionRecord]:
    """Chronological ordering for drawing a route."""
    return sorted(records, key=lambda r: r.timestamp)


@dataclass(frozen=True, slots=True)
class RouteSummary:
    points: int
    start: PositionRecord | None
    end: PositionRecord | None
    total_distance_meters: float


def route_summary(records: Sequence[PositionRecord]) -> RouteSummary:
    """Start, end and travelled distance along the chronological route."""
    ordered = route(records)
    if not ordered:
        return RouteSummary(points=0, start=None, end=None, total_distance_meters=0.0)
    total = sum(distance_between(a, b) for a, b in zip(ordered, ordered[1:]))
    return RouteSummary(points=len(ordered), start=ordered[0], end=ordered[-1], total_distance_meters=total)

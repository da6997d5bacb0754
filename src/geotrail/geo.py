"""Great-circle distance helpers."""

from __future__ import annotations

import math
from typing import Protocol

from geotrail._constants import EARTH_RADIUS_KM


class HasCoordinates(Protocol):
    @property
    def latitude(self) -> float: ...

    @property
    def longitude(self) -> float: ...


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in meters on a spherical Earth (radius 6371 km)."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = math.sin(d_lat / 2) ** 2 + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    # Rounding can push ``a`` a hair past 1 for antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c * 1000


def distance_between(first: HasCoordinates, other: HasCoordinates) -> float:
    """Distance in meters between two objects exposing ``latitude``/``longitude``."""
    return distance_meters(first.latitude, first.longitude, other.latitude, other.longitude)

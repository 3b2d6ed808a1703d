from __future__ import annotations

import math
from typing import Any, Literal, Sequence

from pydantic import BaseModel, Field

EARTH_RADIUS_KM = 6371.0
METERS_PER_MILE = 1609.34  # stored radius thresholds were computed with this factor


class GeoPoint(BaseModel):
    """GeoJSON point. Coordinates are ``[lng, lat]``."""

    type: Literal["Point"] = "Point"
    coordinates: list[float] = Field(..., min_length=2, max_length=2)

    @property
    def lat(self) -> float:
        return self.coordinates[1]

    @property
    def lng(self) -> float:
        return self.coordinates[0]

    def lat_lng(self) -> tuple[float, float]:
        return self.coordinates[1], self.coordinates[0]


def to_geo_point(lat: Any, lng: Any) -> GeoPoint | None:
    """Build a point from loosely typed lat/lng, or ``None`` if either is unusable."""
    try:
        lat_f = float(lat)
        lng_f = float(lng)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
        return None
    return GeoPoint(coordinates=[lng_f, lat_f])


def miles_to_meters(miles: float) -> float:
    return miles * METERS_PER_MILE


def meters_to_miles(meters: float) -> float:
    return meters / METERS_PER_MILE


def haversine_distance_km(coord1: Sequence[float], coord2: Sequence[float]) -> float:
    """Great-circle distance in km between two ``[lat, lng]`` pairs."""
    lat1, lon1 = coord1
    lat2, lon2 = coord2

    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..events.models import LocationType
from ..storage.repository import EventQuery
from .geo import GeoPoint, miles_to_meters, to_geo_point


@dataclass(frozen=True)
class GeoSelector:
    point: GeoPoint
    radius_meters: float


@dataclass(frozen=True)
class CitySelector:
    city: str


@dataclass(frozen=True)
class ZipSelector:
    zip_code: str


LocationSelector = GeoSelector | CitySelector | ZipSelector


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class EventFilters:
    category: str | None = None
    location_type: str | None = None
    event_type: str | None = None
    status: str | None = None
    hosted_by: str | None = None
    upcoming: bool = False
    past: bool = False
    lat: Any = None
    lng: Any = None
    radius_miles: float | None = None
    city: str | None = None
    zip_code: str | None = None

    def base_query(self, now: datetime, text: str | None = None) -> EventQuery:
        """Every non-location filter as a repository query."""
        starts_from = now if self.upcoming and not self.past else None
        starts_before = now if self.past else None
        return EventQuery(
            category=_clean(self.category),
            location_type=_clean(self.location_type),
            event_type=_clean(self.event_type),
            status=_clean(self.status),
            hosted_by=_clean(self.hosted_by),
            starts_from=starts_from,
            starts_before=starts_before,
            text=text,
        )

    def location_selector(self) -> LocationSelector | None:
        """Geo radius, then city, then ZIP. The first usable one wins."""
        if self.lat is not None and self.lng is not None and self.radius_miles:
            point = to_geo_point(self.lat, self.lng)
            if point is not None:
                return GeoSelector(point=point, radius_meters=miles_to_meters(self.radius_miles))
        city = _clean(self.city)
        if city:
            return CitySelector(city=city)
        zip_code = _clean(self.zip_code)
        if zip_code:
            return ZipSelector(zip_code=zip_code)
        return None

    def wants(self, location_type: LocationType) -> bool:
        wanted = _clean(self.location_type)
        return wanted is None or wanted == location_type.value

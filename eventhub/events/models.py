from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..discovery.geo import GeoPoint, to_geo_point

EVENT_CATEGORIES: list[str] = [
    "Tech",
    "Business",
    "Arts & Culture",
    "Sports & Recreation",
    "Health & Wellness",
    "Food & Drink",
    "Music",
    "Photography",
    "Travel",
    "Education",
    "Social",
    "Other",
]


class EventType(str, Enum):
    event = "event"
    group = "group"


class LocationType(str, Enum):
    online = "online"
    in_person = "in-person"


class EventStatus(str, Enum):
    upcoming = "upcoming"
    past = "past"
    cancelled = "cancelled"


class CamelModel(BaseModel):
    """Base for documents that are stored and served with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class EventLocation(CamelModel):
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    geo: GeoPoint | None = None

    @field_validator("city", "state", "zip_code", "address", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("geo", mode="before")
    @classmethod
    def _lenient_geo(cls, value: Any) -> Any:
        # Unparseable points load as None so a single bad record only loses proximity.
        if value is None or isinstance(value, GeoPoint):
            return value
        if isinstance(value, dict):
            if "lat" in value and "lng" in value:
                return to_geo_point(value["lat"], value["lng"])
            coords = value.get("coordinates")
            if isinstance(coords, (list, tuple)) and len(coords) == 2:
                return to_geo_point(coords[1], coords[0])
        return None


class Event(CamelModel):
    id: str
    title: str
    description: str = ""
    category: str
    event_type: EventType = EventType.event
    location_type: LocationType
    location: EventLocation = Field(default_factory=EventLocation)
    date_and_time: datetime
    hosted_by: str | None = None
    attendees: list[str] = Field(default_factory=list)
    max_attendees: int | None = Field(default=None, ge=1)
    status: EventStatus = EventStatus.upcoming
    group_id: str | None = None

    @field_validator("date_and_time")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return utc(value)

    @field_validator("attendees", mode="before")
    @classmethod
    def _attendee_ids(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple, set)):
            return [str(v) for v in value]
        return value

    @property
    def is_full(self) -> bool:
        if not self.max_attendees:
            return False
        return len(self.attendees) >= self.max_attendees

    def days_until(self, now: datetime) -> float:
        return (self.date_and_time - now).total_seconds() / 86400


def derive_status(event: Event, now: datetime | None = None) -> Event:
    """Return ``event`` with its status recomputed from its date, keeping cancellations."""
    if event.status == EventStatus.cancelled:
        return event
    now = now or datetime.now(timezone.utc)
    status = EventStatus.past if event.date_and_time < now else EventStatus.upcoming
    if status == event.status:
        return event
    return event.model_copy(update={"status": status})


class UserLocation(BaseModel):
    """User coordinates, ``[lat, lng]`` (the opposite order of :class:`GeoPoint`)."""

    coordinates: list[float] = Field(..., min_length=2, max_length=2)


class User(CamelModel):
    id: str
    username: str
    name: str | None = None
    role: str = "user"
    interests: list[str] = Field(default_factory=list)
    location: UserLocation | None = None
    password_hash: str | None = Field(default=None, exclude=True)

    @field_validator("location", mode="before")
    @classmethod
    def _lenient_location(cls, value: Any) -> Any:
        if isinstance(value, dict):
            coords = value.get("coordinates")
            if not (isinstance(coords, (list, tuple)) and len(coords) == 2):
                return None
            point = to_geo_point(coords[0], coords[1])
            if point is None:
                return None
            return {"coordinates": list(point.lat_lng())}
        if isinstance(value, str):
            # Free-text profile locations carry no coordinates.
            return None
        return value

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from ..discovery.geo import GeoPoint
from ..events.models import CamelModel, Event, User


@dataclass(frozen=True)
class EventQuery:
    """Datastore-independent description of an event filter.

    ``city`` matches case-insensitively but exactly; ``text`` is a
    case-insensitive substring over title, description and category.
    """

    category: str | None = None
    location_type: str | None = None
    event_type: str | None = None
    status: str | None = None
    exclude_status: str | None = None
    hosted_by: str | None = None
    starts_from: datetime | None = None
    starts_until: datetime | None = None
    starts_before: datetime | None = None
    city: str | None = None
    zip_code: str | None = None
    text: str | None = None


class LocationSuggestion(CamelModel):
    type: str
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    count: int


class EventRepository(Protocol):
    def get(self, event_id: str) -> Event | None: ...

    def find(
        self, query: EventQuery, *, skip: int = 0, limit: int | None = None
    ) -> list[Event]:
        """Matching events sorted by date ascending."""
        ...

    def count(self, query: EventQuery) -> int: ...

    def find_near(
        self,
        point: GeoPoint,
        max_meters: float,
        query: EventQuery,
        *,
        limit: int | None = None,
    ) -> list[tuple[Event, float]]:
        """Matching events within ``max_meters`` as ``(event, meters)``, nearest first."""
        ...

    def save(self, event: Event) -> Event: ...

    def city_counts(self, needle: str | None, limit: int) -> list[LocationSuggestion]: ...

    def cities(self) -> list[str]:
        """Distinct in-person event cities, sorted."""
        ...

    def zip_counts(self, prefix: str, limit: int) -> list[LocationSuggestion]: ...


class UserRepository(Protocol):
    def get(self, user_id: str) -> User | None: ...

    def get_by_username(self, username: str) -> User | None: ...

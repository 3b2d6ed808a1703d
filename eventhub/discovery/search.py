"""
Event listing and text search.

When a location selector is active the result set is the union of two
branches, matching in-person events and online events, which cannot be
expressed as one datastore query. Each branch is fetched in date order (the
geo branch is bounded by its radius and re-sorted by date), the branches are
merged lazily by date, and the requested page is sliced from the merge.

Page ``p`` of the merged order only ever draws on the first ``p * limit``
rows of each date-sorted branch, so fetching ``max(100, 5 * limit, p * limit)``
rows per branch yields the exact page. Totals come from per-branch counts.
"""
from __future__ import annotations

import heapq
import logging
from dataclasses import replace
from datetime import datetime, timezone
from itertools import islice

from ..errors import InvalidQueryError
from ..events.models import Event, LocationType
from ..storage.repository import EventQuery, EventRepository
from .config import DEFAULT_DISCOVERY_CONFIG, DiscoveryConfig
from .filters import CitySelector, EventFilters, GeoSelector, LocationSelector
from .geo import meters_to_miles
from .models import EventOut, EventPage, Pagination

logger = logging.getLogger(__name__)


def _out(event: Event, distance_miles: float | None = None) -> EventOut:
    return EventOut(**event.model_dump(), distance_miles=distance_miles)


def _in_person_branch(
    events: EventRepository,
    base: EventQuery,
    selector: LocationSelector,
    fetch: int,
) -> tuple[list[EventOut], int]:
    query = replace(base, location_type=LocationType.in_person.value)

    if isinstance(selector, GeoSelector):
        near = events.find_near(selector.point, selector.radius_meters, query)
        rows = [_out(e, round(meters_to_miles(meters), 1)) for e, meters in near]
        rows.sort(key=lambda e: e.date_and_time)
        return rows, len(rows)

    if isinstance(selector, CitySelector):
        query = replace(query, city=selector.city)
    else:
        query = replace(query, zip_code=selector.zip_code)
    return [_out(e) for e in events.find(query, limit=fetch)], events.count(query)


def list_events(
    events: EventRepository,
    filters: EventFilters,
    page: int = 1,
    limit: int = 20,
    *,
    text: str | None = None,
    now: datetime | None = None,
    config: DiscoveryConfig = DEFAULT_DISCOVERY_CONFIG,
) -> EventPage:
    now = now or datetime.now(timezone.utc)
    base = filters.base_query(now, text=text)
    selector = filters.location_selector()

    if selector is None:
        total = events.count(base)
        found = events.find(base, skip=(page - 1) * limit, limit=limit)
        return EventPage(
            events=[_out(e) for e in found],
            pagination=Pagination.build(page, limit, total),
        )

    fetch = config.branch_fetch(page, limit)
    branches: list[list[EventOut]] = []
    total = 0

    if filters.wants(LocationType.in_person):
        rows, count = _in_person_branch(events, base, selector, fetch)
        branches.append(rows)
        total += count

    # Online events ignore the location selector.
    if filters.wants(LocationType.online):
        online = replace(base, location_type=LocationType.online.value)
        branches.append([_out(e) for e in events.find(online, limit=fetch)])
        total += events.count(online)

    logger.debug(
        "%s selector: %s branch rows, %d total",
        type(selector).__name__,
        [len(b) for b in branches],
        total,
    )

    merged = heapq.merge(*branches, key=lambda e: e.date_and_time)
    start = (page - 1) * limit
    return EventPage(
        events=list(islice(merged, start, start + limit)),
        pagination=Pagination.build(page, limit, total),
    )


def search_events(
    events: EventRepository,
    q: str | None,
    filters: EventFilters,
    page: int = 1,
    limit: int = 20,
    *,
    now: datetime | None = None,
    config: DiscoveryConfig = DEFAULT_DISCOVERY_CONFIG,
) -> EventPage:
    """Case-insensitive substring search over title, description and category."""
    if not q or not q.strip():
        raise InvalidQueryError("Search query is required")
    return list_events(
        events, filters, page, limit, text=q.strip(), now=now, config=config
    )

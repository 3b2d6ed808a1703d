from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from ..errors import NotFoundError
from ..events.models import EventStatus
from ..storage.repository import EventQuery, EventRepository, UserRepository
from .config import DEFAULT_DISCOVERY_CONFIG, DiscoveryConfig
from .models import EventOut, RecommendedEvent
from .scoring import rsvp_velocity, score_event, user_coordinates

logger = logging.getLogger(__name__)


def get_recommendations(
    users: UserRepository,
    events: EventRepository,
    user_id: str,
    limit: int = 10,
    *,
    now: datetime | None = None,
    config: DiscoveryConfig = DEFAULT_DISCOVERY_CONFIG,
) -> list[RecommendedEvent]:
    """Upcoming events ranked by relevance to ``user_id``, zero scores dropped."""
    user = users.get(user_id)
    if user is None:
        raise NotFoundError("User not found")

    now = now or datetime.now(timezone.utc)
    candidates = events.find(
        EventQuery(starts_from=now, exclude_status=EventStatus.cancelled.value),
        limit=config.recommendation_candidates,
    )

    location = user_coordinates(user)
    scored = [score_event(event, user, location, now) for event in candidates]
    ranked = sorted((s for s in scored if s.score > 0), key=lambda s: s.score, reverse=True)

    logger.debug(
        "Scored %d candidates for user %s, %d above zero", len(scored), user_id, len(ranked)
    )
    return [s.to_item() for s in ranked[:limit]]


def get_trending_events(
    events: EventRepository,
    limit: int = 10,
    *,
    now: datetime | None = None,
    config: DiscoveryConfig = DEFAULT_DISCOVERY_CONFIG,
) -> list[EventOut]:
    """Non-cancelled events in the next week, fastest-filling first."""
    now = now or datetime.now(timezone.utc)
    window_end = now + timedelta(days=config.trending_window_days)
    candidates = events.find(
        EventQuery(
            starts_from=now,
            starts_until=window_end,
            exclude_status=EventStatus.cancelled.value,
        ),
        limit=config.trending_candidates,
    )
    ranked = sorted(candidates, key=lambda e: rsvp_velocity(e, now), reverse=True)
    return [EventOut(**e.model_dump()) for e in ranked[:limit]]

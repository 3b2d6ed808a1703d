"""
Recommendation scoring.

An event's score is the sum of the contributions of ``SCORING_RULES``
(interest 40, proximity 25, RSVP velocity 20, timing 10).
After every rule has run, each check in ``VETOES`` that fires forces the
score to exactly 0 and appends its reason; reasons from the additive rules are
kept.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Sequence

from ..events.models import Event, User
from .geo import haversine_distance_km
from .models import ScoredEvent

INTEREST_POINTS = 40
PROXIMITY_POINTS = 25
PROXIMITY_RADIUS_KM = 50
TRENDING_POINTS = 20
POPULAR_POINTS = 10
SOON_POINTS = 10
THIS_MONTH_POINTS = 5


@dataclass(frozen=True)
class ScoringContext:
    event: Event
    user: User
    user_location: Sequence[float] | None
    now: datetime

    @property
    def days_until(self) -> float:
        return self.event.days_until(self.now)


@dataclass(frozen=True)
class Contribution:
    points: float = 0.0
    reason: str | None = None


NOTHING = Contribution()


def rsvp_velocity(event: Event, now: datetime) -> float:
    """Attendees per remaining day, with at least one day in the denominator."""
    return len(event.attendees) / max(1.0, event.days_until(now))


def interest_match(ctx: ScoringContext) -> Contribution:
    haystacks = (
        ctx.event.category.lower(),
        ctx.event.title.lower(),
        ctx.event.description.lower(),
    )
    for interest in ctx.user.interests:
        needle = interest.strip().lower()
        if needle and any(needle in h for h in haystacks):
            return Contribution(INTEREST_POINTS, "Matches your interests")
    return NOTHING


def location_proximity(ctx: ScoringContext) -> Contribution:
    geo = ctx.event.location.geo
    if ctx.user_location is None or geo is None:
        return NOTHING
    try:
        distance = haversine_distance_km(ctx.user_location, geo.lat_lng())
    except ValueError:
        return NOTHING
    if not math.isfinite(distance) or distance >= PROXIMITY_RADIUS_KM:
        return NOTHING
    points = max(0.0, PROXIMITY_POINTS * (1 - distance / PROXIMITY_RADIUS_KM))
    return Contribution(points, f"Near your location ({math.floor(distance + 0.5)}km away)")


def velocity_tier(ctx: ScoringContext) -> Contribution:
    velocity = rsvp_velocity(ctx.event, ctx.now)
    if velocity > 2:
        return Contribution(TRENDING_POINTS, "Trending event")
    if velocity > 1:
        return Contribution(POPULAR_POINTS, "Popular event")
    return NOTHING


def timing_tier(ctx: ScoringContext) -> Contribution:
    days = ctx.days_until
    if 0 < days < 7:
        return Contribution(SOON_POINTS, "Happening soon")
    if 0 < days < 30:
        return Contribution(THIS_MONTH_POINTS)
    return NOTHING


def already_attending(ctx: ScoringContext) -> str | None:
    if ctx.user.id in ctx.event.attendees:
        return "You're already attending"
    return None


def past_event(ctx: ScoringContext) -> str | None:
    if ctx.event.date_and_time < ctx.now:
        return "Past event"
    return None


SCORING_RULES: tuple[Callable[[ScoringContext], Contribution], ...] = (
    interest_match,
    location_proximity,
    velocity_tier,
    timing_tier,
)

VETOES: tuple[Callable[[ScoringContext], str | None], ...] = (
    already_attending,
    past_event,
)


def user_coordinates(user: User) -> list[float] | None:
    if user.location is None:
        return None
    return list(user.location.coordinates)


def score_event(
    event: Event,
    user: User,
    user_location: Sequence[float] | None,
    now: datetime,
) -> ScoredEvent:
    ctx = ScoringContext(event=event, user=user, user_location=user_location, now=now)

    score = 0.0
    reasons: list[str] = []
    for rule in SCORING_RULES:
        contribution = rule(ctx)
        score += contribution.points
        if contribution.reason:
            reasons.append(contribution.reason)

    for veto in VETOES:
        reason = veto(ctx)
        if reason:
            score = 0.0
            reasons.append(reason)

    return ScoredEvent(event=event, score=score, reasons=reasons)

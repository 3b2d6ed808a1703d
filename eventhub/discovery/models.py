from __future__ import annotations

import math

from pydantic import BaseModel, Field

from ..events.models import CamelModel, Event
from ..storage.repository import LocationSuggestion


class EventOut(Event):
    distance_miles: float | None = None


class RecommendedEvent(EventOut):
    recommendation_score: float
    recommendation_reasons: list[str] = Field(default_factory=list)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit))


class EventPage(BaseModel):
    events: list[EventOut]
    pagination: Pagination


class EventResponse(BaseModel):
    event: EventOut


class RSVPResponse(BaseModel):
    message: str
    event: EventOut


class RecommendationResponse(BaseModel):
    recommendations: list[RecommendedEvent]


class TrendingResponse(BaseModel):
    events: list[EventOut]


class SuggestionResponse(BaseModel):
    suggestions: list[LocationSuggestion]


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ScoredEvent(CamelModel):
    """An event with its relevance score and the reasons behind it. Not persisted."""

    event: Event
    score: float
    reasons: list[str] = Field(default_factory=list)

    def to_item(self) -> RecommendedEvent:
        return RecommendedEvent(
            **self.event.model_dump(),
            recommendation_score=self.score,
            recommendation_reasons=list(self.reasons),
        )

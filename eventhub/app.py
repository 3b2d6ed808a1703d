from __future__ import annotations

import os

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from starlette.middleware.sessions import SessionMiddleware

from .auth.dependencies import require_user
from .auth.users import authenticate
from .discovery.config import DEFAULT_DISCOVERY_CONFIG, DiscoveryConfig
from .discovery.filters import EventFilters
from .discovery.models import (
    EventOut,
    EventPage,
    EventResponse,
    LoginRequest,
    RecommendationResponse,
    RSVPResponse,
    SuggestionResponse,
    TrendingResponse,
)
from .discovery.recommendations import get_recommendations, get_trending_events
from .discovery.search import list_events, search_events
from .errors import ServiceError, general_exception_handler, service_exception_handler
from .events.models import EVENT_CATEGORIES, EventStatus, EventType, LocationType
from .events.service import EventService
from .notifications import LoggingNotificationSender, NotificationSender
from .storage.data_store import get_event_repository, get_user_repository
from .storage.repository import EventRepository, UserRepository

app = FastAPI(title="Event Discovery API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "eventhub-secret-change-in-production"),
)
app.add_exception_handler(ServiceError, service_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)


# ── Dependencies ─────────────────────────────────────────────────────────


def get_discovery_config() -> DiscoveryConfig:
    return DEFAULT_DISCOVERY_CONFIG


def get_notifier() -> NotificationSender:
    return LoggingNotificationSender()


def get_event_service(
    events: EventRepository = Depends(get_event_repository),
    notifier: NotificationSender = Depends(get_notifier),
) -> EventService:
    return EventService(events, notifier)


def event_filters(
    category: str | None = None,
    location_type: LocationType | None = Query(default=None, alias="locationType"),
    event_type: EventType | None = Query(default=None, alias="eventType"),
    status: EventStatus | None = None,
    hosted_by: str | None = Query(default=None, alias="hostedBy"),
    upcoming: bool = False,
    past: bool = False,
    lat: str | None = None,
    lng: str | None = None,
    radius: float | None = Query(default=None, gt=0, description="Radius in miles"),
    radius_miles: float | None = Query(default=None, alias="radiusMiles", gt=0),
    city: str | None = None,
    zip_code: str | None = Query(default=None, alias="zipCode"),
) -> EventFilters:
    return EventFilters(
        category=category,
        location_type=location_type.value if location_type else None,
        event_type=event_type.value if event_type else None,
        status=status.value if status else None,
        hosted_by=hosted_by,
        upcoming=upcoming,
        past=past,
        lat=lat,
        lng=lng,
        radius_miles=radius if radius is not None else radius_miles,
        city=city,
        zip_code=zip_code,
    )


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata(events: EventRepository = Depends(get_event_repository)) -> dict:
    return {"categories": EVENT_CATEGORIES, "cities": events.cities()}


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(
    body: LoginRequest,
    request: Request,
    users: UserRepository = Depends(get_user_repository),
) -> dict:
    user = authenticate(users, body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Event discovery ──────────────────────────────────────────────────────


@app.get("/events", response_model=EventPage)
def events_index(
    filters: EventFilters = Depends(event_filters),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    events: EventRepository = Depends(get_event_repository),
    config: DiscoveryConfig = Depends(get_discovery_config),
) -> EventPage:
    return list_events(events, filters, page, limit, config=config)


@app.get("/events/search", response_model=EventPage)
def events_search(
    q: str | None = None,
    filters: EventFilters = Depends(event_filters),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    events: EventRepository = Depends(get_event_repository),
    config: DiscoveryConfig = Depends(get_discovery_config),
) -> EventPage:
    return search_events(events, q, filters, page, limit, config=config)


@app.get("/events/suggestions", response_model=SuggestionResponse)
def event_suggestions(
    q: str | None = None,
    limit: int = 8,
    service: EventService = Depends(get_event_service),
) -> SuggestionResponse:
    return SuggestionResponse(suggestions=service.popular_cities(q, limit))


@app.get("/locations/suggest", response_model=SuggestionResponse)
def location_suggestions(
    q: str | None = None,
    limit: int = 10,
    service: EventService = Depends(get_event_service),
) -> SuggestionResponse:
    return SuggestionResponse(suggestions=service.suggest_locations(q, limit))


@app.get("/events/{event_id}", response_model=EventResponse)
def event_detail(
    event_id: str,
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    event = service.get_event(event_id)
    return EventResponse(event=EventOut(**event.model_dump()))


# ── RSVP ─────────────────────────────────────────────────────────────────


@app.post("/events/{event_id}/rsvp", response_model=RSVPResponse)
def rsvp(
    event_id: str,
    user: dict = Depends(require_user),
    service: EventService = Depends(get_event_service),
) -> RSVPResponse:
    event = service.rsvp(event_id, user["id"])
    return RSVPResponse(message="RSVP successful", event=EventOut(**event.model_dump()))


@app.delete("/events/{event_id}/rsvp", response_model=RSVPResponse)
def cancel_rsvp(
    event_id: str,
    user: dict = Depends(require_user),
    service: EventService = Depends(get_event_service),
) -> RSVPResponse:
    event = service.cancel_rsvp(event_id, user["id"])
    return RSVPResponse(message="RSVP cancelled", event=EventOut(**event.model_dump()))


# ── Recommendations ──────────────────────────────────────────────────────


@app.get("/recommendations", response_model=RecommendationResponse)
def recommendations(
    limit: int = Query(default=10, ge=1, le=50),
    user: dict = Depends(require_user),
    users: UserRepository = Depends(get_user_repository),
    events: EventRepository = Depends(get_event_repository),
    config: DiscoveryConfig = Depends(get_discovery_config),
) -> RecommendationResponse:
    items = get_recommendations(users, events, user["id"], limit, config=config)
    return RecommendationResponse(recommendations=items)


@app.get("/recommendations/trending", response_model=TrendingResponse)
def trending(
    limit: int = Query(default=10, ge=1, le=50),
    user: dict = Depends(require_user),
    events: EventRepository = Depends(get_event_repository),
    config: DiscoveryConfig = Depends(get_discovery_config),
) -> TrendingResponse:
    return TrendingResponse(events=get_trending_events(events, limit, config=config))

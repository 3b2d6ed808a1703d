from __future__ import annotations

import json
import logging

from ..auth.users import demo_users
from ..events.models import Event, User
from .config import DEFAULT_STORE_CONFIG, StoreConfig
from .memory import InMemoryEventRepository, InMemoryUserRepository
from .mongo import MongoEventRepository, MongoUserRepository, connect
from .repository import EventRepository, UserRepository

logger = logging.getLogger(__name__)

_events: EventRepository | None = None
_users: UserRepository | None = None


def _load_seed(config: StoreConfig) -> tuple[list[Event], list[User]]:
    if not config.seed_path.exists():
        logger.info("No seed file at %s, starting with an empty event store", config.seed_path)
        return [], []
    raw = json.loads(config.seed_path.read_text(encoding="utf-8"))
    events = [Event.model_validate(e) for e in raw.get("events", [])]
    users = [User.model_validate(u) for u in raw.get("users", [])]
    return events, users


def _build(config: StoreConfig) -> tuple[EventRepository, UserRepository]:
    if config.backend == "mongo":
        db = connect(config)
        events = MongoEventRepository(db[config.events_collection])
        events.ensure_indexes()
        return events, MongoUserRepository(db[config.users_collection])

    seed_events, seed_users = _load_seed(config)
    users = InMemoryUserRepository(seed_users)
    if config.seed_demo_users:
        for user in demo_users():
            users.add(user)
    logger.info("In-memory store loaded with %d events", len(seed_events))
    return InMemoryEventRepository(seed_events), users


def _ensure_loaded() -> None:
    global _events, _users
    if _events is None or _users is None:
        _events, _users = _build(DEFAULT_STORE_CONFIG)


def get_event_repository() -> EventRepository:
    """Return the process-wide event repository, building it on first call."""
    _ensure_loaded()
    return _events


def get_user_repository() -> UserRepository:
    """Return the process-wide user repository, building it on first call."""
    _ensure_loaded()
    return _users

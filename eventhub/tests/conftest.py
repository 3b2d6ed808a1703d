from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from eventhub.events.models import Event, User


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@pytest.fixture
def make_event(now):
    """Build an event ``days`` from now. In-person events need ``city`` or ``lat``/``lng``."""

    def _make(
        event_id: str,
        days: float = 10,
        *,
        online: bool = False,
        city: str | None = None,
        zip_code: str | None = None,
        lat: float | None = None,
        lng: float | None = None,
        **fields,
    ) -> Event:
        location: dict = {}
        if not online:
            location = {"city": city, "zipCode": zip_code}
            if lat is not None and lng is not None:
                location["geo"] = {"type": "Point", "coordinates": [lng, lat]}
        data = {
            "id": event_id,
            "title": f"Event {event_id}",
            "description": "",
            "category": "Other",
            "locationType": "online" if online else "in-person",
            "location": location,
            "dateAndTime": now + timedelta(days=days),
        }
        data.update(fields)
        return Event.model_validate(data)

    return _make


@pytest.fixture
def make_user():
    def _make(user_id: str = "u1", **fields) -> User:
        data = {"id": user_id, "username": user_id}
        data.update(fields)
        return User.model_validate(data)

    return _make

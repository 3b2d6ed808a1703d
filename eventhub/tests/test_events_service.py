from unittest.mock import MagicMock

import pytest

from eventhub.errors import NotFoundError, RSVPError
from eventhub.events.service import EventService
from eventhub.storage.memory import InMemoryEventRepository


@pytest.fixture
def repo(make_event):
    return InMemoryEventRepository(
        [
            make_event("open", days=5, city="Seattle", zip_code="98101", title="Open mic"),
            make_event("full", days=5, city="Seattle", maxAttendees=1, attendees=["someone"]),
            make_event("done", days=-1, city="Seattle"),
            make_event("off", days=5, city="Seattle", status="cancelled"),
            make_event("mine", days=5, city="Portland", zip_code="97205", attendees=["me"]),
        ]
    )


def test_rsvp_adds_attendee_and_notifies(repo, now):
    notifier = MagicMock()
    event = EventService(repo, notifier).rsvp("open", "me", now=now)

    assert event.attendees == ["me"]
    assert repo.get("open").attendees == ["me"]
    notifier.send.assert_called_once_with(
        "me",
        "rsvp_confirmation",
        "RSVP Confirmed",
        "You've successfully RSVP'd to Open mic",
        {"eventId": "open", "eventTitle": "Open mic"},
    )


@pytest.mark.parametrize(
    "event_id,message",
    [
        ("mine", "You have already RSVP'd to this event"),
        ("full", "Event is at full capacity"),
        ("done", "Cannot RSVP to past events"),
        ("off", "Cannot RSVP to a cancelled event"),
    ],
)
def test_rsvp_rejections(repo, now, event_id, message):
    with pytest.raises(RSVPError, match=message):
        EventService(repo, MagicMock()).rsvp(event_id, "me", now=now)


def test_rsvp_unknown_event(repo):
    with pytest.raises(NotFoundError):
        EventService(repo).rsvp("missing", "me")


def test_notification_failure_keeps_rsvp(repo, now):
    notifier = MagicMock()
    notifier.send.side_effect = RuntimeError("mail down")

    event = EventService(repo, notifier).rsvp("open", "me", now=now)

    assert event.attendees == ["me"]
    assert repo.get("open").attendees == ["me"]


def test_cancel_rsvp(repo):
    service = EventService(repo)
    assert service.cancel_rsvp("mine", "me").attendees == []
    with pytest.raises(RSVPError, match="haven't RSVP'd"):
        service.cancel_rsvp("mine", "me")


def test_suggest_locations_adds_zip_codes_for_numeric_input(repo):
    service = EventService(repo)
    suggestions = service.suggest_locations("981")
    assert [(s.type, s.zip_code) for s in suggestions] == [("zip", "98101")]

    cities = service.suggest_locations("port")
    assert [(s.type, s.city) for s in cities] == [("city", "Portland")]


def test_suggest_locations_without_query_lists_top_cities(repo):
    cities = EventService(repo).suggest_locations(None)
    assert [(s.city, s.count) for s in cities] == [("Seattle", 4), ("Portland", 1)]


def test_suggestion_limits_are_clamped(repo):
    service = EventService(repo)
    assert len(service.suggest_locations("", limit=0)) == 1
    assert len(service.popular_cities(None, limit=-5)) == 1
    assert len(service.popular_cities("  ", limit=500)) == 2

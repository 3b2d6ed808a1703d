from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from ..errors import NotFoundError, RSVPError
from ..notifications import LoggingNotificationSender, NotificationSender
from ..storage.repository import EventRepository, LocationSuggestion
from .models import Event, EventStatus

logger = logging.getLogger(__name__)

_ZIP_QUERY = re.compile(r"^\d{1,10}$")


def _clamp(value: int, low: int, high: int) -> int:
    return min(high, max(low, value))


class EventService:
    def __init__(
        self,
        events: EventRepository,
        notifier: NotificationSender | None = None,
    ) -> None:
        self._events = events
        self._notifier = notifier or LoggingNotificationSender()

    def get_event(self, event_id: str) -> Event:
        event = self._events.get(event_id)
        if event is None:
            raise NotFoundError("Event not found")
        return event

    def rsvp(self, event_id: str, user_id: str, now: datetime | None = None) -> Event:
        event = self.get_event(event_id)
        now = now or datetime.now(timezone.utc)

        if user_id in event.attendees:
            raise RSVPError("You have already RSVP'd to this event")
        if event.is_full:
            raise RSVPError("Event is at full capacity")
        if event.date_and_time < now:
            raise RSVPError("Cannot RSVP to past events")
        if event.status == EventStatus.cancelled:
            raise RSVPError("Cannot RSVP to a cancelled event")

        event = self._events.save(
            event.model_copy(update={"attendees": [*event.attendees, user_id]})
        )

        try:
            self._notifier.send(
                user_id,
                "rsvp_confirmation",
                "RSVP Confirmed",
                f"You've successfully RSVP'd to {event.title}",
                {"eventId": event.id, "eventTitle": event.title},
            )
        except Exception:
            logger.warning("Failed to send RSVP notification for %s", event.id, exc_info=True)

        return event

    def cancel_rsvp(self, event_id: str, user_id: str) -> Event:
        event = self.get_event(event_id)
        if user_id not in event.attendees:
            raise RSVPError("You haven't RSVP'd to this event")
        remaining = [a for a in event.attendees if a != user_id]
        return self._events.save(event.model_copy(update={"attendees": remaining}))

    def suggest_locations(self, q: str | None, limit: int = 10) -> list[LocationSuggestion]:
        """Cities, and ZIP codes for numeric input, drawn from existing in-person events."""
        limit = _clamp(limit, 1, 25)
        needle = (q or "").strip()
        if not needle:
            return self._events.city_counts(None, limit)

        suggestions = self._events.city_counts(needle, limit)
        if _ZIP_QUERY.match(needle):
            suggestions += self._events.zip_counts(needle, limit)
        return suggestions[:limit]

    def popular_cities(self, q: str | None, limit: int = 8) -> list[LocationSuggestion]:
        return self._events.city_counts((q or "").strip() or None, _clamp(limit, 1, 20))

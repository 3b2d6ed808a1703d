"""
Event records and the operations on a single event.

Responsibilities:
- Define the event and user documents shared by every layer.
- Derive an event's status from its date.
- Fetch events, RSVP and cancel RSVPs, suggest cities and ZIP codes.
"""

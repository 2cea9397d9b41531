from __future__ import annotations

from datetime import date, datetime, time, timedelta

from em_core.events.constants import EventType
from em_core.events.models import Event
from em_core.events.services import EventInput

# Fixed local wall-clock "now" for service-level tests.
NOW = datetime(2030, 6, 15, 12, 0, 0)
TODAY = NOW.date()
TOMORROW = TODAY + timedelta(days=1)


def event_input(**overrides) -> EventInput:
    values = {
        "title": "Team offsite",
        "description": "Quarterly planning",
        "event_date": TOMORROW,
        "start_time": time(10, 0),
        "end_time": time(11, 0),
        "location": "Hall A",
        "event_type": EventType.PUBLIC,
        "invited_user_ids": frozenset(),
    }
    values.update(overrides)
    if not isinstance(values["invited_user_ids"], frozenset):
        values["invited_user_ids"] = frozenset(values["invited_user_ids"])
    return EventInput(**values)


def make_event(
    organizer,
    *,
    title: str = "Stored event",
    event_date: date = TOMORROW,
    start_time: time = time(10, 0),
    end_time: time = time(11, 0),
    event_type: str = EventType.PUBLIC,
    invited=(),
    location: str = "Room 1",
) -> Event:
    """Insert an event row directly, bypassing the create-time checks."""
    event = Event.objects.create(
        title=title,
        description="",
        event_date=event_date,
        start_time=start_time,
        end_time=end_time,
        location=location,
        event_type=event_type,
        organizer=organizer,
    )
    if invited:
        event.invited_users.set(invited)
    return event

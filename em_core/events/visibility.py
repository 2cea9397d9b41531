# em_core/events/visibility.py
"""
Pure access and time-state rules for events.

Nothing here touches the database: callers pass the loaded event row and,
where needed, the invited user ids and a local wall-clock `now`.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable

from django.utils import timezone

from em_core.events.constants import EventType, TimeState


def local_now(now: datetime | None = None) -> datetime:
    """Naive local wall-clock time, comparable with event date/time columns."""
    now = now or timezone.now()
    if timezone.is_aware(now):
        now = timezone.localtime(now)
    return now.replace(tzinfo=None)


def is_organizer(user_id: int | None, event) -> bool:
    return user_id is not None and event.organizer_id == user_id


def can_access(user_id: int | None, event, invited_ids: Iterable[int]) -> bool:
    if event.event_type == EventType.PUBLIC:
        return True
    if is_organizer(user_id, event):
        return True
    return user_id is not None and user_id in set(invited_ids)


def starts_at(event_date: date, start_time: time) -> datetime:
    return datetime.combine(event_date, start_time)


def ends_at(event_date: date, end_time: time) -> datetime:
    return datetime.combine(event_date, end_time)


def duration(start_time: time, end_time: time) -> timedelta:
    anchor = date(2000, 1, 1)
    return datetime.combine(anchor, end_time) - datetime.combine(anchor, start_time)


def time_state(event, now: datetime) -> TimeState:
    start = starts_at(event.event_date, event.start_time)
    end = ends_at(event.event_date, event.end_time)
    if now < start:
        return TimeState.FUTURE
    if now > end:
        return TimeState.PAST
    return TimeState.ONGOING


def has_ended(event, now: datetime) -> bool:
    return time_state(event, now) == TimeState.PAST


def has_started(event, now: datetime) -> bool:
    return time_state(event, now) != TimeState.FUTURE

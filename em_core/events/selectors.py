# em_core/events/selectors.py
from __future__ import annotations

from datetime import date

from django.db.models import Q, QuerySet

from em_core.common.errors import Forbidden, NotFound
from em_core.events.constants import EventType
from em_core.events.models import Event
from em_core.events.visibility import can_access


class EventSelectors:
    """
    Read-only queries for events.
    No .save(), no state mutation here.
    """

    ORDERING = ("event_date", "start_time", "id")

    @staticmethod
    def base() -> QuerySet[Event]:
        return (
            Event.objects.select_related("organizer")
            .prefetch_related("invited_users")
            .order_by(*EventSelectors.ORDERING)
        )

    @staticmethod
    def accessible(user_id: int) -> QuerySet[Event]:
        """PUBLIC, organized by the caller, or with the caller invited."""
        return EventSelectors.base().filter(
            Q(event_type=EventType.PUBLIC)
            | Q(organizer_id=user_id)
            | Q(invitations__user_id=user_id)
        ).distinct()

    @staticmethod
    def get_event(event_id: int) -> Event:
        try:
            return EventSelectors.base().get(id=event_id)
        except Event.DoesNotExist:
            raise NotFound(f"Event not found with id: {event_id}")

    @staticmethod
    def get_event_for_update(event_id: int) -> Event:
        """Row lock for organizer checks inside a write transaction."""
        try:
            return Event.objects.select_for_update().get(id=event_id)
        except Event.DoesNotExist:
            raise NotFound(f"Event not found with id: {event_id}")

    @staticmethod
    def invited_ids(event: Event) -> set[int]:
        return {u.id for u in event.invited_users.all()}

    @staticmethod
    def get_accessible_event(event_id: int, *, user_id: int) -> Event:
        event = EventSelectors.get_event(event_id)
        if not can_access(user_id, event, EventSelectors.invited_ids(event)):
            raise Forbidden("You don't have permission to view this private event")
        return event

    @staticmethod
    def list_all(user_id: int) -> QuerySet[Event]:
        return EventSelectors.accessible(user_id)

    @staticmethod
    def list_public() -> QuerySet[Event]:
        return EventSelectors.base().filter(event_type=EventType.PUBLIC)

    @staticmethod
    def list_organized(user_id: int) -> QuerySet[Event]:
        return EventSelectors.base().filter(organizer_id=user_id)

    @staticmethod
    def list_invited(user_id: int) -> QuerySet[Event]:
        return EventSelectors.base().filter(invitations__user_id=user_id).distinct()

    @staticmethod
    def list_upcoming(user_id: int, *, today: date) -> QuerySet[Event]:
        return EventSelectors.accessible(user_id).filter(event_date__gte=today)

    @staticmethod
    def list_past(*, today: date) -> QuerySet[Event]:
        # Not visibility-filtered.
        return EventSelectors.base().filter(event_date__lt=today)

    @staticmethod
    def list_today(user_id: int, *, today: date) -> QuerySet[Event]:
        return EventSelectors.accessible(user_id).filter(event_date=today)

    @staticmethod
    def search_by_location(user_id: int, location: str) -> QuerySet[Event]:
        return EventSelectors.accessible(user_id).filter(location__icontains=location)

    @staticmethod
    def title_exists(title: str, *, exclude_id: int | None = None) -> bool:
        qs = Event.objects.filter(title=title)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        return qs.exists()

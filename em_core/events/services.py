# em_core/events/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time

from django.db import IntegrityError, transaction

from em_core.audit.constants import ActivityType
from em_core.audit.services import ActivityRecorder
from em_core.common.context import RequestContext
from em_core.common.errors import Conflict, Forbidden, StateConflict, ValidationFailed
from em_core.events.constants import EVENT_ENTITY, MAX_DURATION, MIN_DURATION, EventType, TimeState
from em_core.events.models import Event, EventInvitation
from em_core.events.selectors import EventSelectors
from em_core.events.visibility import duration, is_organizer, local_now, time_state
from em_core.iam.selectors import IdentitySelectors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventInput:
    title: str
    event_date: date
    start_time: time
    end_time: time
    location: str
    event_type: str = EventType.PUBLIC
    description: str = ""
    invited_user_ids: frozenset[int] = field(default_factory=frozenset)


def event_snapshot(event: Event, invited_ids=None) -> dict:
    if invited_ids is None:
        invited_ids = EventSelectors.invited_ids(event)
    return {
        "title": event.title,
        "description": event.description,
        "eventDate": event.event_date,
        "startTime": event.start_time,
        "endTime": event.end_time,
        "location": event.location,
        "eventType": event.event_type,
        "invitedUserIds": sorted(invited_ids),
    }


def _duplicate_title(title: str) -> Conflict:
    return Conflict(f"Event with title '{title}' already exists")


def validate_duration(span) -> None:
    if span < MIN_DURATION:
        raise ValidationFailed("Event duration must be at least 30 minutes")
    if span > MAX_DURATION:
        raise ValidationFailed("Event duration cannot exceed 24 hours (single day event)")


def validate_event_input(
    data: EventInput,
    *,
    organizer_id: int,
    now: datetime,
    exclude_id: int | None = None,
    past_date_message: str = "Event date cannot be in the past",
    check_start_today: bool = True,
) -> None:
    """
    Create-time constraints, checked in a fixed order; the first failure wins.
    `now` is naive local wall-clock time.
    """
    if EventSelectors.title_exists(data.title, exclude_id=exclude_id):
        raise _duplicate_title(data.title)

    if not (data.location or "").strip():
        raise ValidationFailed("Event location is required")

    today = now.date()
    if data.event_date < today:
        raise ValidationFailed(past_date_message)

    if check_start_today and data.event_date == today and data.start_time < now.time():
        raise ValidationFailed("Event start time cannot be in the past for today's event")

    if data.end_time < data.start_time:
        raise ValidationFailed("Event end time must be after start time")
    if data.end_time == data.start_time:
        raise ValidationFailed("Event end time must be different from start time")

    validate_duration(duration(data.start_time, data.end_time))

    if data.event_type == EventType.PRIVATE and not data.invited_user_ids:
        raise ValidationFailed("PRIVATE events must have at least one invited user")

    if organizer_id in data.invited_user_ids:
        raise ValidationFailed("Cannot invite yourself as organizer to your own event")


def _save_event(event: Event) -> None:
    try:
        with transaction.atomic():
            event.save()
    except IntegrityError:
        raise _duplicate_title(event.title)


def _set_invitees(event: Event, user_ids) -> None:
    users = IdentitySelectors.users_by_ids(user_ids)
    event.invited_users.set(users.values())


class EventService:

    @staticmethod
    @transaction.atomic
    def create(*, ctx: RequestContext, data: EventInput, now: datetime | None = None) -> Event:
        organizer = ctx.user
        validate_event_input(data, organizer_id=organizer.id, now=local_now(now))

        # Every id must resolve, even when the set is then dropped for PUBLIC.
        IdentitySelectors.users_by_ids(data.invited_user_ids)
        invitees = data.invited_user_ids if data.event_type == EventType.PRIVATE else frozenset()

        event = Event(
            title=data.title,
            description=data.description or "",
            event_date=data.event_date,
            start_time=data.start_time,
            end_time=data.end_time,
            location=data.location,
            event_type=data.event_type,
            organizer=organizer,
        )
        _save_event(event)
        _set_invitees(event, invitees)

        ActivityRecorder.record_change(
            ActivityType.EVENT_CREATE,
            ctx,
            entity_type=EVENT_ENTITY,
            entity_id=event.id,
            entity_name=event.title,
            old_values=None,
            new_values=event_snapshot(event, invitees),
            description=f"Created {event.event_type} event '{event.title}'",
        )
        logger.info("Event created: %s (id=%s) by %s", event.title, event.id, organizer.username)
        return EventSelectors.get_event(event.id)

    @staticmethod
    @transaction.atomic
    def update(*, ctx: RequestContext, event_id: int, data: EventInput, now: datetime | None = None) -> Event:
        now = local_now(now)
        event = EventSelectors.get_event_for_update(event_id)

        if not is_organizer(ctx.user_id, event):
            logger.warning("Event update denied: %s is not the organizer of %s", ctx.username, event.id)
            raise Forbidden("Only the event organizer can update this event")

        if time_state(event, now) == TimeState.PAST:
            raise StateConflict("Cannot update event that has already ended")

        # An ongoing event keeps its (already passed) start time.
        schedule_changed = (data.event_date, data.start_time) != (event.event_date, event.start_time)
        validate_event_input(
            data,
            organizer_id=event.organizer_id,
            now=now,
            exclude_id=event.id,
            past_date_message="Cannot change event date to the past",
            check_start_today=schedule_changed,
        )

        before = event_snapshot(event)
        IdentitySelectors.users_by_ids(data.invited_user_ids)
        invitees = data.invited_user_ids if data.event_type == EventType.PRIVATE else frozenset()

        event.title = data.title
        event.description = data.description or ""
        event.event_date = data.event_date
        event.start_time = data.start_time
        event.end_time = data.end_time
        event.location = data.location
        event.event_type = data.event_type
        _save_event(event)
        # PRIVATE -> PUBLIC clears the invitee set.
        _set_invitees(event, invitees)

        ActivityRecorder.record_change(
            ActivityType.EVENT_UPDATE,
            ctx,
            entity_type=EVENT_ENTITY,
            entity_id=event.id,
            entity_name=event.title,
            old_values=before,
            new_values=event_snapshot(event, invitees),
            description=f"Updated event '{event.title}'",
        )
        logger.info("Event updated: %s (id=%s)", event.title, event.id)
        return EventSelectors.get_event(event.id)

    @staticmethod
    @transaction.atomic
    def delete(*, ctx: RequestContext, event_id: int, now: datetime | None = None) -> None:
        now = local_now(now)
        event = EventSelectors.get_event_for_update(event_id)

        if not is_organizer(ctx.user_id, event):
            logger.warning("Event delete denied: %s is not the organizer of %s", ctx.username, event.id)
            raise Forbidden("Only the event organizer can delete this event")

        state = time_state(event, now)
        if state == TimeState.PAST:
            raise StateConflict("Cannot delete event that has already ended")
        if state == TimeState.ONGOING:
            raise StateConflict("Cannot delete an ongoing event")

        title = event.title
        before = event_snapshot(event)
        event.delete()

        ActivityRecorder.record_change(
            ActivityType.EVENT_DELETE,
            ctx,
            entity_type=EVENT_ENTITY,
            entity_id=event_id,
            entity_name=title,
            old_values=before,
            new_values=None,
            description=f"Deleted event '{title}'",
        )
        logger.info("Event deleted: %s (id=%s)", title, event_id)

    # ---------------------------------------------------------------------
    # Invitations
    # ---------------------------------------------------------------------
    @staticmethod
    @transaction.atomic
    def invite(*, ctx: RequestContext, event_id: int, user_ids) -> Event:
        event = EventSelectors.get_event_for_update(event_id)
        user_ids = set(user_ids or ())

        if not is_organizer(ctx.user_id, event):
            raise Forbidden("Only the event organizer can invite users")
        if event.event_type != EventType.PRIVATE:
            raise ValidationFailed("Can only invite users to PRIVATE events")
        if event.organizer_id in user_ids:
            raise ValidationFailed("Cannot invite yourself as organizer to your own event")

        users = IdentitySelectors.users_by_ids(user_ids)
        already = EventSelectors.invited_ids(event)
        added = sorted(set(users) - already)
        EventInvitation.objects.bulk_create(
            [EventInvitation(event=event, user=users[uid]) for uid in added]
        )

        ActivityRecorder.record_change(
            ActivityType.EVENT_UPDATE,
            ctx,
            entity_type=EVENT_ENTITY,
            entity_id=event.id,
            entity_name=event.title,
            old_values={"invitedUserIds": sorted(already)},
            new_values={"invitedUserIds": sorted(already | set(added))},
            description=f"Invited {len(added)} user(s) to event '{event.title}'",
        )
        logger.info("Event %s: invited %s", event.id, added)
        return EventSelectors.get_event(event.id)

    @staticmethod
    @transaction.atomic
    def remove_invitees(*, ctx: RequestContext, event_id: int, user_ids) -> Event:
        event = EventSelectors.get_event_for_update(event_id)
        user_ids = set(user_ids or ())

        if not is_organizer(ctx.user_id, event):
            raise Forbidden("Only the event organizer can remove invited users")
        if event.event_type != EventType.PRIVATE:
            raise ValidationFailed("Can only remove users from PRIVATE events")

        IdentitySelectors.users_by_ids(user_ids)
        already = EventSelectors.invited_ids(event)
        remaining = already - user_ids
        if not remaining:
            raise ValidationFailed("PRIVATE events must have at least one invited user")

        removed = sorted(already & user_ids)
        EventInvitation.objects.filter(event=event, user_id__in=removed).delete()

        ActivityRecorder.record_change(
            ActivityType.EVENT_UPDATE,
            ctx,
            entity_type=EVENT_ENTITY,
            entity_id=event.id,
            entity_name=event.title,
            old_values={"invitedUserIds": sorted(already)},
            new_values={"invitedUserIds": sorted(remaining)},
            description=f"Removed {len(removed)} user(s) from event '{event.title}'",
        )
        logger.info("Event %s: removed invitees %s", event.id, removed)
        return EventSelectors.get_event(event.id)

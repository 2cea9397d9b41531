# em_core/events/models.py
from django.db import models

from em_core.common.models import TimeStampedModel
from em_core.events.constants import EventType
from em_core.iam.models import User


class Event(TimeStampedModel):
    """
    Single-day event. Dates and times are local wall-clock values.
    """
    title = models.CharField(max_length=255, unique=True)
    description = models.CharField(max_length=1000, blank=True, default="")
    event_date = models.DateField(db_index=True)
    start_time = models.TimeField()
    end_time = models.TimeField()
    location = models.CharField(max_length=255)
    event_type = models.CharField(max_length=10, choices=EventType.choices, default=EventType.PUBLIC)

    organizer = models.ForeignKey(User, on_delete=models.PROTECT, related_name="organized_events")
    invited_users = models.ManyToManyField(
        User,
        through="EventInvitation",
        related_name="invited_events",
        blank=True,
    )

    class Meta:
        db_table = "events"
        ordering = ["event_date", "start_time", "id"]
        indexes = [
            models.Index(fields=["event_date", "start_time"]),
            models.Index(fields=["event_type"]),
        ]

    def __str__(self) -> str:
        return self.title


class EventInvitation(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="invitations")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="event_invitations")

    class Meta:
        db_table = "event_invitations"
        constraints = [
            models.UniqueConstraint(fields=["event", "user"], name="uq_event_invitation"),
        ]

    def __str__(self) -> str:
        return f"{self.event_id}:{self.user_id}"

# em_core/events/constants.py
from __future__ import annotations

from datetime import timedelta

from django.db import models


class EventType(models.TextChoices):
    PUBLIC = "PUBLIC", "Public"
    PRIVATE = "PRIVATE", "Private"


class TimeState(models.TextChoices):
    FUTURE = "FUTURE", "Future"
    ONGOING = "ONGOING", "Ongoing"
    PAST = "PAST", "Past"


MIN_DURATION = timedelta(minutes=30)
MAX_DURATION = timedelta(hours=24)

EVENT_ENTITY = "Event"

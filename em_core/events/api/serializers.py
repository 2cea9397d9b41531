# em_core/events/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from em_core.events.constants import EventType
from em_core.events.models import Event
from em_core.events.services import EventInput
from em_core.events.visibility import is_organizer
from em_core.iam.api.serializers import UserBasicSerializer


class EventRequestSerializer(serializers.Serializer):
    title = serializers.CharField(
        max_length=255,
        error_messages={"blank": "Event title is required", "required": "Event title is required"},
    )
    description = serializers.CharField(
        max_length=1000,
        error_messages={"blank": "Description is required", "required": "Description is required"},
    )
    eventDate = serializers.DateField(
        error_messages={"required": "Event date is required", "null": "Event date is required"},
    )
    startTime = serializers.TimeField(
        error_messages={"required": "Start time is required", "null": "Start time is required"},
    )
    endTime = serializers.TimeField(
        error_messages={"required": "End time is required", "null": "End time is required"},
    )
    # Blank is left to the domain check so it reports "Event location is required".
    location = serializers.CharField(max_length=255, allow_blank=True, trim_whitespace=False)
    eventType = serializers.ChoiceField(
        choices=EventType.choices,
        error_messages={"required": "Event type is required", "null": "Event type is required"},
    )
    invitedUserIds = serializers.ListField(
        child=serializers.IntegerField(),
        required=False,
        allow_empty=True,
        default=list,
    )

    def to_input(self) -> EventInput:
        data = self.validated_data
        return EventInput(
            title=data["title"],
            description=data["description"],
            event_date=data["eventDate"],
            start_time=data["startTime"],
            end_time=data["endTime"],
            location=data["location"],
            event_type=data["eventType"],
            invited_user_ids=frozenset(data.get("invitedUserIds") or ()),
        )


class EventInvitationSerializer(serializers.Serializer):
    eventId = serializers.IntegerField(
        error_messages={"required": "Event ID is required", "null": "Event ID is required"},
    )
    userIds = serializers.ListField(
        child=serializers.IntegerField(),
        allow_empty=False,
        error_messages={
            "required": "At least one user ID is required",
            "empty": "At least one user ID is required",
        },
    )


class EventResponseSerializer(serializers.ModelSerializer):
    """
    The invited-user list is shown to the organizer only; everyone else
    gets the count. The caller id comes from context["user_id"].
    """
    eventDate = serializers.DateField(source="event_date")
    startTime = serializers.TimeField(source="start_time")
    endTime = serializers.TimeField(source="end_time")
    eventType = serializers.CharField(source="event_type")
    organizer = UserBasicSerializer()
    invitedUsersCount = serializers.SerializerMethodField()
    invitedUsers = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source="created_at")
    updatedAt = serializers.DateTimeField(source="updated_at")

    class Meta:
        model = Event
        fields = [
            "id",
            "title",
            "description",
            "eventDate",
            "startTime",
            "endTime",
            "location",
            "eventType",
            "organizer",
            "invitedUsersCount",
            "invitedUsers",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields

    def get_invitedUsersCount(self, obj: Event) -> int:
        return len(obj.invited_users.all())

    def get_invitedUsers(self, obj: Event):
        if not is_organizer(self.context.get("user_id"), obj):
            return None
        users = sorted(obj.invited_users.all(), key=lambda u: u.id)
        return UserBasicSerializer(users, many=True).data

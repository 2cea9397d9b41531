# em_core/events/api/views.py
from __future__ import annotations

from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from em_core.common.api.pagination import paginate
from em_core.common.api.views import ContextAPIView
from em_core.common.permissions import AnyRole
from em_core.events.api.serializers import (
    EventInvitationSerializer,
    EventRequestSerializer,
    EventResponseSerializer,
)
from em_core.events.selectors import EventSelectors
from em_core.events.services import EventService
from em_core.iam.api.serializers import MessageSerializer

PAGE_PARAMETERS = [
    OpenApiParameter("page", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False, description="Zero-based page."),
    OpenApiParameter("size", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False, description="Page size."),
]


class EventAPIView(ContextAPIView):
    """Every event endpoint is open to all three roles."""
    permission_classes = [AnyRole]

    def serializer_context(self, request) -> dict:
        return {"request": request, "user_id": request.ctx.user_id}

    def respond(self, request, instance, *, many: bool = False, status_code: int = status.HTTP_200_OK) -> Response:
        ser = EventResponseSerializer(instance, many=many, context=self.serializer_context(request))
        return Response(ser.data, status=status_code)


class EventListCreateView(EventAPIView):

    @extend_schema(tags=["Events"], parameters=PAGE_PARAMETERS, responses={200: EventResponseSerializer(many=True)})
    def get(self, request):
        qs = EventSelectors.list_all(request.ctx.user_id)
        return paginate(request, qs, EventResponseSerializer, context=self.serializer_context(request))

    @extend_schema(tags=["Events"], request=EventRequestSerializer, responses={201: EventResponseSerializer})
    def post(self, request):
        ser = EventRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        event = EventService.create(ctx=request.ctx, data=ser.to_input())
        return self.respond(request, event, status_code=status.HTTP_201_CREATED)


class EventDetailView(EventAPIView):

    @extend_schema(tags=["Events"], responses={200: EventResponseSerializer})
    def get(self, request, pk: int):
        event = EventSelectors.get_accessible_event(pk, user_id=request.ctx.user_id)
        return self.respond(request, event)

    @extend_schema(tags=["Events"], request=EventRequestSerializer, responses={200: EventResponseSerializer})
    def put(self, request, pk: int):
        ser = EventRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        event = EventService.update(ctx=request.ctx, event_id=pk, data=ser.to_input())
        return self.respond(request, event)

    @extend_schema(tags=["Events"], responses={200: MessageSerializer})
    def delete(self, request, pk: int):
        EventService.delete(ctx=request.ctx, event_id=pk)
        return Response({"message": "Event deleted successfully"})


class PublicEventsView(EventAPIView):

    @extend_schema(tags=["Events"], responses={200: EventResponseSerializer(many=True)})
    def get(self, request):
        return self.respond(request, EventSelectors.list_public(), many=True)


class MyOrganizedEventsView(EventAPIView):

    @extend_schema(tags=["Events"], responses={200: EventResponseSerializer(many=True)})
    def get(self, request):
        return self.respond(request, EventSelectors.list_organized(request.ctx.user_id), many=True)


class MyInvitationsView(EventAPIView):

    @extend_schema(tags=["Events"], responses={200: EventResponseSerializer(many=True)})
    def get(self, request):
        return self.respond(request, EventSelectors.list_invited(request.ctx.user_id), many=True)


class UpcomingEventsView(EventAPIView):

    @extend_schema(tags=["Events"], responses={200: EventResponseSerializer(many=True)})
    def get(self, request):
        qs = EventSelectors.list_upcoming(request.ctx.user_id, today=timezone.localdate())
        return self.respond(request, qs, many=True)


class PastEventsView(EventAPIView):

    @extend_schema(tags=["Events"], responses={200: EventResponseSerializer(many=True)})
    def get(self, request):
        return self.respond(request, EventSelectors.list_past(today=timezone.localdate()), many=True)


class TodayEventsView(EventAPIView):

    @extend_schema(tags=["Events"], responses={200: EventResponseSerializer(many=True)})
    def get(self, request):
        qs = EventSelectors.list_today(request.ctx.user_id, today=timezone.localdate())
        return self.respond(request, qs, many=True)


class EventLocationSearchView(EventAPIView):

    @extend_schema(
        tags=["Events"],
        parameters=[
            OpenApiParameter("location", OpenApiTypes.STR, OpenApiParameter.QUERY, required=True),
        ],
        responses={200: EventResponseSerializer(many=True)},
    )
    def get(self, request):
        location = request.query_params.get("location", "").strip()
        if not location:
            raise ValidationError({"location": "Location is required"})
        qs = EventSelectors.search_by_location(request.ctx.user_id, location)
        return self.respond(request, qs, many=True)


class EventInvitationView(EventAPIView):

    @extend_schema(tags=["Events"], request=EventInvitationSerializer, responses={200: EventResponseSerializer})
    def post(self, request):
        ser = EventInvitationSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        event = EventService.invite(
            ctx=request.ctx,
            event_id=ser.validated_data["eventId"],
            user_ids=ser.validated_data["userIds"],
        )
        return self.respond(request, event)

    @extend_schema(tags=["Events"], request=EventInvitationSerializer, responses={200: EventResponseSerializer})
    def delete(self, request):
        ser = EventInvitationSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        event = EventService.remove_invitees(
            ctx=request.ctx,
            event_id=ser.validated_data["eventId"],
            user_ids=ser.validated_data["userIds"],
        )
        return self.respond(request, event)

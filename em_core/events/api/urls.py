# em_core/events/api/urls.py
from __future__ import annotations

from em_core.common.api.routing import route
from em_core.events.api.views import (
    EventDetailView,
    EventInvitationView,
    EventListCreateView,
    EventLocationSearchView,
    MyInvitationsView,
    MyOrganizedEventsView,
    PastEventsView,
    PublicEventsView,
    TodayEventsView,
    UpcomingEventsView,
)

urlpatterns = [
    *route("events", EventListCreateView.as_view(), name="events"),
    *route("events/public", PublicEventsView.as_view(), name="events-public"),
    *route("events/my-organized", MyOrganizedEventsView.as_view(), name="events-my-organized"),
    *route("events/my-invitations", MyInvitationsView.as_view(), name="events-my-invitations"),
    *route("events/upcoming", UpcomingEventsView.as_view(), name="events-upcoming"),
    *route("events/past", PastEventsView.as_view(), name="events-past"),
    *route("events/today", TodayEventsView.as_view(), name="events-today"),
    *route("events/search/location", EventLocationSearchView.as_view(), name="events-search-location"),
    *route("events/invite", EventInvitationView.as_view(), name="events-invite"),
    *route("events/<int:pk>", EventDetailView.as_view(), name="event-detail"),
]

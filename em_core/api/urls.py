# em_core/api/urls.py
from __future__ import annotations

from django.urls import include, path

from em_core.common.api.routing import route
from em_core.common.views import HealthView

urlpatterns = [
    *route("health", HealthView.as_view(), name="health"),

    # 🔐 Auth + users / roles / permissions
    path("", include("em_core.iam.api.urls")),

    # Events + invitations
    path("", include("em_core.events.api.urls")),

    # Audit history
    path("", include("em_core.audit.api.urls")),
]

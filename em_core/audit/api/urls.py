# em_core/audit/api/urls.py
from __future__ import annotations

from em_core.audit.api.views import (
    ActivitiesByTypeView,
    MyActivitiesView,
    MyLoginsView,
    MyPasswordChangesView,
    UserActivitiesView,
    UserLoginsView,
    UserPasswordChangesView,
)
from em_core.common.api.routing import route

urlpatterns = [
    *route("history/my-activities", MyActivitiesView.as_view(), name="history-my-activities"),
    *route("history/my-logins", MyLoginsView.as_view(), name="history-my-logins"),
    *route("history/my-password-changes", MyPasswordChangesView.as_view(), name="history-my-password-changes"),
    *route("history/activities/user/<str:username>", UserActivitiesView.as_view(), name="history-user-activities"),
    *route("history/logins/user/<int:user_id>", UserLoginsView.as_view(), name="history-user-logins"),
    *route(
        "history/password-changes/user/<int:user_id>",
        UserPasswordChangesView.as_view(),
        name="history-user-password-changes",
    ),
    *route("history/activities/type/<str:code>", ActivitiesByTypeView.as_view(), name="history-activities-by-type"),
]

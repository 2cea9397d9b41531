# em_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework.response import Response

from em_core.audit.api.serializers import (
    ActivityRecordSerializer,
    LoginRecordSerializer,
    PasswordRecordSerializer,
)
from em_core.audit.constants import ActivityType
from em_core.audit.selectors import HistorySelectors
from em_core.common.api.views import ContextAPIView
from em_core.common.errors import ValidationFailed
from em_core.common.permissions import AdminsOnly, AnyRole, SuperAdminOnly
from em_core.iam.selectors import IdentitySelectors


# -----------------------------
# Caller's own history
# -----------------------------
class MyActivitiesView(ContextAPIView):
    permission_classes = [AnyRole]

    @extend_schema(tags=["History"], responses={200: ActivityRecordSerializer(many=True)})
    def get(self, request):
        qs = HistorySelectors.activities_for_user_id(request.ctx.user_id)
        return Response(ActivityRecordSerializer(qs, many=True).data)


class MyLoginsView(ContextAPIView):
    permission_classes = [AnyRole]

    @extend_schema(tags=["History"], responses={200: LoginRecordSerializer(many=True)})
    def get(self, request):
        qs = HistorySelectors.logins_for_user(request.ctx.user_id)
        return Response(LoginRecordSerializer(qs, many=True).data)


class MyPasswordChangesView(ContextAPIView):
    permission_classes = [AnyRole]

    @extend_schema(tags=["History"], responses={200: PasswordRecordSerializer(many=True)})
    def get(self, request):
        qs = HistorySelectors.password_changes_for_user(request.ctx.user_id)
        return Response(PasswordRecordSerializer(qs, many=True).data)


# -----------------------------
# Another user's history (admins)
# -----------------------------
class UserActivitiesView(ContextAPIView):
    permission_classes = [AdminsOnly]

    @extend_schema(tags=["History"], responses={200: ActivityRecordSerializer(many=True)})
    def get(self, request, username: str):
        user = IdentitySelectors.get_user_by_username(username)
        qs = HistorySelectors.activities_for_username(user.username)
        return Response(ActivityRecordSerializer(qs, many=True).data)


class UserLoginsView(ContextAPIView):
    permission_classes = [AdminsOnly]

    @extend_schema(tags=["History"], responses={200: LoginRecordSerializer(many=True)})
    def get(self, request, user_id: int):
        user = IdentitySelectors.get_user(user_id)
        qs = HistorySelectors.logins_for_user(user.id)
        return Response(LoginRecordSerializer(qs, many=True).data)


class UserPasswordChangesView(ContextAPIView):
    permission_classes = [AdminsOnly]

    @extend_schema(tags=["History"], responses={200: PasswordRecordSerializer(many=True)})
    def get(self, request, user_id: int):
        user = IdentitySelectors.get_user(user_id)
        qs = HistorySelectors.password_changes_for_user(user.id)
        return Response(PasswordRecordSerializer(qs, many=True).data)


class ActivitiesByTypeView(ContextAPIView):
    permission_classes = [SuperAdminOnly]

    @extend_schema(tags=["History"], responses={200: ActivityRecordSerializer(many=True)})
    def get(self, request, code: str):
        try:
            activity = ActivityType.from_code(code.upper())
        except ValueError:
            raise ValidationFailed(f"Unknown activity type: {code}")
        qs = HistorySelectors.activities_by_type(activity.code)
        return Response(ActivityRecordSerializer(qs, many=True).data)

# em_core/audit/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from em_core.audit.models import ActivityRecord, LoginRecord, PasswordRecord


class HistorySelectors:
    """
    Read-only history queries, newest first.
    """

    @staticmethod
    def activities_for_user_id(user_id: int) -> QuerySet[ActivityRecord]:
        return ActivityRecord.objects.filter(user_id=user_id).order_by("-activity_date", "-id")

    @staticmethod
    def activities_for_username(username: str) -> QuerySet[ActivityRecord]:
        return ActivityRecord.objects.filter(username=username).order_by("-activity_date", "-id")

    @staticmethod
    def activities_by_type(type_code: str) -> QuerySet[ActivityRecord]:
        return ActivityRecord.objects.filter(activity_type_code=type_code).order_by("-activity_date", "-id")

    @staticmethod
    def logins_for_user(user_id: int) -> QuerySet[LoginRecord]:
        return LoginRecord.objects.filter(user_id=user_id).order_by("-login_time", "-id")

    @staticmethod
    def password_changes_for_user(user_id: int) -> QuerySet[PasswordRecord]:
        return PasswordRecord.objects.filter(user_id=user_id).order_by("-change_date", "-id")

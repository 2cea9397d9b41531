# em_core/audit/api/serializers.py
import json

from rest_framework import serializers

from em_core.audit.models import ActivityRecord, LoginRecord, PasswordRecord

REDACTED = "[PROTECTED]"


class JSONTextField(serializers.Field):
    """Renders a JSON-in-text column as structured data."""

    def to_representation(self, value):
        if value in (None, ""):
            return None
        try:
            return json.loads(value)
        except ValueError:
            return value


class ActivityRecordSerializer(serializers.ModelSerializer):
    userId = serializers.IntegerField(source="user_id")
    userGroup = serializers.CharField(source="user_group")
    activityTypeCode = serializers.CharField(source="activity_type_code")
    activityTypeName = serializers.CharField(source="activity_type_name")
    entityType = serializers.CharField(source="entity_type", allow_null=True)
    entityId = serializers.IntegerField(source="entity_id", allow_null=True)
    entityName = serializers.CharField(source="entity_name", allow_null=True)
    oldValues = JSONTextField(source="old_values")
    newValues = JSONTextField(source="new_values")
    ipAddress = serializers.CharField(source="ip_address")
    deviceId = serializers.CharField(source="device_id")
    sessionId = serializers.CharField(source="session_id")
    activityDate = serializers.DateTimeField(source="activity_date")

    class Meta:
        model = ActivityRecord
        fields = [
            "id",
            "userId",
            "username",
            "userGroup",
            "activityTypeCode",
            "activityTypeName",
            "entityType",
            "entityId",
            "entityName",
            "description",
            "oldValues",
            "newValues",
            "ipAddress",
            "deviceId",
            "sessionId",
            "activityDate",
        ]
        read_only_fields = fields


class LoginRecordSerializer(serializers.ModelSerializer):
    # user_token is never exposed
    userId = serializers.IntegerField(source="user_id")
    userType = serializers.CharField(source="user_type")
    requestFrom = serializers.CharField(source="request_from")
    requestIp = serializers.CharField(source="request_ip")
    deviceInfo = serializers.CharField(source="device_info")
    loginTime = serializers.DateTimeField(source="login_time")
    logoutTime = serializers.DateTimeField(source="logout_time", allow_null=True)
    loginStatus = serializers.CharField(source="login_status")
    createdBy = serializers.CharField(source="created_by")

    class Meta:
        model = LoginRecord
        fields = [
            "id",
            "userId",
            "userType",
            "requestFrom",
            "requestIp",
            "deviceInfo",
            "loginTime",
            "logoutTime",
            "loginStatus",
            "createdBy",
        ]
        read_only_fields = fields


class PasswordRecordSerializer(serializers.ModelSerializer):
    """Hash columns are redacted; oldPassword stays null for the creation row."""
    userId = serializers.IntegerField(source="user_id")
    changedBy = serializers.CharField(source="changed_by")
    changeDate = serializers.DateTimeField(source="change_date")
    oldPassword = serializers.SerializerMethodField()
    newPassword = serializers.SerializerMethodField()

    class Meta:
        model = PasswordRecord
        fields = ["id", "userId", "changedBy", "changeDate", "oldPassword", "newPassword"]
        read_only_fields = fields

    def get_oldPassword(self, obj: PasswordRecord) -> str | None:
        return REDACTED if obj.old_password else None

    def get_newPassword(self, obj: PasswordRecord) -> str:
        return REDACTED

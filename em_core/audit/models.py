# em_core/audit/models.py
from django.db import models

from em_core.audit.constants import LoginStatus


class ActivityRecord(models.Model):
    """
    Append-only activity row written in the same transaction as the change.
    user_id is a plain column so history survives user deletion.
    """
    user_id = models.BigIntegerField(db_index=True)
    username = models.CharField(max_length=50, db_index=True)
    user_group = models.CharField(max_length=50)  # role name at the time

    activity_type_code = models.CharField(max_length=50, db_index=True)
    activity_type_name = models.CharField(max_length=100)

    entity_type = models.CharField(max_length=50, blank=True, null=True)
    entity_id = models.BigIntegerField(blank=True, null=True)
    entity_name = models.CharField(max_length=255, blank=True, null=True)
    description = models.TextField(blank=True, null=True)
    old_values = models.TextField(blank=True, null=True)  # JSON text
    new_values = models.TextField(blank=True, null=True)  # JSON text

    ip_address = models.CharField(max_length=100)
    device_id = models.CharField(max_length=255)
    session_id = models.CharField(max_length=255, blank=True, default="")

    activity_date = models.DateTimeField(db_index=True)

    class Meta:
        db_table = "user_activity_history"
        indexes = [
            models.Index(fields=["user_id", "activity_date"]),
        ]

    def __str__(self) -> str:
        return f"{self.activity_type_code} by {self.username}"


class LoginRecord(models.Model):
    """
    One row per login attempt against a known user.
    logout_time is the only column ever updated (open -> closed).
    """
    user_id = models.BigIntegerField(db_index=True)
    user_type = models.CharField(max_length=50)  # role name
    user_token = models.TextField(blank=True, default="")

    request_from = models.CharField(max_length=255, blank=True, default="")  # user agent
    request_ip = models.CharField(max_length=100)
    device_info = models.CharField(max_length=50, blank=True, default="")

    login_time = models.DateTimeField(db_index=True)
    logout_time = models.DateTimeField(blank=True, null=True)
    login_status = models.CharField(max_length=10, choices=LoginStatus.choices)

    created_by = models.CharField(max_length=50, blank=True, default="")

    class Meta:
        db_table = "user_login_logout_history"
        indexes = [
            models.Index(fields=["user_id", "login_time"]),
        ]

    def __str__(self) -> str:
        return f"{self.created_by} {self.login_status} @ {self.login_time}"

    @property
    def is_open(self) -> bool:
        return self.logout_time is None


class PasswordRecord(models.Model):
    user_id = models.BigIntegerField(db_index=True)
    changed_by = models.CharField(max_length=50)
    change_date = models.DateTimeField(db_index=True)
    old_password = models.CharField(max_length=255, blank=True, null=True)  # hash; null on creation
    new_password = models.CharField(max_length=255)  # hash

    class Meta:
        db_table = "user_password_history"

    def __str__(self) -> str:
        return f"password change for user {self.user_id}"

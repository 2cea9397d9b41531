# em_core/audit/constants.py
from __future__ import annotations

from enum import Enum

from django.db import models


class ActivityType(Enum):
    """(code, display name) pairs stored on every activity row."""

    USER_CREATE = ("USER_CREATE", "User Created")
    USER_UPDATE = ("USER_UPDATE", "User Updated")
    USER_DELETE = ("USER_DELETE", "User Deleted")
    USER_ACTIVATE = ("USER_ACTIVATE", "User Activated")
    USER_DEACTIVATE = ("USER_DEACTIVATE", "User Deactivated")

    EVENT_CREATE = ("EVENT_CREATE", "Event Created")
    EVENT_UPDATE = ("EVENT_UPDATE", "Event Updated")
    EVENT_DELETE = ("EVENT_DELETE", "Event Deleted")

    ROLE_CREATE = ("ROLE_CREATE", "Role Created")
    ROLE_UPDATE = ("ROLE_UPDATE", "Role Updated")
    ROLE_DELETE = ("ROLE_DELETE", "Role Deleted")
    ROLE_ASSIGN_PERMISSION = ("ROLE_ASSIGN_PERMISSION", "Role Permission Assigned")
    ROLE_REMOVE_PERMISSION = ("ROLE_REMOVE_PERMISSION", "Role Permission Removed")

    PERMISSION_CREATE = ("PERMISSION_CREATE", "Permission Created")
    PERMISSION_UPDATE = ("PERMISSION_UPDATE", "Permission Updated")
    PERMISSION_DELETE = ("PERMISSION_DELETE", "Permission Deleted")

    PASSWORD_CHANGE = ("PASSWORD_CHANGE", "Password Changed")
    PASSWORD_RESET = ("PASSWORD_RESET", "Password Reset")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def label(self) -> str:
        return self.value[1]

    @classmethod
    def from_code(cls, code: str) -> "ActivityType":
        for member in cls:
            if member.code == code:
                return member
        raise ValueError(code)


class LoginStatus(models.TextChoices):
    SUCCESS = "SUCCESS", "Success"
    FAILED = "FAILED", "Failed"


SYSTEM_ACTOR = "SYSTEM"

# em_core/iam/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from em_core.iam.models import Permission, Role, User


# -----------------------------
# Auth
# -----------------------------
class LoginRequestSerializer(serializers.Serializer):
    username = serializers.CharField(error_messages={"blank": "Username is required", "required": "Username is required"})
    password = serializers.CharField(
        trim_whitespace=False,
        error_messages={"blank": "Password is required", "required": "Password is required"},
    )


class LoginResponseSerializer(serializers.Serializer):
    token = serializers.CharField()
    type = serializers.CharField(source="token_type")
    username = serializers.CharField()
    role = serializers.CharField()
    expiresIn = serializers.IntegerField(source="expires_in_ms")


class MessageSerializer(serializers.Serializer):
    message = serializers.CharField()


# -----------------------------
# Permissions / roles
# -----------------------------
class PermissionSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Permission
        fields = ["id", "name", "description", "createdAt", "updatedAt"]
        read_only_fields = fields


class PermissionRequestSerializer(serializers.Serializer):
    name = serializers.CharField(
        max_length=50,
        error_messages={
            "blank": "Permission name is required",
            "required": "Permission name is required",
            "max_length": "Permission name must not exceed 50 characters",
        },
    )
    description = serializers.CharField(
        max_length=100,
        error_messages={
            "blank": "Description is required",
            "required": "Description is required",
            "max_length": "Description must not exceed 100 characters",
        },
    )


class RoleSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Role
        fields = ["id", "name", "description", "createdAt", "updatedAt"]
        read_only_fields = fields


class RoleWithPermissionsSerializer(RoleSerializer):
    permissions = PermissionSerializer(many=True, read_only=True)

    class Meta(RoleSerializer.Meta):
        fields = RoleSerializer.Meta.fields + ["permissions"]
        read_only_fields = fields


class RoleRequestSerializer(serializers.Serializer):
    name = serializers.CharField(
        max_length=50,
        error_messages={
            "blank": "Role name is required",
            "required": "Role name is required",
            "max_length": "Role name must not exceed 50 characters",
        },
    )
    description = serializers.CharField(
        max_length=255,
        required=False,
        allow_blank=True,
        default="",
        error_messages={"max_length": "Description must not exceed 255 characters"},
    )


class RolePermissionsRequestSerializer(serializers.Serializer):
    roleId = serializers.IntegerField(error_messages={"required": "Role ID is required", "null": "Role ID is required"})
    permissionIds = serializers.ListField(
        child=serializers.IntegerField(),
        allow_empty=True,
        error_messages={"required": "Permission IDs are required", "null": "Permission IDs are required"},
    )


# -----------------------------
# Users
# -----------------------------
class RoleSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Role
        fields = ["id", "name", "description"]
        read_only_fields = fields


class UserResponseSerializer(serializers.ModelSerializer):
    fullName = serializers.CharField(source="full_name")
    phoneNumber = serializers.CharField(source="phone_number", allow_null=True)
    dateOfBirth = serializers.DateField(source="date_of_birth", allow_null=True)
    age = serializers.SerializerMethodField()
    role = RoleSummarySerializer()
    createdAt = serializers.DateTimeField(source="created_at")
    updatedAt = serializers.DateTimeField(source="updated_at")

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "fullName",
            "phoneNumber",
            "dateOfBirth",
            "age",
            "active",
            "role",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields

    def get_age(self, obj: User) -> int | None:
        return obj.age()


class UserBasicSerializer(serializers.ModelSerializer):
    fullName = serializers.CharField(source="full_name")

    class Meta:
        model = User
        fields = ["id", "username", "fullName", "email"]
        read_only_fields = fields


class UserRequestSerializer(serializers.Serializer):
    """
    Create requires a password; on update (context["partial_password"]) it
    may be omitted to keep the current one.
    """
    username = serializers.CharField(
        min_length=3,
        max_length=50,
        error_messages={
            "blank": "Username is required",
            "required": "Username is required",
            "min_length": "Username must be between 3 and 50 characters",
            "max_length": "Username must be between 3 and 50 characters",
        },
    )
    email = serializers.EmailField(
        error_messages={
            "blank": "Email is required",
            "required": "Email is required",
            "invalid": "Email should be valid",
        },
    )
    password = serializers.CharField(
        min_length=6,
        trim_whitespace=False,
        required=False,
        allow_blank=True,
        error_messages={"min_length": "Password must be at least 6 characters"},
    )
    fullName = serializers.CharField(
        max_length=100,
        error_messages={
            "blank": "Full name is required",
            "required": "Full name is required",
            "max_length": "Full name must not exceed 100 characters",
        },
    )
    phoneNumber = serializers.CharField(
        max_length=20,
        required=False,
        allow_null=True,
        allow_blank=True,
        error_messages={"max_length": "Phone number must not exceed 20 characters"},
    )
    dateOfBirth = serializers.DateField(required=False, allow_null=True)
    roleId = serializers.IntegerField(error_messages={"required": "Role ID is required", "null": "Role ID is required"})

    def validate(self, attrs):
        if not self.context.get("partial_password") and not attrs.get("password"):
            raise serializers.ValidationError({"password": "Password is required"})
        return attrs


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(
        trim_whitespace=False,
        error_messages={"blank": "Current password is required", "required": "Current password is required"},
    )
    newPassword = serializers.CharField(
        min_length=6,
        max_length=100,
        trim_whitespace=False,
        error_messages={
            "blank": "New password is required",
            "required": "New password is required",
            "min_length": "New password must be between 6 and 100 characters",
            "max_length": "New password must be between 6 and 100 characters",
        },
    )
    confirmPassword = serializers.CharField(
        trim_whitespace=False,
        error_messages={"blank": "Confirm password is required", "required": "Confirm password is required"},
    )


class ResetPasswordSerializer(serializers.Serializer):
    newPassword = serializers.CharField(
        min_length=6,
        max_length=100,
        trim_whitespace=False,
        error_messages={
            "blank": "New password is required",
            "required": "New password is required",
            "min_length": "New password must be between 6 and 100 characters",
            "max_length": "New password must be between 6 and 100 characters",
        },
    )
    confirmPassword = serializers.CharField(
        trim_whitespace=False,
        error_messages={"blank": "Confirm password is required", "required": "Confirm password is required"},
    )

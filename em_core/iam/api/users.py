# em_core/iam/api/users.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from em_core.common.api.pagination import paginate
from em_core.common.api.views import ContextAPIView
from em_core.common.permissions import AdminsOnly, AnyRole, SuperAdminOnly, UserPermission
from em_core.iam.api.serializers import (
    ChangePasswordSerializer,
    MessageSerializer,
    ResetPasswordSerializer,
    UserRequestSerializer,
    UserResponseSerializer,
)
from em_core.iam.selectors import IdentitySelectors
from em_core.iam.services import UserService

PAGE_PARAMETERS = [
    OpenApiParameter("page", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False, description="Zero-based page."),
    OpenApiParameter("size", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False, description="Page size."),
]


def _user_fields(data: dict) -> dict:
    """Map validated camelCase request fields onto UserService kwargs."""
    fields = {
        "username": data["username"],
        "email": data["email"],
        "full_name": data["fullName"],
        "role_id": data["roleId"],
    }
    if "phoneNumber" in data:
        fields["phone_number"] = data["phoneNumber"] or None
    if "dateOfBirth" in data:
        fields["date_of_birth"] = data["dateOfBirth"]
    return fields


class UserListCreateView(ContextAPIView):
    permission_classes = [UserPermission]

    @extend_schema(tags=["Users"], parameters=PAGE_PARAMETERS, responses={200: UserResponseSerializer(many=True)})
    def get(self, request):
        return paginate(request, IdentitySelectors.users(), UserResponseSerializer)

    @extend_schema(tags=["Users"], request=UserRequestSerializer, responses={201: UserResponseSerializer})
    def post(self, request):
        ser = UserRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        user = UserService.create(
            ctx=request.ctx,
            password=ser.validated_data["password"],
            **_user_fields(ser.validated_data),
        )
        return Response(UserResponseSerializer(user).data, status=status.HTTP_201_CREATED)


class UserDetailView(ContextAPIView):
    permission_classes = [UserPermission]

    @extend_schema(tags=["Users"], responses={200: UserResponseSerializer})
    def get(self, request, pk: int):
        user = IdentitySelectors.get_user(pk)
        return Response(UserResponseSerializer(user).data)

    @extend_schema(tags=["Users"], request=UserRequestSerializer, responses={200: UserResponseSerializer})
    def put(self, request, pk: int):
        ser = UserRequestSerializer(data=request.data, context={"partial_password": True})
        ser.is_valid(raise_exception=True)

        user = UserService.update(
            ctx=request.ctx,
            user_id=pk,
            password=ser.validated_data.get("password") or None,
            **_user_fields(ser.validated_data),
        )
        return Response(UserResponseSerializer(user).data)

    @extend_schema(tags=["Users"], responses={200: MessageSerializer})
    def delete(self, request, pk: int):
        UserService.delete(ctx=request.ctx, user_id=pk)
        return Response({"message": "User deleted successfully"})


class UserByUsernameView(ContextAPIView):
    permission_classes = [AdminsOnly]

    @extend_schema(tags=["Users"], responses={200: UserResponseSerializer})
    def get(self, request, username: str):
        user = IdentitySelectors.get_user_by_username(username)
        return Response(UserResponseSerializer(user).data)


class ActiveUsersView(ContextAPIView):
    permission_classes = [AdminsOnly]

    @extend_schema(tags=["Users"], responses={200: UserResponseSerializer(many=True)})
    def get(self, request):
        users = IdentitySelectors.list_active_users()
        return Response(UserResponseSerializer(users, many=True).data)


class UserActivateView(ContextAPIView):
    permission_classes = [SuperAdminOnly]

    @extend_schema(tags=["Users"], request=None, responses={200: UserResponseSerializer})
    def patch(self, request, pk: int):
        user = UserService.activate(ctx=request.ctx, user_id=pk)
        return Response(UserResponseSerializer(user).data)


class UserDeactivateView(ContextAPIView):
    permission_classes = [SuperAdminOnly]

    @extend_schema(tags=["Users"], request=None, responses={200: UserResponseSerializer})
    def patch(self, request, pk: int):
        user = UserService.deactivate(ctx=request.ctx, user_id=pk)
        return Response(UserResponseSerializer(user).data)


class ChangeMyPasswordView(ContextAPIView):
    permission_classes = [AnyRole]

    @extend_schema(tags=["Users"], request=ChangePasswordSerializer, responses={200: MessageSerializer})
    def post(self, request):
        ser = ChangePasswordSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        UserService.change_own_password(
            ctx=request.ctx,
            current_password=ser.validated_data["currentPassword"],
            new_password=ser.validated_data["newPassword"],
            confirm_password=ser.validated_data["confirmPassword"],
        )
        return Response({"message": "Password changed successfully"})


class ResetPasswordView(ContextAPIView):
    permission_classes = [SuperAdminOnly]

    @extend_schema(tags=["Users"], request=ResetPasswordSerializer, responses={200: MessageSerializer})
    def patch(self, request, pk: int):
        ser = ResetPasswordSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        UserService.reset_password(
            ctx=request.ctx,
            user_id=pk,
            new_password=ser.validated_data["newPassword"],
            confirm_password=ser.validated_data["confirmPassword"],
        )
        return Response({"message": "User password reset successfully"})

# em_core/iam/api/roles.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response

from em_core.common.api.views import ContextAPIView
from em_core.common.permissions import RolePermissionPolicy
from em_core.iam.api.serializers import (
    MessageSerializer,
    PermissionRequestSerializer,
    PermissionSerializer,
    RolePermissionsRequestSerializer,
    RoleRequestSerializer,
    RoleSerializer,
    RoleWithPermissionsSerializer,
)
from em_core.iam.selectors import IdentitySelectors
from em_core.iam.services import PermissionService, RoleService


# -----------------------------
# Roles
# -----------------------------
class RoleListCreateView(ContextAPIView):
    permission_classes = [RolePermissionPolicy]

    @extend_schema(tags=["Roles"], responses={200: RoleSerializer(many=True)})
    def get(self, request):
        return Response(RoleSerializer(IdentitySelectors.roles(), many=True).data)

    @extend_schema(tags=["Roles"], request=RoleRequestSerializer, responses={201: RoleSerializer})
    def post(self, request):
        ser = RoleRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        role = RoleService.create(ctx=request.ctx, **ser.validated_data)
        return Response(RoleSerializer(role).data, status=status.HTTP_201_CREATED)


class RolesWithPermissionsView(ContextAPIView):
    permission_classes = [RolePermissionPolicy]

    @extend_schema(tags=["Roles"], responses={200: RoleWithPermissionsSerializer(many=True)})
    def get(self, request):
        roles = IdentitySelectors.roles(with_permissions=True)
        return Response(RoleWithPermissionsSerializer(roles, many=True).data)


class RoleDetailView(ContextAPIView):
    permission_classes = [RolePermissionPolicy]

    @extend_schema(tags=["Roles"], responses={200: RoleSerializer})
    def get(self, request, pk: int):
        return Response(RoleSerializer(IdentitySelectors.get_role(pk)).data)

    @extend_schema(tags=["Roles"], request=RoleRequestSerializer, responses={200: RoleSerializer})
    def put(self, request, pk: int):
        ser = RoleRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        role = RoleService.update(ctx=request.ctx, role_id=pk, **ser.validated_data)
        return Response(RoleSerializer(role).data)

    @extend_schema(tags=["Roles"], responses={200: MessageSerializer})
    def delete(self, request, pk: int):
        RoleService.delete(ctx=request.ctx, role_id=pk)
        return Response({"message": "Role deleted successfully"})


class RoleWithPermissionsDetailView(ContextAPIView):
    permission_classes = [RolePermissionPolicy]

    @extend_schema(tags=["Roles"], responses={200: RoleWithPermissionsSerializer})
    def get(self, request, pk: int):
        role = IdentitySelectors.get_role(pk, with_permissions=True)
        return Response(RoleWithPermissionsSerializer(role).data)


class RoleByNameView(ContextAPIView):
    permission_classes = [RolePermissionPolicy]

    @extend_schema(tags=["Roles"], responses={200: RoleSerializer})
    def get(self, request, name: str):
        return Response(RoleSerializer(IdentitySelectors.get_role_by_name(name)).data)


class AssignPermissionsView(ContextAPIView):
    permission_classes = [RolePermissionPolicy]

    @extend_schema(
        tags=["Roles"],
        request=RolePermissionsRequestSerializer,
        responses={200: RoleWithPermissionsSerializer},
    )
    def post(self, request):
        ser = RolePermissionsRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        role = RoleService.assign_permissions(
            ctx=request.ctx,
            role_id=ser.validated_data["roleId"],
            permission_ids=ser.validated_data["permissionIds"],
        )
        return Response(RoleWithPermissionsSerializer(role).data)


class RolePermissionView(ContextAPIView):
    """Add or remove a single permission on a role."""
    permission_classes = [RolePermissionPolicy]

    @extend_schema(tags=["Roles"], request=None, responses={200: RoleWithPermissionsSerializer})
    def post(self, request, role_id: int, permission_id: int):
        role = RoleService.add_permission(ctx=request.ctx, role_id=role_id, permission_id=permission_id)
        return Response(RoleWithPermissionsSerializer(role).data)

    @extend_schema(tags=["Roles"], responses={200: RoleWithPermissionsSerializer})
    def delete(self, request, role_id: int, permission_id: int):
        role = RoleService.remove_permission(ctx=request.ctx, role_id=role_id, permission_id=permission_id)
        return Response(RoleWithPermissionsSerializer(role).data)


# -----------------------------
# Permissions
# -----------------------------
class PermissionListCreateView(ContextAPIView):
    permission_classes = [RolePermissionPolicy]

    @extend_schema(tags=["Permissions"], responses={200: PermissionSerializer(many=True)})
    def get(self, request):
        return Response(PermissionSerializer(IdentitySelectors.permissions(), many=True).data)

    @extend_schema(tags=["Permissions"], request=PermissionRequestSerializer, responses={201: PermissionSerializer})
    def post(self, request):
        ser = PermissionRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        permission = PermissionService.create(ctx=request.ctx, **ser.validated_data)
        return Response(PermissionSerializer(permission).data, status=status.HTTP_201_CREATED)


class PermissionDetailView(ContextAPIView):
    permission_classes = [RolePermissionPolicy]

    @extend_schema(tags=["Permissions"], responses={200: PermissionSerializer})
    def get(self, request, pk: int):
        return Response(PermissionSerializer(IdentitySelectors.get_permission(pk)).data)

    @extend_schema(tags=["Permissions"], request=PermissionRequestSerializer, responses={200: PermissionSerializer})
    def put(self, request, pk: int):
        ser = PermissionRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        permission = PermissionService.update(ctx=request.ctx, permission_id=pk, **ser.validated_data)
        return Response(PermissionSerializer(permission).data)

    @extend_schema(tags=["Permissions"], responses={200: MessageSerializer})
    def delete(self, request, pk: int):
        PermissionService.delete(ctx=request.ctx, permission_id=pk)
        return Response({"message": "Permission deleted successfully"})


class PermissionByNameView(ContextAPIView):
    permission_classes = [RolePermissionPolicy]

    @extend_schema(tags=["Permissions"], responses={200: PermissionSerializer})
    def get(self, request, name: str):
        return Response(PermissionSerializer(IdentitySelectors.get_permission_by_name(name)).data)

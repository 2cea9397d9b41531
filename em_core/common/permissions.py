# em_core/common/permissions.py

from __future__ import annotations

from typing import FrozenSet

from rest_framework.permissions import AllowAny, BasePermission, SAFE_METHODS

# Role names (iam.Role.name)
ROLE_SUPER_ADMIN = "SUPER_ADMIN"
ROLE_ADMIN = "ADMIN"
ROLE_ATTENDEE = "ATTENDEE"

SUPER_ADMIN_ONLY = frozenset({ROLE_SUPER_ADMIN})
ADMINS = frozenset({ROLE_SUPER_ADMIN, ROLE_ADMIN})
ALL_ROLES = frozenset({ROLE_SUPER_ADMIN, ROLE_ADMIN, ROLE_ATTENDEE})

PUBLIC = AllowAny

DENIED_MESSAGE = "Access denied"


def _is_authenticated(user) -> bool:
    return bool(user and getattr(user, "is_authenticated", False))


def caller_role(user) -> str | None:
    """
    Role name of an authenticated iam.User, None otherwise.
    """
    if not _is_authenticated(user):
        return None
    role = getattr(user, "role", None)
    return getattr(role, "name", None)


def caller_permissions(user) -> FrozenSet[str]:
    """
    Permission names granted to the caller's role, loaded from the store
    for this request.
    """
    if not _is_authenticated(user):
        return frozenset()
    return frozenset(getattr(user, "permission_names", frozenset()))


class BaseRolePermission(BasePermission):
    """
    Base permission class for role-based access control.

    Key behavior:
    - Anonymous callers are rejected; DRF turns that into 401 because an
      authenticator is configured.
    - Authenticated callers failing the predicate get 403 with a neutral message.
    - allowed_roles applies to every method unless allowed_roles_per_method
      names the method (HEAD/OPTIONS fall back to GET).
    - required_permission, when set, must be granted to the caller's role.
    """
    message = DENIED_MESSAGE

    allowed_roles: FrozenSet[str] | None = None
    allowed_roles_per_method: dict[str, FrozenSet[str]] = {}
    required_permission: str | None = None

    def _roles_for(self, method: str) -> FrozenSet[str] | None:
        method = method.upper()
        if method in self.allowed_roles_per_method:
            return self.allowed_roles_per_method[method]
        if method in SAFE_METHODS and "GET" in self.allowed_roles_per_method:
            return self.allowed_roles_per_method["GET"]
        return self.allowed_roles

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not _is_authenticated(user):
            return False

        allowed = self._roles_for(request.method)
        if allowed is not None and caller_role(user) not in allowed:
            return False

        if self.required_permission is not None:
            return self.required_permission in caller_permissions(user)

        return allowed is not None


def has_any_role(*roles: str) -> type[BaseRolePermission]:
    """hasAnyRole(R1..Rn): caller's role name is one of `roles`."""
    name = "HasAnyRole_" + "_".join(sorted(roles))
    return type(name, (BaseRolePermission,), {"allowed_roles": frozenset(roles)})


def has_role(role: str) -> type[BaseRolePermission]:
    """hasRole(R): caller's role name equals R."""
    return has_any_role(role)


def has_permission(permission: str) -> type[BaseRolePermission]:
    """hasPermission(P): P is granted to the caller's role."""
    name = "HasPermission_" + permission.replace(".", "_")
    return type(name, (BaseRolePermission,), {"required_permission": permission})


# Endpoint families

class UserPermission(BaseRolePermission):
    """User list/get for admins; every mutation is SUPER_ADMIN only."""
    allowed_roles = SUPER_ADMIN_ONLY
    allowed_roles_per_method = {"GET": ADMINS}


class RolePermissionPolicy(BaseRolePermission):
    """Roles and permissions: read for admins, modify for SUPER_ADMIN."""
    allowed_roles = SUPER_ADMIN_ONLY
    allowed_roles_per_method = {"GET": ADMINS}


class SuperAdminOnly(BaseRolePermission):
    allowed_roles = SUPER_ADMIN_ONLY


class AdminsOnly(BaseRolePermission):
    allowed_roles = ADMINS


class AnyRole(BaseRolePermission):
    allowed_roles = ALL_ROLES

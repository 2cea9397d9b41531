# em_core/iam/api/urls.py
from __future__ import annotations

from em_core.common.api.routing import route
from em_core.iam.api.auth import LoginView, LogoutView
from em_core.iam.api.roles import (
    AssignPermissionsView,
    PermissionByNameView,
    PermissionDetailView,
    PermissionListCreateView,
    RoleByNameView,
    RoleDetailView,
    RoleListCreateView,
    RolePermissionView,
    RolesWithPermissionsView,
    RoleWithPermissionsDetailView,
)
from em_core.iam.api.users import (
    ActiveUsersView,
    ChangeMyPasswordView,
    ResetPasswordView,
    UserActivateView,
    UserByUsernameView,
    UserDeactivateView,
    UserDetailView,
    UserListCreateView,
)

urlpatterns = [
    # Auth
    *route("auth/login", LoginView.as_view(), name="auth-login"),
    *route("auth/logout", LogoutView.as_view(), name="auth-logout"),

    # Users (static segments before <pk>)
    *route("users", UserListCreateView.as_view(), name="users"),
    *route("users/active", ActiveUsersView.as_view(), name="users-active"),
    *route("users/change-my-password", ChangeMyPasswordView.as_view(), name="users-change-my-password"),
    *route("users/username/<str:username>", UserByUsernameView.as_view(), name="users-by-username"),
    *route("users/<int:pk>", UserDetailView.as_view(), name="user-detail"),
    *route("users/<int:pk>/activate", UserActivateView.as_view(), name="user-activate"),
    *route("users/<int:pk>/deactivate", UserDeactivateView.as_view(), name="user-deactivate"),
    *route("users/<int:pk>/reset-password", ResetPasswordView.as_view(), name="user-reset-password"),

    # Roles
    *route("roles", RoleListCreateView.as_view(), name="roles"),
    *route("roles/with-permissions", RolesWithPermissionsView.as_view(), name="roles-with-permissions"),
    *route("roles/assign-permissions", AssignPermissionsView.as_view(), name="roles-assign-permissions"),
    *route("roles/name/<str:name>", RoleByNameView.as_view(), name="roles-by-name"),
    *route("roles/<int:pk>", RoleDetailView.as_view(), name="role-detail"),
    *route("roles/<int:pk>/with-permissions", RoleWithPermissionsDetailView.as_view(), name="role-with-permissions"),
    *route(
        "roles/<int:role_id>/permissions/<int:permission_id>",
        RolePermissionView.as_view(),
        name="role-permission",
    ),

    # Permissions
    *route("permissions", PermissionListCreateView.as_view(), name="permissions"),
    *route("permissions/name/<str:name>", PermissionByNameView.as_view(), name="permissions-by-name"),
    *route("permissions/<int:pk>", PermissionDetailView.as_view(), name="permission-detail"),
]

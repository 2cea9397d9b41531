# em_core/iam/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from em_core.common.errors import NotFound
from em_core.iam.models import Permission, Role, User


class IdentitySelectors:
    """
    Read-only queries for users, roles and permissions.
    No .save(), no state mutation here.
    """

    # -----------------------------
    # Users
    # -----------------------------
    @staticmethod
    def users() -> QuerySet[User]:
        return User.objects.select_related("role").order_by("id")

    @staticmethod
    def get_user(user_id: int) -> User:
        try:
            return IdentitySelectors.users().get(id=user_id)
        except User.DoesNotExist:
            raise NotFound(f"User not found with id: {user_id}")

    @staticmethod
    def get_user_by_username(username: str) -> User:
        try:
            return IdentitySelectors.users().get(username=username)
        except User.DoesNotExist:
            raise NotFound(f"User not found with username: {username}")

    @staticmethod
    def get_user_by_email(email: str) -> User:
        try:
            return IdentitySelectors.users().get(email=email)
        except User.DoesNotExist:
            raise NotFound(f"User not found with email: {email}")

    @staticmethod
    def find_user_for_authentication(username: str) -> User | None:
        """User with role and role permissions preloaded, or None."""
        return (
            User.objects.select_related("role")
            .prefetch_related("role__permissions")
            .filter(username=username)
            .first()
        )

    @staticmethod
    def user_exists_by_username(username: str, *, exclude_id: int | None = None) -> bool:
        qs = User.objects.filter(username=username)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        return qs.exists()

    @staticmethod
    def user_exists_by_email(email: str, *, exclude_id: int | None = None) -> bool:
        qs = User.objects.filter(email=email)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        return qs.exists()

    @staticmethod
    def list_active_users() -> QuerySet[User]:
        return IdentitySelectors.users().filter(active=True)

    @staticmethod
    def users_by_ids(user_ids) -> dict[int, User]:
        ids = set(user_ids)
        found = {u.id: u for u in User.objects.filter(id__in=ids)}
        for user_id in sorted(ids):
            if user_id not in found:
                raise NotFound(f"User not found with id: {user_id}")
        return found

    # -----------------------------
    # Roles
    # -----------------------------
    @staticmethod
    def roles(*, with_permissions: bool = False) -> QuerySet[Role]:
        qs = Role.objects.order_by("id")
        if with_permissions:
            qs = qs.prefetch_related("permissions")
        return qs

    @staticmethod
    def get_role(role_id: int, *, with_permissions: bool = False) -> Role:
        try:
            return IdentitySelectors.roles(with_permissions=with_permissions).get(id=role_id)
        except Role.DoesNotExist:
            raise NotFound(f"Role not found with id: {role_id}")

    @staticmethod
    def get_role_by_name(name: str, *, with_permissions: bool = False) -> Role:
        try:
            return IdentitySelectors.roles(with_permissions=with_permissions).get(name=name)
        except Role.DoesNotExist:
            raise NotFound(f"Role not found with name: {name}")

    @staticmethod
    def role_exists_by_name(name: str, *, exclude_id: int | None = None) -> bool:
        qs = Role.objects.filter(name=name)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        return qs.exists()

    @staticmethod
    def permission_names_for_role(role: Role) -> frozenset[str]:
        return frozenset(role.permissions.values_list("name", flat=True))

    # -----------------------------
    # Permissions
    # -----------------------------
    @staticmethod
    def permissions() -> QuerySet[Permission]:
        return Permission.objects.order_by("id")

    @staticmethod
    def get_permission(permission_id: int) -> Permission:
        try:
            return Permission.objects.get(id=permission_id)
        except Permission.DoesNotExist:
            raise NotFound(f"Permission not found with id: {permission_id}")

    @staticmethod
    def get_permission_by_name(name: str) -> Permission:
        try:
            return Permission.objects.get(name=name)
        except Permission.DoesNotExist:
            raise NotFound(f"Permission not found with name: {name}")

    @staticmethod
    def permission_exists_by_name(name: str, *, exclude_id: int | None = None) -> bool:
        qs = Permission.objects.filter(name=name)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        return qs.exists()

    @staticmethod
    def permissions_by_ids(permission_ids) -> list[Permission]:
        ids = set(permission_ids)
        found = {p.id: p for p in Permission.objects.filter(id__in=ids)}
        for permission_id in sorted(ids):
            if permission_id not in found:
                raise NotFound(f"Permission not found with id: {permission_id}")
        return [found[i] for i in sorted(ids)]

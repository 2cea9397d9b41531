# em_core/iam/services/roles.py
from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from em_core.audit.constants import ActivityType
from em_core.audit.services import ActivityRecorder
from em_core.common.context import RequestContext
from em_core.common.errors import Conflict, StateConflict
from em_core.iam.models import Role, RolePermission
from em_core.iam.selectors import IdentitySelectors

logger = logging.getLogger(__name__)

ROLE_ENTITY = "Role"


def _duplicate(name: str) -> Conflict:
    return Conflict(f"Role with name '{name}' already exists")


def _save_role(role: Role) -> None:
    try:
        with transaction.atomic():
            role.save()
    except IntegrityError:
        raise _duplicate(role.name)


def _permission_names(role: Role) -> list[str]:
    return sorted(IdentitySelectors.permission_names_for_role(role))


class RoleService:

    @staticmethod
    @transaction.atomic
    def create(*, ctx: RequestContext, name: str, description: str = "") -> Role:
        if IdentitySelectors.role_exists_by_name(name):
            logger.warning("Role creation failed: '%s' already exists", name)
            raise _duplicate(name)

        role = Role(name=name, description=description or "")
        _save_role(role)

        ActivityRecorder.record_entity(
            ActivityType.ROLE_CREATE,
            ctx,
            entity_type=ROLE_ENTITY,
            entity_id=role.id,
            entity_name=role.name,
            description=f"Created role '{role.name}'",
        )
        logger.info("Role created: %s (id=%s)", role.name, role.id)
        return role

    @staticmethod
    @transaction.atomic
    def update(*, ctx: RequestContext, role_id: int, name: str, description: str = "") -> Role:
        role = IdentitySelectors.get_role(role_id)
        before = {"name": role.name, "description": role.description}

        if name != role.name and IdentitySelectors.role_exists_by_name(name, exclude_id=role.id):
            logger.warning("Role update failed: '%s' already exists", name)
            raise _duplicate(name)

        role.name = name
        role.description = description or ""
        _save_role(role)

        ActivityRecorder.record_change(
            ActivityType.ROLE_UPDATE,
            ctx,
            entity_type=ROLE_ENTITY,
            entity_id=role.id,
            entity_name=role.name,
            old_values=before,
            new_values={"name": role.name, "description": role.description},
            description=f"Updated role '{role.name}'",
        )
        logger.info("Role updated: %s (id=%s)", role.name, role.id)
        return role

    @staticmethod
    @transaction.atomic
    def delete(*, ctx: RequestContext, role_id: int) -> None:
        role = IdentitySelectors.get_role(role_id)

        assigned = role.users.count()
        if assigned:
            raise StateConflict(f"Cannot delete role. {assigned} user(s) are assigned to this role")

        name = role.name
        role.delete()

        ActivityRecorder.record_entity(
            ActivityType.ROLE_DELETE,
            ctx,
            entity_type=ROLE_ENTITY,
            entity_id=role_id,
            entity_name=name,
            description=f"Deleted role '{name}'",
        )
        logger.info("Role deleted: %s (id=%s)", name, role_id)

    # ---------------------------------------------------------------------
    # Role -> permission mapping
    # ---------------------------------------------------------------------
    @staticmethod
    @transaction.atomic
    def assign_permissions(*, ctx: RequestContext, role_id: int, permission_ids) -> Role:
        """Replace the role's permission set."""
        role = IdentitySelectors.get_role(role_id)
        permissions = IdentitySelectors.permissions_by_ids(permission_ids)
        before = _permission_names(role)

        role.permissions.set(permissions)

        ActivityRecorder.record_change(
            ActivityType.ROLE_ASSIGN_PERMISSION,
            ctx,
            entity_type=ROLE_ENTITY,
            entity_id=role.id,
            entity_name=role.name,
            old_values={"permissions": before},
            new_values={"permissions": sorted(p.name for p in permissions)},
            description=f"Assigned {len(permissions)} permission(s) to role '{role.name}'",
        )
        logger.info("Permissions assigned to role %s: %s", role.name, [p.name for p in permissions])
        return IdentitySelectors.get_role(role.id, with_permissions=True)

    @staticmethod
    @transaction.atomic
    def add_permission(*, ctx: RequestContext, role_id: int, permission_id: int) -> Role:
        role = IdentitySelectors.get_role(role_id)
        permission = IdentitySelectors.get_permission(permission_id)

        RolePermission.objects.get_or_create(role=role, permission=permission)

        ActivityRecorder.record_entity(
            ActivityType.ROLE_ASSIGN_PERMISSION,
            ctx,
            entity_type=ROLE_ENTITY,
            entity_id=role.id,
            entity_name=role.name,
            description=f"Added permission '{permission.name}' to role '{role.name}'",
        )
        logger.info("Permission %s added to role %s", permission.name, role.name)
        return IdentitySelectors.get_role(role.id, with_permissions=True)

    @staticmethod
    @transaction.atomic
    def remove_permission(*, ctx: RequestContext, role_id: int, permission_id: int) -> Role:
        role = IdentitySelectors.get_role(role_id)
        permission = IdentitySelectors.get_permission(permission_id)

        RolePermission.objects.filter(role=role, permission=permission).delete()

        ActivityRecorder.record_entity(
            ActivityType.ROLE_REMOVE_PERMISSION,
            ctx,
            entity_type=ROLE_ENTITY,
            entity_id=role.id,
            entity_name=role.name,
            description=f"Removed permission '{permission.name}' from role '{role.name}'",
        )
        logger.info("Permission %s removed from role %s", permission.name, role.name)
        return IdentitySelectors.get_role(role.id, with_permissions=True)

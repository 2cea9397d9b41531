# em_core/iam/services/permissions.py
from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from em_core.audit.constants import ActivityType
from em_core.audit.services import ActivityRecorder
from em_core.common.context import RequestContext
from em_core.common.errors import Conflict
from em_core.iam.models import Permission
from em_core.iam.selectors import IdentitySelectors

logger = logging.getLogger(__name__)

PERMISSION_ENTITY = "Permission"


def _save_permission(permission: Permission) -> None:
    try:
        with transaction.atomic():
            permission.save()
    except IntegrityError:
        raise Conflict(f"Permission '{permission.name}' already exists")


class PermissionService:

    @staticmethod
    @transaction.atomic
    def create(*, ctx: RequestContext, name: str, description: str = "") -> Permission:
        if IdentitySelectors.permission_exists_by_name(name):
            raise Conflict(f"Permission '{name}' already exists")

        permission = Permission(name=name, description=description or "")
        _save_permission(permission)

        ActivityRecorder.record_entity(
            ActivityType.PERMISSION_CREATE,
            ctx,
            entity_type=PERMISSION_ENTITY,
            entity_id=permission.id,
            entity_name=permission.name,
            description=f"Created permission '{permission.name}'",
        )
        logger.info("Permission created: %s", permission.name)
        return permission

    @staticmethod
    @transaction.atomic
    def update(*, ctx: RequestContext, permission_id: int, name: str, description: str = "") -> Permission:
        permission = IdentitySelectors.get_permission(permission_id)
        before = {"name": permission.name, "description": permission.description}

        if name != permission.name and IdentitySelectors.permission_exists_by_name(name, exclude_id=permission.id):
            raise Conflict(f"Permission '{name}' already exists")

        permission.name = name
        permission.description = description or ""
        _save_permission(permission)

        ActivityRecorder.record_change(
            ActivityType.PERMISSION_UPDATE,
            ctx,
            entity_type=PERMISSION_ENTITY,
            entity_id=permission.id,
            entity_name=permission.name,
            old_values=before,
            new_values={"name": permission.name, "description": permission.description},
            description=f"Updated permission '{permission.name}'",
        )
        logger.info("Permission updated: %s", permission.name)
        return permission

    @staticmethod
    @transaction.atomic
    def delete(*, ctx: RequestContext, permission_id: int) -> None:
        permission = IdentitySelectors.get_permission(permission_id)
        name = permission.name

        # role_permissions rows go with it
        permission.delete()

        ActivityRecorder.record_entity(
            ActivityType.PERMISSION_DELETE,
            ctx,
            entity_type=PERMISSION_ENTITY,
            entity_id=permission_id,
            entity_name=name,
            description=f"Deleted permission '{name}'",
        )
        logger.info("Permission deleted: %s", name)

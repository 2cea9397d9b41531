# em_core/audit/services.py
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from django.db import transaction
from django.utils import timezone

from em_core.audit.constants import SYSTEM_ACTOR, ActivityType, LoginStatus
from em_core.audit.models import ActivityRecord, LoginRecord, PasswordRecord
from em_core.common.context import RequestContext

logger = logging.getLogger(__name__)


def _as_json(values: Optional[Dict[str, Any]]) -> str | None:
    if values is None:
        return None
    return json.dumps(values, default=str, sort_keys=True)


class ActivityRecorder:
    """
    Central activity writer.

    Every call is a plain insert wrapped in transaction.atomic, so inside a
    service's own atomic block it joins that transaction: if the insert
    fails, the domain change rolls back with it.
    """

    @staticmethod
    @transaction.atomic
    def record_raw(
        activity_type: ActivityType,
        *,
        user_id: int,
        username: str,
        role: str,
        ctx: RequestContext | None = None,
        entity_type: str | None = None,
        entity_id: int | None = None,
        entity_name: str | None = None,
        description: str | None = None,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        now: datetime | None = None,
    ) -> ActivityRecord:
        """Low-level form: identity is given explicitly (system-initiated writes)."""
        ctx = ctx or RequestContext.system()
        return ActivityRecord.objects.create(
            user_id=user_id,
            username=username,
            user_group=role,
            activity_type_code=activity_type.code,
            activity_type_name=activity_type.label,
            entity_type=entity_type,
            entity_id=entity_id,
            entity_name=entity_name,
            description=description,
            old_values=_as_json(old_values),
            new_values=_as_json(new_values),
            ip_address=ctx.ip,
            device_id=ctx.device_id,
            session_id=ctx.session_id,
            activity_date=now or timezone.now(),
        )

    @staticmethod
    def record(activity_type: ActivityType, ctx: RequestContext, **extra) -> ActivityRecord:
        """Minimal form: the caller is the actor (SYSTEM when there is none)."""
        if ctx.user is None:
            return ActivityRecorder.record_raw(
                activity_type,
                user_id=0,
                username=SYSTEM_ACTOR,
                role=SYSTEM_ACTOR,
                ctx=ctx,
                **extra,
            )
        return ActivityRecorder.record_raw(
            activity_type,
            user_id=ctx.user_id,
            username=ctx.username,
            role=ctx.role or "",
            ctx=ctx,
            **extra,
        )

    @staticmethod
    def record_entity(
        activity_type: ActivityType,
        ctx: RequestContext,
        *,
        entity_type: str,
        entity_id: int | None,
        entity_name: str | None,
        description: str | None = None,
    ) -> ActivityRecord:
        return ActivityRecorder.record(
            activity_type,
            ctx,
            entity_type=entity_type,
            entity_id=entity_id,
            entity_name=entity_name,
            description=description,
        )

    @staticmethod
    def record_change(
        activity_type: ActivityType,
        ctx: RequestContext,
        *,
        entity_type: str,
        entity_id: int | None,
        entity_name: str | None,
        old_values: Optional[Dict[str, Any]],
        new_values: Optional[Dict[str, Any]],
        description: str | None = None,
    ) -> ActivityRecord:
        return ActivityRecorder.record(
            activity_type,
            ctx,
            entity_type=entity_type,
            entity_id=entity_id,
            entity_name=entity_name,
            description=description,
            old_values=old_values,
            new_values=new_values,
        )


class LoginRecorder:

    @staticmethod
    @transaction.atomic
    def record_login(
        *,
        user,
        status: str,
        ctx: RequestContext,
        token: str = "",
        now: datetime | None = None,
    ) -> LoginRecord:
        return LoginRecord.objects.create(
            user_id=user.id,
            user_type=user.role.name,
            user_token=token if status == LoginStatus.SUCCESS else "",
            request_from=(ctx.user_agent or "")[:255],
            request_ip=ctx.ip,
            device_info=ctx.device_info,
            login_time=now or timezone.now(),
            login_status=status,
            created_by=user.username,
        )

    @staticmethod
    @transaction.atomic
    def record_logout(token: str, *, now: datetime | None = None) -> bool:
        """
        Close the open row for `token`. Best effort: False when nothing is open.
        """
        if not token:
            return False
        record = (
            LoginRecord.objects.select_for_update()
            .filter(user_token=token, logout_time__isnull=True)
            .order_by("-login_time")
            .first()
        )
        if record is None:
            logger.info("Logout without an open login record")
            return False
        record.logout_time = now or timezone.now()
        record.save(update_fields=["logout_time"])
        return True


class PasswordRecorder:

    @staticmethod
    @transaction.atomic
    def record_change(
        *,
        user_id: int,
        changed_by: str,
        old_hash: str | None,
        new_hash: str,
        now: datetime | None = None,
    ) -> PasswordRecord:
        return PasswordRecord.objects.create(
            user_id=user_id,
            changed_by=changed_by,
            change_date=now or timezone.now(),
            old_password=old_hash,
            new_password=new_hash,
        )


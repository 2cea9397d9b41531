# em_core/iam/services/users.py
from __future__ import annotations

import logging
from datetime import date

from django.db import IntegrityError, transaction
from django.db.models import ProtectedError
from django.utils import timezone

from em_core.audit.constants import SYSTEM_ACTOR, ActivityType
from em_core.audit.services import ActivityRecorder, PasswordRecorder
from em_core.common.context import RequestContext
from em_core.common.errors import Conflict, StateConflict, ValidationFailed
from em_core.events.models import Event
from em_core.iam.hashers import PasswordHasher
from em_core.iam.models import User
from em_core.iam.selectors import IdentitySelectors

logger = logging.getLogger(__name__)

USER_ENTITY = "User"

_UNSET = object()


def user_snapshot(user: User) -> dict:
    return {
        "username": user.username,
        "email": user.email,
        "fullName": user.full_name,
        "phoneNumber": user.phone_number,
        "dateOfBirth": user.date_of_birth,
        "active": user.active,
        "role": user.role.name,
    }


def _ensure_unique(*, username: str, email: str, exclude_id: int | None = None) -> None:
    if IdentitySelectors.user_exists_by_username(username, exclude_id=exclude_id):
        raise Conflict(f"Username '{username}' is already taken")
    if IdentitySelectors.user_exists_by_email(email, exclude_id=exclude_id):
        raise Conflict(f"Email '{email}' is already registered")


def _save_user(user: User, **save_kwargs) -> None:
    """
    Save inside a savepoint and map a unique-index race onto the same
    message the advisory check produces.
    """
    try:
        with transaction.atomic():
            user.save(**save_kwargs)
    except IntegrityError:
        if IdentitySelectors.user_exists_by_username(user.username, exclude_id=user.pk):
            raise Conflict(f"Username '{user.username}' is already taken")
        raise Conflict(f"Email '{user.email}' is already registered")


class UserService:

    @staticmethod
    @transaction.atomic
    def create(
        *,
        ctx: RequestContext,
        username: str,
        email: str,
        password: str,
        full_name: str,
        role_id: int,
        phone_number: str | None = None,
        date_of_birth: date | None = None,
    ) -> User:
        _ensure_unique(username=username, email=email)
        role = IdentitySelectors.get_role(role_id)

        user = User(
            username=username,
            email=email,
            password=PasswordHasher.hash(password),
            full_name=full_name,
            phone_number=phone_number,
            date_of_birth=date_of_birth,
            active=True,
            role=role,
        )
        _save_user(user)

        PasswordRecorder.record_change(
            user_id=user.id,
            changed_by=ctx.username or SYSTEM_ACTOR,
            old_hash=None,
            new_hash=user.password,
        )
        ActivityRecorder.record_entity(
            ActivityType.USER_CREATE,
            ctx,
            entity_type=USER_ENTITY,
            entity_id=user.id,
            entity_name=user.username,
            description=f"Created user '{user.username}' with role '{role.name}'",
        )
        logger.info("User created: %s (role=%s)", user.username, role.name)
        return user

    @staticmethod
    @transaction.atomic
    def update(
        *,
        ctx: RequestContext,
        user_id: int,
        username: str,
        email: str,
        full_name: str,
        role_id: int | None = None,
        password: str | None = None,
        phone_number=_UNSET,
        date_of_birth=_UNSET,
    ) -> User:
        user = IdentitySelectors.get_user(user_id)
        before = user_snapshot(user)

        if username != user.username and IdentitySelectors.user_exists_by_username(username, exclude_id=user.id):
            raise Conflict(f"Username '{username}' is already taken")
        if email != user.email and IdentitySelectors.user_exists_by_email(email, exclude_id=user.id):
            raise Conflict(f"Email '{email}' is already registered")

        user.username = username
        user.email = email
        user.full_name = full_name
        if phone_number is not _UNSET:
            user.phone_number = phone_number
        if date_of_birth is not _UNSET:
            user.date_of_birth = date_of_birth
        if role_id is not None and role_id != user.role_id:
            user.role = IdentitySelectors.get_role(role_id)

        old_hash = user.password
        password_changed = bool(password) and not PasswordHasher.verify(password, old_hash)
        if password_changed:
            user.password = PasswordHasher.hash(password)

        _save_user(user)

        if password_changed:
            PasswordRecorder.record_change(
                user_id=user.id,
                changed_by=ctx.username or SYSTEM_ACTOR,
                old_hash=old_hash,
                new_hash=user.password,
            )
        ActivityRecorder.record_change(
            ActivityType.USER_UPDATE,
            ctx,
            entity_type=USER_ENTITY,
            entity_id=user.id,
            entity_name=user.username,
            old_values=before,
            new_values=user_snapshot(user),
            description=f"Updated user '{user.username}'",
        )
        logger.info("User updated: %s", user.username)
        return user

    @staticmethod
    @transaction.atomic
    def set_active(*, ctx: RequestContext, user_id: int, active: bool) -> User:
        user = IdentitySelectors.get_user(user_id)
        user.active = active
        user.save(update_fields=["active", "updated_at"])

        activity = ActivityType.USER_ACTIVATE if active else ActivityType.USER_DEACTIVATE
        verb = "Activated" if active else "Deactivated"
        ActivityRecorder.record_entity(
            activity,
            ctx,
            entity_type=USER_ENTITY,
            entity_id=user.id,
            entity_name=user.username,
            description=f"{verb} user '{user.username}'",
        )
        logger.info("User %s: %s", verb.lower(), user.username)
        return user

    @staticmethod
    def activate(*, ctx: RequestContext, user_id: int) -> User:
        return UserService.set_active(ctx=ctx, user_id=user_id, active=True)

    @staticmethod
    def deactivate(*, ctx: RequestContext, user_id: int) -> User:
        return UserService.set_active(ctx=ctx, user_id=user_id, active=False)

    @staticmethod
    @transaction.atomic
    def delete(*, ctx: RequestContext, user_id: int, today: date | None = None) -> None:
        user = IdentitySelectors.get_user(user_id)
        today = today or timezone.localdate()

        upcoming = Event.objects.filter(organizer_id=user.id, event_date__gte=today).count()
        if upcoming:
            raise StateConflict(
                f"Cannot delete user. {upcoming} upcoming event(s) are organized by this user"
            )

        username = user.username
        try:
            with transaction.atomic():
                user.delete()
        except ProtectedError:
            raise StateConflict("Cannot delete user. User is still referenced as an event organizer")

        ActivityRecorder.record_entity(
            ActivityType.USER_DELETE,
            ctx,
            entity_type=USER_ENTITY,
            entity_id=user_id,
            entity_name=username,
            description=f"Deleted user '{username}'",
        )
        logger.info("User deleted: %s", username)

    @staticmethod
    @transaction.atomic
    def change_own_password(
        *,
        ctx: RequestContext,
        current_password: str,
        new_password: str,
        confirm_password: str,
    ) -> None:
        user = IdentitySelectors.get_user(ctx.user_id)

        if not PasswordHasher.verify(current_password, user.password):
            logger.warning("Password change rejected for %s: wrong current password", user.username)
            raise ValidationFailed("Current password is incorrect")
        if new_password != confirm_password:
            raise ValidationFailed("New password and confirm password do not match")
        if PasswordHasher.verify(new_password, user.password):
            raise ValidationFailed("New password must be different from current password")

        old_hash = user.password
        user.password = PasswordHasher.hash(new_password)
        user.save(update_fields=["password", "updated_at"])

        PasswordRecorder.record_change(
            user_id=user.id,
            changed_by=user.username,
            old_hash=old_hash,
            new_hash=user.password,
        )
        ActivityRecorder.record_entity(
            ActivityType.PASSWORD_CHANGE,
            ctx,
            entity_type=USER_ENTITY,
            entity_id=user.id,
            entity_name=user.username,
            description=f"User '{user.username}' changed their password",
        )
        logger.info("Password changed for %s", user.username)

    @staticmethod
    @transaction.atomic
    def reset_password(
        *,
        ctx: RequestContext,
        user_id: int,
        new_password: str,
        confirm_password: str,
    ) -> None:
        user = IdentitySelectors.get_user(user_id)

        if new_password != confirm_password:
            raise ValidationFailed("New password and confirm password do not match")

        old_hash = user.password
        user.password = PasswordHasher.hash(new_password)
        user.save(update_fields=["password", "updated_at"])

        PasswordRecorder.record_change(
            user_id=user.id,
            changed_by=ctx.username or SYSTEM_ACTOR,
            old_hash=old_hash,
            new_hash=user.password,
        )
        ActivityRecorder.record_entity(
            ActivityType.PASSWORD_RESET,
            ctx,
            entity_type=USER_ENTITY,
            entity_id=user.id,
            entity_name=user.username,
            description=f"{ctx.role} '{ctx.username}' reset password for user '{user.username}'",
        )
        logger.info("Password reset for %s by %s", user.username, ctx.username)

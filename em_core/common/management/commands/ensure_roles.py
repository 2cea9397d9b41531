# em_core/common/management/commands/ensure_roles.py

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from em_core.common.context import RequestContext
from em_core.common.permissions import ROLE_ADMIN, ROLE_ATTENDEE, ROLE_SUPER_ADMIN
from em_core.iam.models import Permission, Role, RolePermission
from em_core.iam.selectors import IdentitySelectors
from em_core.iam.services import UserService

PERMISSIONS = {
    "user.read": "Read users",
    "user.write": "Create, update and delete users",
    "role.read": "Read roles and permissions",
    "role.write": "Manage roles and permissions",
    "event.read": "Read events",
    "event.write": "Create and manage own events",
    "history.read": "Read other users' history",
}

ROLES = {
    ROLE_SUPER_ADMIN: ("Full system access", list(PERMISSIONS)),
    ROLE_ADMIN: (
        "Administrative read access",
        ["user.read", "role.read", "event.read", "event.write", "history.read"],
    ),
    ROLE_ATTENDEE: ("Event attendee", ["event.read", "event.write"]),
}


class Command(BaseCommand):
    help = "Ensure default roles, permissions and (optionally) a super admin exist (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--superadmin-username", type=str, default=None)
        parser.add_argument("--superadmin-email", type=str, default=None)
        parser.add_argument("--superadmin-password", type=str, default=None)

    @transaction.atomic
    def handle(self, *args, **options):
        permissions = {}
        created_permissions = 0
        for name, description in PERMISSIONS.items():
            permissions[name], was_created = Permission.objects.get_or_create(
                name=name, defaults={"description": description}
            )
            created_permissions += 1 if was_created else 0

        created_roles = 0
        for name, (description, granted) in ROLES.items():
            role, was_created = Role.objects.get_or_create(name=name, defaults={"description": description})
            created_roles += 1 if was_created else 0
            for permission_name in granted:
                RolePermission.objects.get_or_create(role=role, permission=permissions[permission_name])

        self.stdout.write(
            self.style.SUCCESS(
                f"Roles ensured. Newly created: {created_roles} role(s), {created_permissions} permission(s)"
            )
        )

        username = options["superadmin_username"]
        if not username:
            return

        email = options["superadmin_email"]
        password = options["superadmin_password"]
        if not email or not password:
            raise CommandError("--superadmin-email and --superadmin-password are required with --superadmin-username")

        if IdentitySelectors.user_exists_by_username(username):
            self.stdout.write(f"Super admin '{username}' already exists")
            return

        role = IdentitySelectors.get_role_by_name(ROLE_SUPER_ADMIN)
        user = UserService.create(
            ctx=RequestContext.system(),
            username=username,
            email=email,
            password=password,
            full_name="Super Admin",
            role_id=role.id,
        )
        self.stdout.write(self.style.SUCCESS(f"Super admin created: {user.username}"))

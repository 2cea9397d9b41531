from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from em_core.audit.models import ActivityRecord, PasswordRecord
from em_core.iam.hashers import PasswordHasher
from em_core.iam.models import Permission, Role, User

pytestmark = pytest.mark.django_db


def _run(*args):
    out = StringIO()
    call_command("ensure_roles", *args, stdout=out)
    return out.getvalue()


def test_creates_roles_and_permissions():
    _run()

    assert set(Role.objects.values_list("name", flat=True)) == {"SUPER_ADMIN", "ADMIN", "ATTENDEE"}
    assert Permission.objects.count() == 7
    attendee = Role.objects.get(name="ATTENDEE")
    assert set(attendee.permissions.values_list("name", flat=True)) == {"event.read", "event.write"}
    for name in Permission.objects.values_list("name", flat=True):
        resource, _, action = name.partition(".")
        assert resource.islower() and action.islower()


def test_is_idempotent():
    _run()
    output = _run()

    assert "Newly created: 0 role(s), 0 permission(s)" in output
    assert Role.objects.count() == 3
    assert Permission.objects.count() == 7


def test_creates_super_admin_once():
    args = ("--superadmin-username", "boss", "--superadmin-email", "boss@example.com",
            "--superadmin-password", "changeme1")

    _run(*args)
    again = _run(*args)

    boss = User.objects.get(username="boss")
    assert boss.role.name == "SUPER_ADMIN"
    assert PasswordHasher.verify("changeme1", boss.password)
    assert "already exists" in again
    assert User.objects.filter(username="boss").count() == 1

    created = ActivityRecord.objects.get(activity_type_code="USER_CREATE")
    assert created.username == "SYSTEM"
    assert PasswordRecord.objects.get(user_id=boss.id).changed_by == "SYSTEM"


def test_super_admin_needs_email_and_password():
    with pytest.raises(CommandError):
        _run("--superadmin-username", "boss")

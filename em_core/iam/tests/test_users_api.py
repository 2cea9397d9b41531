from datetime import timedelta

import pytest
from django.utils import timezone

from em_core.audit.models import ActivityRecord, PasswordRecord
from em_core.events.models import Event
from em_core.iam.hashers import PasswordHasher
from em_core.iam.models import User

pytestmark = pytest.mark.django_db


def _payload(role, **overrides):
    data = {
        "username": "dave",
        "email": "dave@example.com",
        "password": "secret123",
        "fullName": "Dave Example",
        "phoneNumber": "555-0100",
        "dateOfBirth": "1990-05-17",
        "roleId": role.id,
    }
    data.update(overrides)
    return data


# -----------------------------
# Create / read
# -----------------------------
def test_super_admin_creates_user(root_client, attendee_role):
    res = root_client.post("/users", _payload(attendee_role), format="json")

    assert res.status_code == 201, res.content
    body = res.json()
    assert body["username"] == "dave"
    assert body["fullName"] == "Dave Example"
    assert body["active"] is True
    assert body["role"] == {"id": attendee_role.id, "name": "ATTENDEE", "description": "Event attendee"}
    assert body["dateOfBirth"] == "1990-05-17"
    assert isinstance(body["age"], int)
    assert "password" not in body

    user = User.objects.get(username="dave")
    assert user.password != "secret123"
    assert PasswordHasher.verify("secret123", user.password)

    creation = PasswordRecord.objects.get(user_id=user.id)
    assert creation.old_password is None
    assert creation.changed_by == "root"
    assert ActivityRecord.objects.filter(activity_type_code="USER_CREATE", entity_id=user.id).exists()


def test_create_requires_password(root_client, attendee_role):
    data = _payload(attendee_role)
    del data["password"]

    res = root_client.post("/users", data, format="json")
    assert res.status_code == 400
    assert res.json() == {"password": "Password is required"}


def test_create_validates_fields(root_client, attendee_role):
    res = root_client.post(
        "/users",
        _payload(attendee_role, username="ab", email="not-an-email", password="123"),
        format="json",
    )

    assert res.status_code == 400
    body = res.json()
    assert body["username"] == "Username must be between 3 and 50 characters"
    assert body["email"] == "Email should be valid"
    assert body["password"] == "Password must be at least 6 characters"


def test_create_duplicate_username_and_email(root_client, attendee_role, alice):
    dup_name = root_client.post("/users", _payload(attendee_role, username="alice"), format="json")
    assert dup_name.status_code == 400
    assert dup_name.json()["errorMessage"] == "Username 'alice' is already taken"

    dup_mail = root_client.post("/users", _payload(attendee_role, email="alice@example.com"), format="json")
    assert dup_mail.status_code == 400
    assert dup_mail.json()["errorMessage"] == "Email 'alice@example.com' is already registered"


def test_create_with_unknown_role_is_404(root_client, attendee_role):
    res = root_client.post("/users", _payload(attendee_role, roleId=9999), format="json")
    assert res.status_code == 404
    assert res.json()["errorMessage"] == "Role not found with id: 9999"


def test_admin_cannot_create_users(admin_client, attendee_role):
    res = admin_client.post("/users", _payload(attendee_role), format="json")
    assert res.status_code == 403
    assert res.json()["errorMessage"] == "Access denied"


def test_admin_lists_users_with_pagination(root, admin, alice, bob, carol, admin_client):
    first = admin_client.get("/users", {"page": 0, "size": 2})
    second = admin_client.get("/users", {"page": 1, "size": 2})

    assert first.status_code == 200
    assert [u["username"] for u in first.json()] == ["root", "admin"]
    assert [u["username"] for u in second.json()] == ["alice", "bob"]


def test_invalid_page_parameter(admin_client, admin):
    res = admin_client.get("/users", {"page": -1})
    assert res.status_code == 400
    assert "page" in res.json()


def test_attendee_cannot_list_users(alice_client):
    assert alice_client.get("/users").status_code == 403


def test_get_user_by_id_and_username(admin_client, bob):
    by_id = admin_client.get(f"/users/{bob.id}")
    by_name = admin_client.get("/users/username/bob")

    assert by_id.status_code == 200
    assert by_id.json()["username"] == "bob"
    assert by_name.json()["id"] == bob.id


def test_get_unknown_user_is_404(admin_client, admin):
    res = admin_client.get("/users/424242")

    assert res.status_code == 404
    body = res.json()
    assert body["errorCode"] == "NOT_FOUND"
    assert body["errorMessage"] == "User not found with id: 424242"
    assert body["apiPath"] == "uri=/users/424242"


def test_active_users_excludes_deactivated(admin_client, admin, user_factory, attendee_role):
    user_factory("sleepy", attendee_role, active=False)

    res = admin_client.get("/users/active")
    assert "sleepy" not in [u["username"] for u in res.json()]


# -----------------------------
# Update / activation
# -----------------------------
def test_update_without_password_keeps_hash(root_client, bob, attendee_role):
    old_hash = bob.password
    res = root_client.put(
        f"/users/{bob.id}",
        {"username": "bobby", "email": "bobby@example.com", "fullName": "Bobby", "roleId": attendee_role.id},
        format="json",
    )

    assert res.status_code == 200, res.content
    bob.refresh_from_db()
    assert bob.username == "bobby"
    assert bob.password == old_hash
    assert not PasswordRecord.objects.filter(user_id=bob.id).exists()

    activity = ActivityRecord.objects.get(activity_type_code="USER_UPDATE", entity_id=bob.id)
    assert '"username": "bob"' in activity.old_values
    assert '"username": "bobby"' in activity.new_values


def test_update_with_new_password_records_change(root_client, bob, attendee_role):
    res = root_client.put(
        f"/users/{bob.id}",
        _payload(attendee_role, username="bob", email="bob@example.com", password="brandnew1"),
        format="json",
    )

    assert res.status_code == 200
    bob.refresh_from_db()
    assert PasswordHasher.verify("brandnew1", bob.password)
    assert PasswordRecord.objects.filter(user_id=bob.id, old_password__isnull=False).count() == 1


def test_update_to_taken_username_is_rejected(root_client, alice, bob, attendee_role):
    res = root_client.put(
        f"/users/{bob.id}",
        {"username": "alice", "email": "bob@example.com", "fullName": "Bob", "roleId": attendee_role.id},
        format="json",
    )
    assert res.status_code == 400
    assert res.json()["errorMessage"] == "Username 'alice' is already taken"


def test_deactivate_and_activate(root_client, bob):
    off = root_client.patch(f"/users/{bob.id}/deactivate")
    assert off.status_code == 200
    assert off.json()["active"] is False

    on = root_client.patch(f"/users/{bob.id}/activate")
    assert on.json()["active"] is True

    codes = list(
        ActivityRecord.objects.filter(entity_id=bob.id, entity_type="User")
        .order_by("id")
        .values_list("activity_type_code", flat=True)
    )
    assert codes == ["USER_DEACTIVATE", "USER_ACTIVATE"]


# -----------------------------
# Delete
# -----------------------------
def test_delete_user(root_client, bob):
    res = root_client.delete(f"/users/{bob.id}")

    assert res.status_code == 200
    assert res.json() == {"message": "User deleted successfully"}
    assert not User.objects.filter(id=bob.id).exists()
    assert ActivityRecord.objects.filter(activity_type_code="USER_DELETE", entity_name="bob").exists()


def test_delete_user_with_upcoming_event_is_blocked(root_client, bob):
    Event.objects.create(
        title="Bob's party",
        description="",
        event_date=timezone.localdate() + timedelta(days=3),
        start_time="18:00",
        end_time="20:00",
        location="Bob's place",
        organizer=bob,
    )

    res = root_client.delete(f"/users/{bob.id}")
    assert res.status_code == 400
    assert res.json()["errorMessage"] == "Cannot delete user. 1 upcoming event(s) are organized by this user"
    assert User.objects.filter(id=bob.id).exists()


# -----------------------------
# Passwords
# -----------------------------
def test_change_own_password_rejects_same_as_current(alice_client, alice):
    res = alice_client.post(
        "/users/change-my-password",
        {"currentPassword": "secret123", "newPassword": "secret123", "confirmPassword": "secret123"},
        format="json",
    )
    assert res.status_code == 400
    assert res.json()["errorMessage"] == "New password must be different from current password"


def test_change_own_password_rejects_wrong_current(alice_client, alice):
    res = alice_client.post(
        "/users/change-my-password",
        {"currentPassword": "wrong!!", "newPassword": "another1", "confirmPassword": "another1"},
        format="json",
    )
    assert res.status_code == 400
    assert res.json()["errorMessage"] == "Current password is incorrect"


def test_change_own_password_rejects_mismatch(alice_client, alice):
    res = alice_client.post(
        "/users/change-my-password",
        {"currentPassword": "secret123", "newPassword": "another1", "confirmPassword": "another2"},
        format="json",
    )
    assert res.status_code == 400
    assert res.json()["errorMessage"] == "New password and confirm password do not match"


def test_change_own_password_success(alice_client, alice):
    res = alice_client.post(
        "/users/change-my-password",
        {"currentPassword": "secret123", "newPassword": "another1", "confirmPassword": "another1"},
        format="json",
    )

    assert res.status_code == 200
    assert res.json() == {"message": "Password changed successfully"}
    alice.refresh_from_db()
    assert PasswordHasher.verify("another1", alice.password)

    record = PasswordRecord.objects.get(user_id=alice.id)
    assert record.changed_by == "alice"
    assert record.new_password == alice.password
    assert "another1" not in record.new_password


def test_reset_password_by_super_admin(root_client, bob):
    res = root_client.patch(
        f"/users/{bob.id}/reset-password",
        {"newPassword": "resetpw1", "confirmPassword": "resetpw1"},
        format="json",
    )

    assert res.status_code == 200
    assert res.json() == {"message": "User password reset successfully"}
    bob.refresh_from_db()
    assert PasswordHasher.verify("resetpw1", bob.password)

    activity = ActivityRecord.objects.get(activity_type_code="PASSWORD_RESET")
    assert activity.description == "SUPER_ADMIN 'root' reset password for user 'bob'"


def test_reset_password_mismatch(root_client, bob):
    res = root_client.patch(
        f"/users/{bob.id}/reset-password",
        {"newPassword": "resetpw1", "confirmPassword": "resetpw2"},
        format="json",
    )
    assert res.status_code == 400


def test_admin_cannot_reset_password(admin_client, bob):
    res = admin_client.patch(
        f"/users/{bob.id}/reset-password",
        {"newPassword": "resetpw1", "confirmPassword": "resetpw1"},
        format="json",
    )
    assert res.status_code == 403

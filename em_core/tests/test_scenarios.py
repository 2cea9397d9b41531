"""
End-to-end flows over HTTP: login, event visibility, organizer-only
changes, deleting a running event and password rotation with history.
"""
from datetime import time, timedelta

import pytest
from django.utils import timezone

from em_core.audit.constants import LoginStatus
from em_core.audit.models import ActivityRecord, LoginRecord, PasswordRecord
from em_core.events import services as event_services
from em_core.events.constants import EventType
from em_core.events.tests.factories import NOW, TOMORROW, make_event
from em_core.iam.hashers import PasswordHasher

pytestmark = pytest.mark.django_db


def _event_payload(**overrides):
    data = {
        "title": "t",
        "description": "Planning session",
        "eventDate": (timezone.localdate() + timedelta(days=3)).isoformat(),
        "startTime": "10:00:00",
        "endTime": "11:30:00",
        "location": "Room 42",
        "eventType": "PUBLIC",
        "invitedUserIds": [],
    }
    data.update(overrides)
    return data


def test_login_success(api_client, user_factory, admin_role):
    alice = user_factory("alice", admin_role, password="p@ss")

    res = api_client.post("/auth/login", {"username": "alice", "password": "p@ss"}, format="json")

    assert res.status_code == 200
    body = res.json()
    assert body["token"]
    assert body["username"] == "alice"
    assert body["role"] == "ADMIN"
    assert body["expiresIn"] == 86400000
    assert LoginRecord.objects.filter(user_id=alice.id, login_status=LoginStatus.SUCCESS).exists()


def test_login_deactivated(api_client, user_factory, admin_role):
    alice = user_factory("alice", admin_role, password="p@ss", active=False)

    res = api_client.post("/auth/login", {"username": "alice", "password": "p@ss"}, format="json")

    assert res.status_code == 400
    assert "token" not in res.json()
    assert not LoginRecord.objects.filter(user_id=alice.id, login_status=LoginStatus.SUCCESS).exists()


def test_private_event_visibility(alice_client, bob_client, carol_client, alice, bob, carol):
    created = alice_client.post(
        "/events",
        _event_payload(eventType="PRIVATE", invitedUserIds=[bob.id]),
        format="json",
    )
    assert created.status_code == 201
    event_id = created.json()["id"]

    invitations = bob_client.get("/events/my-invitations")
    assert [e["id"] for e in invitations.json()] == [event_id]

    stranger = carol_client.get(f"/events/{event_id}")
    assert stranger.status_code == 403

    own = alice_client.get(f"/events/{event_id}")
    assert own.status_code == 200
    assert [u["id"] for u in own.json()["invitedUsers"]] == [bob.id]


def test_organizer_only_update(alice_client, bob_client, alice, bob):
    event_id = alice_client.post("/events", _event_payload(), format="json").json()["id"]

    denied = bob_client.put(f"/events/{event_id}", _event_payload(title="hijacked"), format="json")
    assert denied.status_code == 403

    res = alice_client.put(
        f"/events/{event_id}",
        _event_payload(title="t2", description="Moved upstairs", location="Room 7"),
        format="json",
    )
    assert res.status_code == 200
    assert res.json()["title"] == "t2"
    assert res.json()["location"] == "Room 7"

    row = ActivityRecord.objects.get(activity_type_code="EVENT_UPDATE")
    assert row.entity_id == event_id
    assert row.username == "alice"


def test_delete_ongoing_event(alice_client, alice, monkeypatch):
    monkeypatch.setattr(event_services, "local_now", lambda now=None: NOW)
    ongoing = make_event(
        alice,
        title="Running",
        event_date=NOW.date(),
        start_time=(NOW - timedelta(minutes=10)).time(),
        end_time=(NOW + timedelta(minutes=20)).time(),
    )
    future = make_event(
        alice,
        title="Later",
        event_date=TOMORROW,
        start_time=time(9, 0),
        end_time=time(10, 0),
        event_type=EventType.PUBLIC,
    )

    res = alice_client.delete(f"/events/{ongoing.id}")
    assert res.status_code == 400
    assert res.json()["errorMessage"] == "Cannot delete an ongoing event"

    assert alice_client.delete(f"/events/{future.id}").status_code == 200


def test_password_change_rejects_same_as_old(alice_client, alice):
    same = alice_client.post(
        "/users/change-my-password",
        {"currentPassword": "secret123", "newPassword": "secret123", "confirmPassword": "secret123"},
        format="json",
    )
    assert same.status_code == 400
    assert same.json()["errorMessage"] == "New password must be different from current password"

    ok = alice_client.post(
        "/users/change-my-password",
        {"currentPassword": "secret123", "newPassword": "fresh-pass", "confirmPassword": "fresh-pass"},
        format="json",
    )
    assert ok.status_code == 200

    record = PasswordRecord.objects.get(user_id=alice.id)
    assert record.new_password != "fresh-pass"
    assert PasswordHasher.verify("fresh-pass", record.new_password)
    assert PasswordHasher.verify("secret123", record.old_password)

    history = alice_client.get("/history/my-password-changes").json()
    assert len(history) == 1
    assert history[0]["oldPassword"] == "[PROTECTED]"
    assert history[0]["newPassword"] == "[PROTECTED]"
    assert history[0]["changedBy"] == "alice"

from datetime import timedelta

import pytest
from django.utils import timezone

from em_core.common.config import AuthConfig
from em_core.iam.tokens import TokenService

pytestmark = pytest.mark.django_db

URL = "/events"


def test_missing_header_is_401_with_challenge(api_client):
    res = api_client.get(URL)

    assert res.status_code == 401
    assert res["WWW-Authenticate"].startswith("Bearer")
    body = res.json()
    assert body["apiPath"] == "uri=/events"
    assert body["errorCode"] == "UNAUTHORIZED"


def test_wrong_scheme_is_401(api_client, alice):
    token = TokenService().issue(alice.username, alice.role.name)
    api_client.credentials(HTTP_AUTHORIZATION=f"Token {token}")

    assert api_client.get(URL).status_code == 401


def test_garbage_token_is_401(api_client):
    api_client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")

    res = api_client.get(URL)
    assert res.status_code == 401
    assert res.json()["errorMessage"] == "Invalid token"


def test_token_signed_with_other_key_is_401(api_client, alice):
    forged = TokenService(AuthConfig(secret_key="some-other-signing-key-of-decent-length")).issue(
        alice.username, alice.role.name
    )
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {forged}")

    res = api_client.get(URL)
    assert res.status_code == 401
    assert res.json()["errorMessage"] == "Invalid token signature"


def test_expired_token_is_401(api_client, alice):
    token = TokenService().issue(alice.username, alice.role.name, now=timezone.now() - timedelta(days=2))
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

    res = api_client.get(URL)
    assert res.status_code == 401
    assert res.json()["errorMessage"] == "Token has expired"


def test_deactivated_user_token_is_rejected(client_for, alice):
    client = client_for(alice)
    alice.active = False
    alice.save()

    res = client.get(URL)
    assert res.status_code == 401
    assert res.json()["errorMessage"] == "User account is deactivated"


def test_token_for_deleted_user_is_rejected(client_for, alice):
    client = client_for(alice)
    alice.delete()

    res = client.get(URL)
    assert res.status_code == 401
    assert res.json()["errorMessage"] == "User not found"


def test_valid_token_is_accepted(alice_client):
    assert alice_client.get(URL).status_code == 200

from datetime import datetime, timedelta, timezone as dt_timezone

import jwt
import pytest

from em_core.common.config import AuthConfig
from em_core.iam.tokens import TokenError, TokenService

SECRET = "unit-test-secret-key-that-is-long-enough"
T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def tokens():
    return TokenService(AuthConfig(secret_key=SECRET, ttl_seconds=86400))


def test_round_trip_returns_subject_and_role(tokens):
    token = tokens.issue("alice", "ADMIN", now=T0)
    claims = tokens.verify(token, now=T0)

    assert claims.subject == "alice"
    assert claims.role == "ADMIN"
    assert claims.issued_at == T0
    assert claims.expires_at == T0 + timedelta(hours=24)


def test_token_valid_until_just_before_ttl(tokens):
    token = tokens.issue("alice", "ADMIN", now=T0)
    claims = tokens.verify(token, now=T0 + timedelta(seconds=86399))
    assert claims.subject == "alice"


def test_token_expired_at_ttl(tokens):
    token = tokens.issue("alice", "ADMIN", now=T0)

    with pytest.raises(TokenError) as exc:
        tokens.verify(token, now=T0 + timedelta(seconds=86400))
    assert exc.value.reason == TokenError.EXPIRED
    assert exc.value.message == "Token has expired"


def test_bad_signature(tokens):
    other = TokenService(AuthConfig(secret_key="a-completely-different-secret-value"))
    token = other.issue("alice", "ADMIN", now=T0)

    with pytest.raises(TokenError) as exc:
        tokens.verify(token, now=T0)
    assert exc.value.reason == TokenError.BAD_SIGNATURE


@pytest.mark.parametrize("raw", ["", "not-a-jwt", "a.b.c"])
def test_malformed_tokens(tokens, raw):
    with pytest.raises(TokenError) as exc:
        tokens.verify(raw, now=T0)
    assert exc.value.reason == TokenError.MALFORMED


def test_missing_role_claim_is_malformed(tokens):
    iat = int(T0.timestamp())
    token = jwt.encode({"sub": "alice", "iat": iat, "exp": iat + 60}, SECRET, algorithm="HS256")

    with pytest.raises(TokenError) as exc:
        tokens.verify(token, now=T0)
    assert exc.value.reason == TokenError.MALFORMED


def test_issued_tokens_carry_expected_claims(tokens):
    token = tokens.issue("bob", "ATTENDEE", now=T0)
    payload = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False})

    assert payload["sub"] == "bob"
    assert payload["role"] == "ATTENDEE"
    assert payload["exp"] - payload["iat"] == 86400


def test_tokens_issued_in_the_same_instant_differ(tokens):
    first = tokens.issue("alice", "ADMIN", now=T0)
    second = tokens.issue("alice", "ADMIN", now=T0)

    assert first != second
    assert tokens.verify(first, now=T0).subject == "alice"
    assert tokens.verify(second, now=T0).subject == "alice"


def test_fractional_issue_time_keeps_the_full_ttl(tokens):
    issued = T0 + timedelta(microseconds=900000)
    token = tokens.issue("alice", "ADMIN", now=issued)

    claims = tokens.verify(token, now=issued + timedelta(seconds=86400) - timedelta(milliseconds=500))
    assert claims.subject == "alice"
    assert claims.role == "ADMIN"

    with pytest.raises(TokenError) as exc:
        tokens.verify(token, now=issued + timedelta(seconds=86400, milliseconds=1))
    assert exc.value.reason == TokenError.EXPIRED

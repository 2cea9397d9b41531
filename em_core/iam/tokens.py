# em_core/iam/tokens.py
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone

import jwt
from django.utils import timezone

from em_core.common.config import AuthConfig, auth_config


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    role: str
    issued_at: datetime
    expires_at: datetime


class TokenError(Exception):
    MALFORMED = "MALFORMED"
    BAD_SIGNATURE = "BAD_SIGNATURE"
    EXPIRED = "EXPIRED"

    MESSAGES = {
        MALFORMED: "Invalid token",
        BAD_SIGNATURE: "Invalid token signature",
        EXPIRED: "Token has expired",
    }

    def __init__(self, reason: str):
        self.reason = reason
        self.message = self.MESSAGES.get(reason, "Invalid token")
        super().__init__(self.message)


class TokenService:
    """
    Issues and verifies HS256 bearer tokens carrying {sub, role, iat, exp, jti}.

    `now` is injectable on both sides; verification never touches the
    database. iat/exp are fractional NumericDates (microsecond precision)
    and jti makes every issued token distinct.
    """

    def __init__(self, config: AuthConfig | None = None):
        self.config = config or auth_config()

    @property
    def ttl_seconds(self) -> int:
        return self.config.ttl_seconds

    def issue(self, subject: str, role: str, now: datetime | None = None) -> str:
        issued = round((now or timezone.now()).timestamp(), 6)
        payload = {
            "sub": subject,
            "role": role,
            "iat": issued,
            "exp": issued + self.config.ttl_seconds,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self.config.secret_key, algorithm=self.config.algorithm)

    def verify(self, token: str, now: datetime | None = None) -> TokenClaims:
        if not token or not isinstance(token, str):
            raise TokenError(TokenError.MALFORMED)

        try:
            payload = jwt.decode(
                token,
                self.config.secret_key,
                algorithms=[self.config.algorithm],
                options={
                    "verify_exp": False,  # checked below against the injected clock
                    "verify_iat": False,
                    "require": ["sub", "role", "iat", "exp"],
                },
            )
        except jwt.InvalidSignatureError:
            raise TokenError(TokenError.BAD_SIGNATURE)
        except jwt.InvalidTokenError:
            raise TokenError(TokenError.MALFORMED)

        subject, role = payload.get("sub"), payload.get("role")
        if not isinstance(subject, str) or not isinstance(role, str):
            raise TokenError(TokenError.MALFORMED)

        try:
            issued_at, expires_at = float(payload["iat"]), float(payload["exp"])
        except (TypeError, ValueError):
            raise TokenError(TokenError.MALFORMED)

        current = (now or timezone.now()).timestamp()
        if current >= expires_at:
            raise TokenError(TokenError.EXPIRED)

        return TokenClaims(
            subject=subject,
            role=role,
            issued_at=datetime.fromtimestamp(issued_at, tz=dt_timezone.utc),
            expires_at=datetime.fromtimestamp(expires_at, tz=dt_timezone.utc),
        )

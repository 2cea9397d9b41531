# em_core/iam/services/authentication.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from django.utils import timezone

from em_core.audit.constants import LoginStatus
from em_core.audit.services import LoginRecorder
from em_core.common.context import RequestContext
from em_core.common.errors import AccountDeactivated, InvalidCredentials
from em_core.iam.hashers import PasswordHasher
from em_core.iam.selectors import IdentitySelectors
from em_core.iam.tokens import TokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    username: str
    role: str
    expires_in_ms: int
    token_type: str = "Bearer"


class AuthenticationService:

    @staticmethod
    def login(
        *,
        username: str,
        password: str,
        ctx: RequestContext,
        now: datetime | None = None,
        tokens: TokenService | None = None,
    ) -> LoginResult:
        """
        Password login. Not wrapped in a single transaction: the FAILED
        login row must be committed even though the call then fails.
        """
        now = now or timezone.now()
        tokens = tokens or TokenService()

        user = IdentitySelectors.find_user_for_authentication(username)
        if user is None:
            PasswordHasher.burn(password)
            logger.warning("Login failed: unknown username")
            raise InvalidCredentials()

        if not user.active:
            logger.warning("Login rejected: account %s is deactivated", user.username)
            raise AccountDeactivated()

        if not PasswordHasher.verify(password, user.password):
            LoginRecorder.record_login(user=user, status=LoginStatus.FAILED, ctx=ctx, now=now)
            logger.warning("Login failed: bad password for %s", user.username)
            raise InvalidCredentials()

        role = user.role.name
        token = tokens.issue(user.username, role, now=now)
        LoginRecorder.record_login(user=user, status=LoginStatus.SUCCESS, ctx=ctx, token=token, now=now)

        logger.info("Login succeeded for %s (role=%s)", user.username, role)
        return LoginResult(
            token=token,
            username=user.username,
            role=role,
            expires_in_ms=tokens.ttl_seconds * 1000,
        )

    @staticmethod
    def logout(*, token: str, now: datetime | None = None) -> bool:
        closed = LoginRecorder.record_logout(token, now=now)
        logger.info("Logout processed (record closed=%s)", closed)
        return closed

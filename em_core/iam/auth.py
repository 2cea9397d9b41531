# em_core/iam/auth.py

from __future__ import annotations

from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication

from em_core.iam.selectors import IdentitySelectors
from em_core.iam.tokens import TokenError, TokenService


class BearerTokenAuthentication(JWTAuthentication):
    """
    Authenticate using `Authorization: Bearer <token>`.

    Header parsing (and the WWW-Authenticate challenge that makes DRF answer
    401 instead of 403) comes from simplejwt; the token itself is verified by
    TokenService and the caller is loaded from iam.User on every request, so
    deactivating a user revokes access immediately.
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header is None:
            return None

        raw_token = self.get_raw_token(header)
        if raw_token is None:
            return None

        claims = self.get_validated_token(raw_token)
        user = self.get_user(claims)
        request.token = raw_token.decode() if isinstance(raw_token, bytes) else raw_token
        return user, claims

    def get_validated_token(self, raw_token):
        token = raw_token.decode() if isinstance(raw_token, bytes) else raw_token
        try:
            return TokenService().verify(token)
        except TokenError as exc:
            raise AuthenticationFailed(exc.message, code=exc.reason.lower())

    def get_user(self, validated_token):
        user = IdentitySelectors.find_user_for_authentication(validated_token.subject)
        if user is None:
            raise AuthenticationFailed("User not found", code="user_not_found")
        if not user.active:
            raise AuthenticationFailed("User account is deactivated", code="user_inactive")
        return user

# em_core/common/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from em_core.common.api.exceptions import ensure_request_id

UNKNOWN = "Unknown"
DEVICE_ID_MAX_LENGTH = 255

# Proxy headers in the order they are trusted, before REMOTE_ADDR.
_IP_HEADERS = (
    "HTTP_X_FORWARDED_FOR",
    "HTTP_PROXY_CLIENT_IP",
    "HTTP_WL_PROXY_CLIENT_IP",
)


def client_ip(request) -> str:
    meta = getattr(request, "META", {}) or {}
    for key in _IP_HEADERS:
        value = (meta.get(key) or "").strip()
        if value and value.lower() != "unknown":
            return value
    return meta.get("REMOTE_ADDR") or UNKNOWN


def user_agent(request) -> str:
    meta = getattr(request, "META", {}) or {}
    return meta.get("HTTP_USER_AGENT") or ""


def device_id(request) -> str:
    return (user_agent(request) or UNKNOWN)[:DEVICE_ID_MAX_LENGTH]


def device_class(ua: str) -> str:
    """Coarse device family derived from a User-Agent string."""
    if not ua:
        return UNKNOWN
    if "Mobile" in ua:
        return "Mobile"
    if "Tablet" in ua:
        return "Tablet"
    return "Desktop"


@dataclass(frozen=True)
class RequestContext:
    """
    Per-request caller identity plus request metadata.

    Built once after authentication and passed explicitly to every service
    call. `user` is the loaded iam.User (or None for anonymous calls).
    """
    user: Any = None
    role: str | None = None
    permissions: frozenset[str] = field(default_factory=frozenset)
    ip: str = UNKNOWN
    device_id: str = UNKNOWN
    user_agent: str = ""
    session_id: str = ""

    @property
    def user_id(self) -> int | None:
        return getattr(self.user, "id", None)

    @property
    def username(self) -> str | None:
        return getattr(self.user, "username", None)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def device_info(self) -> str:
        return device_class(self.user_agent)

    @classmethod
    def from_request(cls, request) -> "RequestContext":
        user = getattr(request, "user", None)
        if user is None or not getattr(user, "is_authenticated", False) or not hasattr(user, "role"):
            user = None

        role = None
        permissions: frozenset[str] = frozenset()
        if user is not None:
            role = user.role.name
            permissions = user.permission_names

        return cls(
            user=user,
            role=role,
            permissions=permissions,
            ip=client_ip(request),
            device_id=device_id(request),
            user_agent=user_agent(request),
            session_id=ensure_request_id(request),
        )

    @classmethod
    def system(cls, *, user=None) -> "RequestContext":
        """Context for management commands and other non-HTTP callers."""
        return cls(
            user=user,
            role=user.role.name if user is not None else None,
            ip="127.0.0.1",
            device_id="system",
            user_agent="system",
            session_id="system",
        )

# em_core/common/config.py
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from django.conf import settings


@dataclass(frozen=True)
class AuthConfig:
    secret_key: str
    algorithm: str = "HS256"
    ttl_seconds: int = 86400
    hash_iterations: int = 600000

    @property
    def ttl_millis(self) -> int:
        return self.ttl_seconds * 1000


@lru_cache(maxsize=1)
def auth_config() -> AuthConfig:
    """
    Read token/hash settings once and hand out the same immutable value.
    """
    return AuthConfig(
        secret_key=getattr(settings, "JWT_SECRET_KEY", None) or settings.SECRET_KEY,
        algorithm=getattr(settings, "JWT_ALGORITHM", "HS256"),
        ttl_seconds=int(getattr(settings, "JWT_TTL_SECONDS", 86400)),
        hash_iterations=int(getattr(settings, "PASSWORD_HASH_ITERATIONS", 600000)),
    )

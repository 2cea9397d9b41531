# em_core/iam/hashers.py
from __future__ import annotations

from django.conf import settings
from django.contrib.auth.hashers import PBKDF2PasswordHasher, check_password, make_password


class TunablePBKDF2PasswordHasher(PBKDF2PasswordHasher):
    """
    PBKDF2-SHA256 whose work factor comes from settings.PASSWORD_HASH_ITERATIONS.
    Stored hashes carry their own iteration count, so lowering or raising the
    setting never invalidates existing passwords.
    """
    algorithm = "pbkdf2_sha256"

    @property
    def iterations(self) -> int:
        return int(getattr(settings, "PASSWORD_HASH_ITERATIONS", PBKDF2PasswordHasher.iterations))


class PasswordHasher:
    """
    hash(plaintext) -> opaque string, verify(plaintext, stored) -> bool.
    Salted (equal inputs hash differently) and constant-time on verify.
    """

    @staticmethod
    def hash(plaintext: str) -> str:
        return make_password(plaintext)

    @staticmethod
    def verify(plaintext: str, stored: str | None) -> bool:
        if not stored:
            return False
        return check_password(plaintext, stored)

    @staticmethod
    def burn(plaintext: str) -> None:
        """
        Run the hasher once without comparing anything, so a lookup miss
        costs the same as a password mismatch.
        """
        make_password(plaintext)

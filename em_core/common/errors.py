# em_core/common/errors.py
from __future__ import annotations

from http import HTTPStatus


class DomainError(Exception):
    """
    Base for every failure a service can report.

    Services raise these; only the DRF exception handler turns them into
    HTTP responses (see em_core.common.api.exceptions).
    """
    status_code: int = HTTPStatus.BAD_REQUEST
    default_message = "Request failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def error_code(self) -> str:
        return HTTPStatus(self.status_code).name


class ValidationFailed(DomainError):
    """Input or business-rule violation (create/update constraints, password checks)."""
    status_code = HTTPStatus.BAD_REQUEST


class StateConflict(DomainError):
    """Operation not allowed in the entity's current state."""
    status_code = HTTPStatus.BAD_REQUEST


class Conflict(DomainError):
    """Unique constraint collision (advisory check or the index itself)."""
    status_code = HTTPStatus.BAD_REQUEST


class NotFound(DomainError):
    status_code = HTTPStatus.NOT_FOUND
    default_message = "Resource not found."


class Unauthenticated(DomainError):
    status_code = HTTPStatus.UNAUTHORIZED
    default_message = "Authentication required."


class InvalidCredentials(Unauthenticated):
    default_message = "Invalid username or password"


class AccountDeactivated(StateConflict):
    default_message = "User account is deactivated"


class Forbidden(DomainError):
    status_code = HTTPStatus.FORBIDDEN
    default_message = "Access denied"

# em_core/common/api/exceptions.py

from __future__ import annotations

import logging
import uuid
from http import HTTPStatus
from typing import Any

from django.db import IntegrityError
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import ErrorDetail, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from em_core.common.errors import DomainError

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Unexpected server error."
CONFLICT_MESSAGE = "Request conflicts with existing data"


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    Safe to call from middleware and DRF exception handler.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            setattr(request, "request_id", rid)
    return rid


def build_error_envelope(*, request=None, status_code: int, message: str) -> dict[str, Any]:
    """
    Canonical error payload: {apiPath, errorCode, errorMessage, errorTime}.
    Reusable from Django middleware (JsonResponse) and DRF (Response).
    """
    path = getattr(request, "path", "") if request is not None else ""
    return {
        "apiPath": f"uri={path}",
        "errorCode": HTTPStatus(status_code).name,
        "errorMessage": message,
        "errorTime": timezone.localtime().replace(tzinfo=None).isoformat(timespec="microseconds"),
    }


def _first_message(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return _first_message(value[0]) if value else ""
    if isinstance(value, dict):
        return _first_message(next(iter(value.values()))) if value else ""
    return str(value)


def field_errors(detail: Any) -> dict[str, str]:
    """
    Flatten DRF's {field: [ErrorDetail, ...]} into {field: "message"}.
    """
    if isinstance(detail, dict):
        return {str(k): _first_message(v) for k, v in detail.items()}
    return {"detail": _first_message(detail)}


def _message_for(data: Any) -> str:
    if isinstance(data, dict) and "detail" in data:
        return str(data["detail"])
    if isinstance(data, (str, ErrorDetail)):
        return str(data)
    return _first_message(data) or "Request failed."


def _error_response(request, status_code: int, message: str, headers: dict | None = None) -> Response:
    return Response(
        build_error_envelope(request=request, status_code=status_code, message=message),
        status=status_code,
        headers=headers,
    )


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")

    # Domain errors raised by services
    if isinstance(exc, DomainError):
        if exc.status_code >= 500:
            logger.error("Domain error on %s: %s", getattr(request, "path", ""), exc.message)
        return _error_response(request, exc.status_code, exc.message)

    # Unique index collision that slipped past a service's own translation
    if isinstance(exc, IntegrityError):
        logger.warning("Integrity error on %s: %s", getattr(request, "path", ""), exc)
        return _error_response(request, status.HTTP_400_BAD_REQUEST, CONFLICT_MESSAGE)

    # Serializer field validation -> flat {field: message}
    if isinstance(exc, ValidationError) and isinstance(exc.detail, dict):
        return Response(field_errors(exc.detail), status=status.HTTP_400_BAD_REQUEST)

    response = drf_exception_handler(exc, context)

    # Truly unhandled error
    if response is None:
        logger.exception("Unhandled error on %s", getattr(request, "path", ""), exc_info=exc)
        return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR_MESSAGE)

    headers = {}
    for name in ("WWW-Authenticate", "Allow", "Retry-After"):
        if response.has_header(name):
            headers[name] = response[name]

    return _error_response(request, response.status_code, _message_for(response.data), headers=headers or None)

# em_core/common/middleware.py
from __future__ import annotations

import json
import logging
import time

from django.utils.deprecation import MiddlewareMixin

from em_core.common.api.exceptions import ensure_request_id
from em_core.common.context import client_ip

logger = logging.getLogger("em_core.access")


class RequestLoggingMiddleware(MiddlewareMixin):
    """
    Assigns a request id, logs one structured JSON line per request and
    echoes the id back in X-Request-ID.
    """

    HEADER = "X-Request-ID"

    def process_request(self, request):
        incoming = request.META.get("HTTP_X_REQUEST_ID")
        if incoming:
            request.request_id = incoming[:64]
        ensure_request_id(request)
        request._started_at = time.perf_counter()
        return None

    def process_response(self, request, response):
        request_id = ensure_request_id(request)
        started = getattr(request, "_started_at", None)
        duration_ms = round((time.perf_counter() - started) * 1000, 1) if started else None

        log_data = {
            "request_id": request_id,
            "method": request.method,
            "path": request.path,
            "status": response.status_code,
            "duration_ms": duration_ms,
            "client": client_ip(request),
        }
        if response.status_code >= 500:
            logger.error(json.dumps(log_data))
        else:
            logger.info(json.dumps(log_data))

        response[self.HEADER] = request_id
        return response

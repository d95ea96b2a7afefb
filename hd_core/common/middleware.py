from __future__ import annotations

import logging
import time

from django.utils.deprecation import MiddlewareMixin

from hd_core.common.api.exceptions import ensure_request_id

logger = logging.getLogger(__name__)


class RequestLogMiddleware(MiddlewareMixin):
    """
    Attaches request.request_id (reused by the error envelope), echoes it back in
    X-Request-Id and writes one access line per /api/ request.
    """

    HEADER = "X-Request-Id"
    LOGGED_PREFIXES = ("/api/",)
    SKIP_PREFIXES = ("/api/docs/", "/api/schema/")

    def _should_log(self, path: str) -> bool:
        if any(path.startswith(p) for p in self.SKIP_PREFIXES):
            return False
        return any(path.startswith(p) for p in self.LOGGED_PREFIXES)

    def process_request(self, request):
        incoming = request.META.get("HTTP_X_REQUEST_ID")
        if incoming:
            request.request_id = incoming[:64]
        ensure_request_id(request)
        request._started_at = time.monotonic()
        return None

    def process_response(self, request, response):
        rid = ensure_request_id(request)
        response[self.HEADER] = rid

        path = getattr(request, "path", "") or ""
        if self._should_log(path):
            started = getattr(request, "_started_at", None)
            elapsed_ms = (time.monotonic() - started) * 1000 if started else 0.0
            user = getattr(request, "user", None)
            logger.info(
                "%s %s -> %s (%.1fms) user=%s request_id=%s",
                request.method,
                path,
                response.status_code,
                elapsed_ms,
                getattr(user, "pk", None),
                rid,
            )
        return response

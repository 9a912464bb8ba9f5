"""
Snippetbox: Request Logging Middleware
======================================

One structured log line per request: client ip, protocol, method, uri,
status and duration. Fields go in ``extra=`` so the JSON formatter emits
them as keys.

Level follows the status: 5xx → ERROR, 4xx → WARNING, else INFO.
Request bodies are never logged.

An exception no handler claimed is turned into a 500 here, inside the
middleware stack, so it is logged and still passes through the outer
middleware.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from snippetbox.application import server_error_response

logger = logging.getLogger("snippetbox.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = request.client.host if request.client else "unknown"
        proto = f"HTTP/{request.scope.get('http_version', '1.1')}"
        method = request.method
        uri = request.url.path
        if request.url.query:
            uri = f"{uri}?{request.url.query}"

        try:
            response = await call_next(request)
        except Exception as exc:
            response = server_error_response(request, exc)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "received request",
            extra={
                "ip": client_ip,
                "proto": proto,
                "method": method,
                "uri": uri,
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )

        return response

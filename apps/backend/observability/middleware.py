"""
Request instrumentation: correlation id, HTTP RED metrics and access logs.

Metrics are labelled with the matched route template (e.g. /api/search),
never with the raw URL, so query strings cannot inflate label cardinality.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .logging import correlation_id_context, get_logger
from .metrics import http_request_duration_seconds, http_requests_in_progress, http_requests_total

logger = get_logger(__name__)

SLOW_REQUEST_SECONDS = 2.0
CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")
QUIET_PREFIXES = ("/health", "/metrics")


def route_template(request: Request) -> str:
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    return template or "unmatched"


class ObservabilityMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, enable_request_logging: bool = True):
        super().__init__(app)
        self.enable_request_logging = enable_request_logging

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = next((request.headers[h] for h in CORRELATION_HEADERS if h in request.headers), None)
        quiet = request.url.path.startswith(QUIET_PREFIXES)

        with correlation_id_context(incoming) as request_id:
            request.state.correlation_id = request_id
            method = request.method
            in_progress = http_requests_in_progress.labels(method=method)
            in_progress.inc()
            started = time.monotonic()
            status_code = 500
            try:
                response = await call_next(request)
                status_code = response.status_code
                response.headers["X-Request-ID"] = request_id
                return response
            except Exception as exc:
                logger.error(
                    "Request failed",
                    extra={
                        "method": method,
                        "path": request.url.path,
                        "error_type": type(exc).__name__,
                        "error_message": str(exc),
                    },
                    exc_info=True,
                )
                raise
            finally:
                in_progress.dec()
                duration = time.monotonic() - started
                endpoint = route_template(request)
                http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()
                http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)
                if not quiet:
                    self._log_request(method, request.url.path, status_code, duration)

    def _log_request(self, method: str, path: str, status_code: int, duration: float) -> None:
        extra = {
            "method": method,
            "path": path,
            "status_code": status_code,
            "duration_seconds": round(duration, 3),
        }
        if duration > SLOW_REQUEST_SECONDS:
            logger.warning("Slow request", extra=extra)
        elif self.enable_request_logging:
            logger.info("Request completed", extra=extra)

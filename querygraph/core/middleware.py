"""Per-request observability: request ids, access logging, HTTP metrics."""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from querygraph.core.metrics import http_request_duration_seconds, http_requests_total

REQUEST_ID_HEADER = "X-Request-ID"

logger = structlog.stdlib.get_logger("querygraph.http")


def _route_label(request: Request) -> str:
    """Matched route template, or the raw path when nothing matched."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Binds ``request_id`` into the structlog context for the request.

    An incoming ``X-Request-ID`` is reused so the editor can correlate its
    own logs with ours. Requests that raise are still counted, as status 500.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.bind_contextvars(request_id=request_id)

        status = 500
        start = time.perf_counter()
        try:
            response = await call_next(request)
            status = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            duration = time.perf_counter() - start
            path = _route_label(request)
            http_requests_total.labels(
                method=request.method, path=path, status=status
            ).inc()
            http_request_duration_seconds.labels(
                method=request.method, path=path
            ).observe(duration)

            log = logger.warning if status >= 500 else logger.info
            log(
                "request_completed",
                method=request.method,
                path=path,
                status=status,
                duration_ms=round(duration * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")

"""Per-request observability for the PDF Drive API.

``ObservabilityMiddleware`` is a plain ASGI middleware. For every HTTP
request it:

  - accepts a well-formed ``X-Request-ID`` or mints a UUID, binds it into
    the structlog context and ``request.state``, and echoes it back;
  - counts and times the request under the route template that served it
    (``/api/pdfs/{document_id}``), so document and comment ids never
    become metric labels;
  - logs one ``request_completed`` line.
"""

from __future__ import annotations

import re
import time
import uuid

import structlog
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .logging import get_logger
from .metrics import (
    HTTP_REQUEST_DURATION_SECONDS,
    HTTP_REQUESTS_IN_FLIGHT,
    HTTP_REQUESTS_TOTAL,
)

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
UNMATCHED_ROUTE = "<unmatched>"

_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9\-]{8,128}")


def route_label(scope: Scope) -> str:
    """Template of the route that matched ``scope``, or ``UNMATCHED_ROUTE``."""
    route = scope.get("route")
    return (
        getattr(route, "path_format", None)
        or getattr(route, "path", None)
        or UNMATCHED_ROUTE
    )


def _request_id(scope: Scope) -> str:
    incoming = Headers(scope=scope).get(REQUEST_ID_HEADER, "")
    if _VALID_REQUEST_ID.fullmatch(incoming):
        return incoming
    return str(uuid.uuid4())


class ObservabilityMiddleware:
    """Request id, HTTP metrics, and the access log line for each request."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = _request_id(scope)
        scope.setdefault("state", {})["request_id"] = request_id
        status_code = 500

        async def send_with_request_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
            await send(message)

        HTTP_REQUESTS_IN_FLIGHT.inc()
        start = time.perf_counter()
        with structlog.contextvars.bound_contextvars(request_id=request_id):
            try:
                await self.app(scope, receive, send_with_request_id)
            finally:
                HTTP_REQUESTS_IN_FLIGHT.dec()
                elapsed = time.perf_counter() - start
                method, route = scope["method"], route_label(scope)
                HTTP_REQUESTS_TOTAL.labels(
                    method=method, route=route, status=str(status_code),
                ).inc()
                HTTP_REQUEST_DURATION_SECONDS.labels(
                    method=method, route=route,
                ).observe(elapsed)
                logger.info(
                    "request_completed",
                    method=method,
                    route=route,
                    path=scope["path"],
                    status=status_code,
                    duration_ms=round(elapsed * 1000, 2),
                )

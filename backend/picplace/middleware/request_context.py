"""
PicPlace Backend — Request Context Middleware
===============================================

What:  Gives every request a correlation ID and writes one access log line
       for it on the `picplace.access` logger.
How:   The ID comes from the client's X-Request-ID when it is a short token,
       otherwise it is generated. It lives in a ContextVar so exception
       handlers and loggers see it, and it is echoed on the response.

Access line:
    POST /api/places 201 12.3ms [3f9c2a1b] user=<id> from 10.0.0.7

    `user` is the id from a verified Bearer token (set by
    picplace.auth.place_write_claims when PLACES_AUTH_REQUIRED is on), or
    "-" for anonymous requests. Bodies and Authorization headers are never
    logged: signup and login bodies carry passwords.
"""

import logging
import re
import time
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("picplace.access")

REQUEST_ID_HEADER = "X-Request-ID"

# Echoed into headers, log lines and error bodies, so only plain tokens pass
_CLIENT_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(supplied: Optional[str]) -> str:
    """The client's request id if it is a short plain token, else a fresh one."""
    if supplied and _CLIENT_REQUEST_ID.fullmatch(supplied):
        return supplied
    return uuid.uuid4().hex[:12]


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Request ID assignment plus the access log line."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)
        request.state.request_id = rid
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            # Rendered by the catch-all handler outside this middleware
            self._log_access(request, rid, 500, started)
            raise

        response.headers[REQUEST_ID_HEADER] = rid
        # Health checks hit this every few seconds
        if request.url.path != "/health":
            self._log_access(request, rid, response.status_code, started)
        return response

    @staticmethod
    def _log_access(request: Request, rid: str, status: int, started: float) -> None:
        duration_ms = (time.perf_counter() - started) * 1000
        user_id = getattr(request.state, "user_id", None) or "-"
        client_ip = request.client.host if request.client else "unknown"
        logger.log(
            _level_for(status),
            "%s %s %d %.1fms [%s] user=%s from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            user_id,
            client_ip,
            extra={
                "request_id": rid,
                "user_id": user_id,
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )

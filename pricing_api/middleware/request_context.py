"""
Request context middleware for log correlation.

WHAT: Middleware that assigns every request an id, remembers who sent it,
and logs one line per request with its status and duration.

WHY: A seller reporting "the DRE came out wrong" gives us a time and maybe
the X-Request-ID response header. With the id stamped on every log record
(see pricing_api.core.logging) we can find the exact inputs of that call.

HOW: The context lives in a ContextVar so services and DAOs can read it
without receiving the request object.
"""

import logging
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Optional, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


logger = logging.getLogger(__name__)


@dataclass
class RequestContext:
    """
    Container for request-scoped context data.

    Fields:
    - request_id: Unique identifier for the request (for log correlation)
    - ip_address: Client's real IP (considering proxies)
    - path: Request path
    - method: HTTP method
    """

    request_id: str
    ip_address: str
    path: str
    method: str


_request_context: ContextVar[Optional[RequestContext]] = ContextVar(
    "request_context", default=None
)


def get_request_context() -> Optional[RequestContext]:
    """
    Get the current request context.

    Returns:
        RequestContext if within a request, None otherwise
    """
    return _request_context.get()


def get_client_ip(request: Request) -> str:
    """
    Extract the real client IP address from a request.

    HOW: Checks headers in order of trust:
    1. X-Real-IP (set by nginx-style proxies)
    2. X-Forwarded-For (first entry is the original client)
    3. request.client.host (direct connection IP)
    """
    x_real_ip = request.headers.get("X-Real-IP")
    if x_real_ip:
        return x_real_ip.strip()

    x_forwarded_for = request.headers.get("X-Forwarded-For")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that captures and stores request context.

    An incoming X-Request-ID header is reused so ids can be followed across
    the frontend and the API; otherwise a UUID4 is generated. The id is
    echoed back in the response headers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        context = RequestContext(
            request_id=request_id,
            ip_address=get_client_ip(request),
            path=request.url.path,
            method=request.method,
        )
        request.state.context = context
        token = _request_context.set(context)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"{context.method} {context.path} -> {response.status_code} "
                f"({elapsed_ms:.1f} ms, client={context.ip_address})"
            )
            response.headers["X-Request-ID"] = request_id
            return response

        finally:
            _request_context.reset(token)

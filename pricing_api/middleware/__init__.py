"""
Middleware package.

WHY: Middleware provides cross-cutting concerns that apply to all requests.
"""

from pricing_api.middleware.request_context import (
    RequestContextMiddleware,
    get_request_context,
    get_client_ip,
    RequestContext,
)

__all__ = [
    "RequestContextMiddleware",
    "get_request_context",
    "get_client_ip",
    "RequestContext",
]

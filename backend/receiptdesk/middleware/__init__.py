"""
Middleware package.

WHY: Middleware provides cross-cutting concerns such as request correlation
that apply to all requests.
"""

from receiptdesk.middleware.request_context import (
    RequestContext,
    RequestContextMiddleware,
    RequestIdLogFilter,
    get_client_ip,
    get_request_context,
)

__all__ = [
    "RequestContext",
    "RequestContextMiddleware",
    "RequestIdLogFilter",
    "get_client_ip",
    "get_request_context",
]

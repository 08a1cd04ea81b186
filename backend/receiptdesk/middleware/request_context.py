"""
Request context middleware.

WHAT: Assigns every request an id, keeps it in a ContextVar for the duration
of the request and echoes it in the ``X-Request-ID`` response header.

WHY: A receipt creation touches the database, the QR encoder, object storage
and the email provider. Tagging every log line with the request id ties
those steps back to one call.

HOW: BaseHTTPMiddleware stores a RequestContext on ``request.state`` and in
a ContextVar; RequestIdLogFilter copies the id onto log records so the log
format can print it.
"""

import logging
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass
class RequestContext:
    """Request-scoped data available to handlers and services."""

    request_id: str
    ip_address: str
    path: str
    method: str


_request_context: ContextVar[Optional[RequestContext]] = ContextVar(
    "request_context", default=None
)


def get_request_context() -> Optional[RequestContext]:
    """The current request's context, or None outside a request."""
    return _request_context.get()


def get_client_ip(request: Request) -> str:
    """
    Client IP, honoring proxy headers.

    Checks X-Real-IP, then the first X-Forwarded-For hop, then the socket
    peer. These headers are only trustworthy behind a proxy that overwrites
    them.
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


class RequestIdLogFilter(logging.Filter):
    """Adds ``request_id`` to every log record ("-" outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = _request_context.get()
        record.request_id = context.request_id if context else "-"
        return True


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Captures request context and logs one line per request.

    An incoming ``X-Request-ID`` is reused so ids can span services.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
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
            response.headers[REQUEST_ID_HEADER] = request_id
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code}",
                extra={
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                },
            )
            return response
        finally:
            _request_context.reset(token)

"""Request context middleware: a single pass for observability and client identity.

Responsibilities (all handled in one pass, not separate middlewares):
- Generate or propagate ``X-Request-ID`` header
- Measure request duration
- Log every request/response as structured JSON
- Reduce the client address to a salted hash and capture the user agent
  on ``request.state`` for the audit trail

Write throttling is per contributor session and lives in the services,
not here. The raw client address never leaves this module.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..core.actor import UNKNOWN, hash_ip
from ..core.logging_config import request_id_var

logger = logging.getLogger(__name__)

# Longest user agent string kept for the audit trail.
MAX_USER_AGENT_LENGTH = 512


def _client_address(request: Request) -> str:
    """Client address from ``X-Forwarded-For`` when behind a proxy, else the peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return ""


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Single middleware handling request-id, timing, logging and client identity."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # --- Request ID ---
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)

        # --- Client identity ---
        request.state.ip_hash = hash_ip(_client_address(request))
        request.state.user_agent = (request.headers.get("user-agent") or UNKNOWN)[:MAX_USER_AGENT_LENGTH]

        # --- Timing ---
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        # --- Response headers ---
        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        # --- Structured request log ---
        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        return response

"""X-Service-Key authentication middleware.

Every request except the probe endpoints (/health, /readiness) must carry an
``X-Service-Key`` header equal to ``GatewaySettings.service_key``. Keys are
compared with ``hmac.compare_digest``.
"""

from __future__ import annotations

import hmac
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from n8n_gateway.middleware.error_handler import AuthenticationError, error_response

logger = logging.getLogger(__name__)

PUBLIC_PATHS: frozenset[str] = frozenset({"/health", "/readiness"})


def key_matches(provided: str | None, expected: str) -> bool:
    """Constant-time comparison of a presented key against the configured one."""
    if not provided:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


class ServiceKeyAuthMiddleware(BaseHTTPMiddleware):
    """Reject requests without a valid service key before they reach a router."""

    def __init__(self, app, service_key: str) -> None:  # noqa: ANN001
        super().__init__(app)
        self._service_key = service_key

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        provided = request.headers.get("x-service-key")
        if key_matches(provided, self._service_key):
            return await call_next(request)

        client_host = request.client.host if request.client else "unknown"
        logger.warning(
            "Rejected %s %s from %s: %s service key",
            request.method,
            request.url.path,
            client_host,
            "invalid" if provided else "missing",
            extra={"status_code": AuthenticationError.status_code},
        )
        return error_response(AuthenticationError.status_code, AuthenticationError.message)

"""Global error hierarchy and FastAPI exception handlers.

All gateway-specific errors extend GatewayError. The FastAPI exception handlers
catch these errors (plus Pydantic's RequestValidationError and unhandled exceptions)
and return a consistent JSON envelope: { success, data, error, meta }.

Workflow failures are not exceptions: the workflow client and status poller
report them in their result envelope.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from n8n_gateway.models.responses import ApiResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class GatewayError(Exception):
    """Base error for all gateway-specific errors."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.details = kwargs
        super().__init__(self.message)


class ValidationError(GatewayError):
    """Pydantic / payload validation failures, with field-level details."""

    status_code = 422
    message = "Validation error"


class AuthenticationError(GatewayError):
    """Invalid or missing service key."""

    status_code = 401
    message = "Invalid or missing service key"


class MissingUserError(GatewayError):
    """Request carries no X-User-ID header."""

    status_code = 401
    message = "Missing X-User-ID header"


class UrlOverrideRejectedError(GatewayError):
    """Caller-supplied webhook or status URL is not allowed."""

    status_code = 400
    message = "URL override rejected"


class ChatSessionNotFoundError(GatewayError):
    """Chat session not found."""

    status_code = 404
    message = "Chat session not found"


class ApiKeyNotFoundError(GatewayError):
    """API key not found."""

    status_code = 404
    message = "API key not found"


class KeyStoreNotConfiguredError(GatewayError):
    """Supabase URL or key missing."""

    status_code = 503
    message = "API key store not configured"


class KeyStoreError(GatewayError):
    """Supabase request failed."""

    status_code = 502
    message = "API key store request failed"


# ---------------------------------------------------------------------------
# Envelope responses
# ---------------------------------------------------------------------------


def error_response(
    status_code: int,
    error: str,
    meta: dict | None = None,
) -> JSONResponse:
    """Return ``{success: false, data: null, error, meta}`` with the given status."""
    body = ApiResponse(success=False, error=error, meta=meta)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    # "body -> data -> name" style locations, one entry per failing field
    return [
        {
            "field": " -> ".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]


async def _handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "%s %s failed: %s",
        request.method,
        request.url.path,
        exc.message,
        extra={"status_code": exc.status_code},
    )
    return error_response(exc.status_code, exc.message, meta=exc.details or None)


async def _handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = _field_errors(exc)
    logger.info(
        "%s %s rejected: %d invalid field(s)",
        request.method,
        request.url.path,
        len(fields),
        extra={"status_code": 422},
    )
    return error_response(422, ValidationError.message, meta={"fields": fields})


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled %s on %s %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc_info=exc,
        extra={"status_code": 500},
    )
    return error_response(500, GatewayError.message)


def register_error_handlers(app: FastAPI) -> None:
    """Install the envelope handlers for gateway, validation and unexpected errors."""
    app.add_exception_handler(GatewayError, _handle_gateway_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_request_validation)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _handle_unexpected)  # type: ignore[arg-type]

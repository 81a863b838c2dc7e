"""Middleware package: error hierarchy, auth, and request ID."""

from n8n_gateway.middleware.auth import ServiceKeyAuthMiddleware
from n8n_gateway.middleware.error_handler import (
    ApiKeyNotFoundError,
    AuthenticationError,
    ChatSessionNotFoundError,
    GatewayError,
    KeyStoreError,
    KeyStoreNotConfiguredError,
    MissingUserError,
    UrlOverrideRejectedError,
    ValidationError,
    register_error_handlers,
)
from n8n_gateway.middleware.request_id import RequestIdMiddleware

__all__ = [
    "ApiKeyNotFoundError",
    "AuthenticationError",
    "ChatSessionNotFoundError",
    "GatewayError",
    "KeyStoreError",
    "KeyStoreNotConfiguredError",
    "MissingUserError",
    "RequestIdMiddleware",
    "ServiceKeyAuthMiddleware",
    "UrlOverrideRejectedError",
    "ValidationError",
    "register_error_handlers",
]

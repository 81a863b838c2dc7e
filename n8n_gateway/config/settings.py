"""Pydantic Settings for the n8n gateway.

All environment variables use the N8N_GATEWAY_ prefix.
Example: N8N_GATEWAY_PORT=8002, N8N_GATEWAY_WEBHOOK_URL=https://n8n.example.com/webhook/abc
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class GatewaySettings(BaseSettings):
    """Gateway configuration validated from environment variables.

    ``webhook_url`` is optional on purpose: a missing default webhook is
    reported per call by the workflow client, never at startup.
    """

    # Service
    port: int = 8002
    service_key: str  # X-Service-Key for auth
    log_level: str = "INFO"

    # n8n endpoints
    webhook_url: str | None = None
    status_url: str | None = None
    request_timeout_seconds: float = Field(default=30.0, gt=0)

    # Polling
    poll_interval_ms: int = Field(default=2000, ge=1)
    poll_max_attempts: int = Field(default=30, ge=1)
    success_statuses: list[str] = ["completed", "success"]
    failure_statuses: list[str] = ["failed", "error"]

    # Per-request URL overrides
    allow_url_override: bool = True
    allow_private_targets: bool = False

    # Chat
    chat_max_history: int = Field(default=50, ge=1)
    chat_max_sessions: int = Field(default=1000, ge=1)

    # API key store (Supabase PostgREST)
    supabase_url: str | None = None
    supabase_key: str | None = None
    api_keys_table: str = "user_api_keys"

    model_config = {"env_prefix": "N8N_GATEWAY_"}

"""Health and readiness endpoints.

These endpoints do NOT require X-Service-Key authentication.
- GET /health: service status
- GET /readiness: 200 only when a default webhook URL is configured
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Response

from n8n_gateway import __version__
from n8n_gateway.models.responses import ApiResponse


def create_health_router(
    *,
    workflow_client: Any = None,
    api_key_store: Any = None,
) -> APIRouter:
    """Factory that creates the health router with injected dependencies."""

    health_router = APIRouter(tags=["health"])

    @health_router.get("/health")
    async def health() -> dict:
        """Service health check."""
        return ApiResponse(
            success=True,
            data={
                "status": "healthy",
                "version": __version__,
                "webhook_configured": bool(workflow_client and workflow_client.default_url),
                "key_store_configured": api_key_store is not None,
            },
        ).model_dump()

    @health_router.get("/readiness")
    async def readiness(response: Response) -> dict:
        """Readiness probe: 200 iff a default webhook URL is configured."""
        is_ready = bool(workflow_client and workflow_client.default_url)

        if not is_ready:
            response.status_code = 503

        return ApiResponse(
            success=is_ready,
            data={"ready": is_ready},
            error=None if is_ready else "Webhook URL not configured",
        ).model_dump()

    return health_router

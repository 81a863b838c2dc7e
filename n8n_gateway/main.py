"""FastAPI application entry point with lifespan management.

Startup: load settings, configure logging, build the workflow client, status
poller, chat service and API key store from settings, mount routers.
Shutdown: nothing to drain; every outbound request owns its HTTP client.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from n8n_gateway import __version__
from n8n_gateway.config.settings import GatewaySettings
from n8n_gateway.integration.api_key_store import ApiKeyStore
from n8n_gateway.integration.status_poller import StatusPoller, make_status_classifier
from n8n_gateway.integration.webhook import WorkflowClient
from n8n_gateway.logging_config import configure_logging
from n8n_gateway.middleware.auth import ServiceKeyAuthMiddleware
from n8n_gateway.middleware.error_handler import register_error_handlers
from n8n_gateway.middleware.request_id import RequestIdMiddleware
from n8n_gateway.routers.chat import create_chat_router
from n8n_gateway.routers.health import create_health_router
from n8n_gateway.routers.keys import create_keys_router
from n8n_gateway.routers.workflows import create_workflows_router
from n8n_gateway.services.chat_service import ChatService

logger = logging.getLogger(__name__)


def build_components(settings: GatewaySettings) -> dict:
    """Construct the gateway's collaborators from settings."""
    workflow_client = WorkflowClient(
        default_url=settings.webhook_url,
        timeout_seconds=settings.request_timeout_seconds,
    )

    status_poller = StatusPoller(
        default_status_url=settings.status_url,
        interval_ms=settings.poll_interval_ms,
        max_attempts=settings.poll_max_attempts,
        classifier=make_status_classifier(
            succeeded=settings.success_statuses,
            failed=settings.failure_statuses,
        ),
        timeout_seconds=settings.request_timeout_seconds,
    )

    chat_service = ChatService(
        workflow_client=workflow_client,
        max_history=settings.chat_max_history,
        max_sessions=settings.chat_max_sessions,
    )

    api_key_store = None
    if settings.supabase_url and settings.supabase_key:
        api_key_store = ApiKeyStore(
            supabase_url=settings.supabase_url,
            supabase_key=settings.supabase_key,
            table=settings.api_keys_table,
        )
    else:
        logger.warning("Supabase not configured; API key endpoints will answer 503")

    return {
        "workflow_client": workflow_client,
        "status_poller": status_poller,
        "chat_service": chat_service,
        "api_key_store": api_key_store,
    }


def mount_routers(app: FastAPI, settings: GatewaySettings, components: dict) -> None:
    """Include every router with its injected dependencies."""
    app.include_router(
        create_health_router(
            workflow_client=components["workflow_client"],
            api_key_store=components["api_key_store"],
        )
    )
    app.include_router(
        create_workflows_router(
            workflow_client=components["workflow_client"],
            status_poller=components["status_poller"],
            allow_url_override=settings.allow_url_override,
            allow_private_targets=settings.allow_private_targets,
        )
    )
    app.include_router(
        create_chat_router(
            chat_service=components["chat_service"],
            allow_url_override=settings.allow_url_override,
            allow_private_targets=settings.allow_private_targets,
        )
    )
    app.include_router(create_keys_router(api_key_store=components["api_key_store"]))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown logic."""
    settings = GatewaySettings()  # type: ignore[call-arg]

    configure_logging(settings.log_level)
    logger.info("Starting n8n gateway on port %d", settings.port)

    if not settings.webhook_url:
        logger.warning("No default webhook URL configured; calls must pass one")

    components = build_components(settings)
    mount_routers(app, settings, components)

    logger.info("n8n gateway started successfully")

    yield

    logger.info("n8n gateway shut down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Loads ``GatewaySettings`` eagerly so that a missing
    ``N8N_GATEWAY_SERVICE_KEY`` environment variable causes an immediate
    startup failure. A missing webhook URL does not.
    """
    settings = GatewaySettings()  # type: ignore[call-arg]

    app = FastAPI(
        title="n8n Gateway",
        version=__version__,
        lifespan=lifespan,
    )

    register_error_handlers(app)

    # Starlette applies middleware in reverse order of add_middleware calls
    app.add_middleware(ServiceKeyAuthMiddleware, service_key=settings.service_key)
    app.add_middleware(RequestIdMiddleware)

    return app


app = create_app()

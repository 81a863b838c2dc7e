"""n8n webhook invocation.

Forwards JSON or multipart payloads to an n8n workflow webhook and normalizes
every outcome (missing configuration, transport failure, non-2xx status,
malformed body) into a ``WorkflowResponse`` envelope. Exactly one request is
made per call: there are no retries and no caching.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import httpx

from n8n_gateway.models.workflow import FormPayload, WorkflowResponse

logger = logging.getLogger(__name__)

WEBHOOK_NOT_CONFIGURED = (
    "Webhook URL not configured. Set N8N_GATEWAY_WEBHOOK_URL or pass a webhook URL."
)
UNKNOWN_ERROR = "An unknown error occurred"
INVALID_JSON = "Invalid JSON in workflow response"


def http_status_error(status_code: int) -> str:
    """Error message for a non-2xx response."""
    return f"HTTP error: status {status_code}"


def transport_error(exc: Exception) -> str:
    """Error message for a transport-level failure."""
    return str(exc) or UNKNOWN_ERROR


class WorkflowClient:
    """Executes n8n workflows through their webhook endpoints.

    Parameters
    ----------
    default_url:
        Webhook URL used when a call does not pass one. Resolved lazily, so a
        client without a default is valid until a call actually needs it.
    timeout_seconds:
        HTTP timeout per request (default 30).
    """

    def __init__(
        self,
        default_url: str | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._default_url = default_url
        self._timeout_seconds = timeout_seconds

    @property
    def default_url(self) -> str | None:
        return self._default_url

    def resolve_url(self, webhook_url: str | None = None) -> str | None:
        """Return the override URL, falling back to the configured default."""
        return webhook_url or self._default_url

    async def execute_workflow(
        self,
        payload: dict[str, Any],
        webhook_url: str | None = None,
    ) -> WorkflowResponse:
        """POST a JSON payload to the workflow webhook.

        Parameters
        ----------
        payload:
            JSON-serializable mapping sent as the request body.
        webhook_url:
            Optional override for the default webhook URL.

        Returns
        -------
        WorkflowResponse
            ``success=True`` with the parsed response body, or
            ``success=False`` with an error message. Never raises.
        """
        url = self.resolve_url(webhook_url)
        if not url:
            logger.warning("Workflow execution skipped: no webhook URL configured")
            return WorkflowResponse(success=False, error=WEBHOOK_NOT_CONFIGURED)

        try:
            body = json.dumps(payload).encode("utf-8")
        except (TypeError, ValueError) as exc:
            return WorkflowResponse(
                success=False, error=f"Payload is not JSON serializable: {exc}"
            )

        return await self._post(
            url,
            content=body,
            headers={"Content-Type": "application/json"},
        )

    async def execute_workflow_with_files(
        self,
        form: FormPayload,
        webhook_url: str | None = None,
    ) -> WorkflowResponse:
        """POST a multipart form (fields and files) to the workflow webhook.

        The form is handed to httpx as-is; no content type is set here so
        httpx can emit the multipart boundary header itself.
        """
        url = self.resolve_url(webhook_url)
        if not url:
            logger.warning("Workflow execution skipped: no webhook URL configured")
            return WorkflowResponse(success=False, error=WEBHOOK_NOT_CONFIGURED)

        return await self._post(url, data=form.fields, files=form.httpx_files())

    async def _post(self, url: str, **request_kwargs: Any) -> WorkflowResponse:
        started = time.monotonic()
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url, timeout=self._timeout_seconds, **request_kwargs
                )

            if not response.is_success:
                logger.warning(
                    "Workflow webhook returned %d",
                    response.status_code,
                    extra={"webhook_url": url, "status_code": response.status_code},
                )
                return WorkflowResponse(
                    success=False, error=http_status_error(response.status_code)
                )

            result = response.json()

        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning(
                "Workflow execution error: %s",
                exc,
                extra={"webhook_url": url, "error_reason": type(exc).__name__},
            )
            return WorkflowResponse(success=False, error=transport_error(exc))

        except ValueError as exc:
            logger.warning(
                "Workflow webhook returned malformed JSON: %s",
                exc,
                extra={"webhook_url": url},
            )
            return WorkflowResponse(success=False, error=INVALID_JSON)

        logger.info(
            "Workflow executed via %s",
            url,
            extra={
                "webhook_url": url,
                "status_code": response.status_code,
                "duration_ms": round((time.monotonic() - started) * 1000, 1),
            },
        )
        return WorkflowResponse(success=True, data=result)

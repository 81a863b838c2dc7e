"""Workflow endpoints.

- POST /api/v1/workflows/execute: forward a JSON form submission to the webhook
- POST /api/v1/workflows/execute/files: forward a multipart upload to the webhook
- GET  /api/v1/workflows/jobs/{job_id}: poll a long-running job until it finishes

Each endpoint returns the workflow envelope: HTTP 200 when ``success`` is
True, 502 when the workflow call failed.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from n8n_gateway.models.requests import ExecuteWorkflowRequest
from n8n_gateway.models.responses import ApiResponse
from n8n_gateway.models.workflow import FormFile, FormPayload, WorkflowResponse
from n8n_gateway.validators.url_validator import ensure_url_allowed

logger = logging.getLogger(__name__)


def workflow_result(result: WorkflowResponse, meta: dict | None = None) -> JSONResponse:
    """Render a workflow envelope as an HTTP response."""
    return JSONResponse(
        status_code=200 if result.success else 502,
        content=ApiResponse.from_workflow(result, meta=meta).model_dump(mode="json"),
    )


def create_workflows_router(
    *,
    workflow_client: Any = None,
    status_poller: Any = None,
    allow_url_override: bool = True,
    allow_private_targets: bool = False,
) -> APIRouter:
    """Factory that creates the workflows router with injected dependencies."""

    workflows_router = APIRouter(prefix="/api/v1/workflows", tags=["workflows"])

    async def _check(url: str | None) -> None:
        await ensure_url_allowed(
            url,
            allow_override=allow_url_override,
            allow_private=allow_private_targets,
        )

    @workflows_router.post("/execute")
    async def execute(body: ExecuteWorkflowRequest) -> JSONResponse:
        """Send the submitted form data to the workflow as JSON."""
        await _check(body.webhook_url)
        result = await workflow_client.execute_workflow(
            body.data, webhook_url=body.webhook_url
        )
        return workflow_result(result)

    @workflows_router.post("/execute/files")
    async def execute_with_files(
        request: Request,
        webhook_url: str | None = Query(default=None),
    ) -> JSONResponse:
        """Send a multipart submission (fields and files) to the workflow."""
        await _check(webhook_url)

        form = await request.form()
        payload = FormPayload()
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                payload.files.append(
                    FormFile(
                        field=key,
                        filename=value.filename or key,
                        content=await value.read(),
                        content_type=value.content_type or "application/octet-stream",
                    )
                )
            else:
                payload.add_field(key, value)

        logger.info(
            "Forwarding multipart submission with %d field(s) and %d file(s)",
            len(payload.fields),
            len(payload.files),
        )
        result = await workflow_client.execute_workflow_with_files(
            payload, webhook_url=webhook_url
        )
        return workflow_result(result)

    @workflows_router.get("/jobs/{job_id}")
    async def poll_job(
        job_id: str,
        status_url: str | None = Query(default=None),
        interval_ms: int | None = Query(default=None, ge=1),
        max_attempts: int | None = Query(default=None, ge=1, le=1000),
    ) -> JSONResponse:
        """Poll the job's status endpoint until it reaches a terminal status."""
        await _check(status_url)
        result = await status_poller.poll(
            job_id,
            status_url=status_url,
            interval_ms=interval_ms,
            max_attempts=max_attempts,
        )
        return workflow_result(result, meta={"job_id": job_id})

    return workflows_router

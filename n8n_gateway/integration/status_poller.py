"""Status polling for long-running n8n workflows.

A workflow that answers its webhook with a job ID is followed up by GETting
``{status_url}/{job_id}`` on a fixed interval until the reported status is
terminal or the attempt budget runs out.

Any transport error, non-2xx status or malformed body ends the whole poll
immediately; individual attempts are not retried.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Iterable
from urllib.parse import quote

import httpx

from n8n_gateway.integration.webhook import INVALID_JSON, http_status_error, transport_error
from n8n_gateway.models.workflow import JobOutcome, WorkflowResponse

logger = logging.getLogger(__name__)

StatusClassifier = Callable[[Any], JobOutcome]

DEFAULT_SUCCESS_STATUSES = frozenset({"completed", "success"})
DEFAULT_FAILURE_STATUSES = frozenset({"failed", "error"})

STATUS_URL_NOT_CONFIGURED = (
    "Status URL not configured. Set N8N_GATEWAY_STATUS_URL or pass a status URL."
)
WORKFLOW_FAILED = "Workflow execution failed"


def make_status_classifier(
    succeeded: Iterable[str] = DEFAULT_SUCCESS_STATUSES,
    failed: Iterable[str] = DEFAULT_FAILURE_STATUSES,
) -> StatusClassifier:
    """Build a classifier for a backend's status vocabulary.

    Values in neither set (including a missing or non-string status) are pending.
    """
    succeeded_set = frozenset(succeeded)
    failed_set = frozenset(failed)

    def classify(status: Any) -> JobOutcome:
        if not isinstance(status, str):
            return JobOutcome.PENDING
        if status in succeeded_set:
            return JobOutcome.SUCCEEDED
        if status in failed_set:
            return JobOutcome.FAILED
        return JobOutcome.PENDING

    return classify


classify_status: StatusClassifier = make_status_classifier()


def timeout_error(max_attempts: int) -> str:
    return (
        "Polling timeout: workflow did not reach a terminal status "
        f"after {max_attempts} attempts"
    )


class StatusPoller:
    """Polls a job status endpoint until the job finishes.

    Parameters
    ----------
    default_status_url:
        Status endpoint used when ``poll`` is not given one.
    interval_ms:
        Default pause between attempts in milliseconds (default 2000).
    max_attempts:
        Default attempt budget (default 30).
    classifier:
        Maps the body's ``status`` value to a ``JobOutcome``.
    timeout_seconds:
        HTTP timeout per status request (default 30).
    """

    def __init__(
        self,
        default_status_url: str | None = None,
        interval_ms: int = 2000,
        max_attempts: int = 30,
        classifier: StatusClassifier = classify_status,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._default_status_url = default_status_url
        self._interval_ms = interval_ms
        self._max_attempts = max_attempts
        self._classifier = classifier
        self._timeout_seconds = timeout_seconds

    async def poll(
        self,
        job_id: str,
        status_url: str | None = None,
        interval_ms: int | None = None,
        max_attempts: int | None = None,
    ) -> WorkflowResponse:
        """Poll ``{status_url}/{job_id}`` until a terminal status.

        Returns
        -------
        WorkflowResponse
            ``success=True`` with the full status body once the job
            succeeds; ``success=False`` when it fails, when a request fails,
            or when ``max_attempts`` pending answers have been seen.
        """
        base_url = status_url or self._default_status_url
        if not base_url:
            logger.warning("Status polling skipped for job %s: no status URL configured", job_id)
            return WorkflowResponse(success=False, error=STATUS_URL_NOT_CONFIGURED)

        interval = self._interval_ms if interval_ms is None else interval_ms
        budget = self._max_attempts if max_attempts is None else max_attempts
        url = f"{base_url.rstrip('/')}/{quote(job_id, safe='')}"

        attempts = 0
        while attempts < budget:
            try:
                async with httpx.AsyncClient() as client:
                    response = await client.get(url, timeout=self._timeout_seconds)

                if not response.is_success:
                    logger.warning(
                        "Status check for job %s returned %d",
                        job_id,
                        response.status_code,
                        extra={"job_id": job_id, "status_code": response.status_code},
                    )
                    return WorkflowResponse(
                        success=False, error=http_status_error(response.status_code)
                    )

                result = response.json()

            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                logger.warning(
                    "Polling error for job %s: %s",
                    job_id,
                    exc,
                    extra={"job_id": job_id, "attempt": attempts + 1},
                )
                return WorkflowResponse(success=False, error=transport_error(exc))

            except ValueError:
                logger.warning(
                    "Status check for job %s returned malformed JSON",
                    job_id,
                    extra={"job_id": job_id, "attempt": attempts + 1},
                )
                return WorkflowResponse(success=False, error=INVALID_JSON)

            status = result.get("status") if isinstance(result, dict) else None
            outcome = self._classifier(status)

            if outcome is JobOutcome.SUCCEEDED:
                logger.info(
                    "Job %s completed after %d attempt(s)",
                    job_id,
                    attempts + 1,
                    extra={"job_id": job_id, "attempt": attempts + 1},
                )
                return WorkflowResponse(success=True, data=result)

            if outcome is JobOutcome.FAILED:
                error = result.get("error") if isinstance(result, dict) else None
                logger.info(
                    "Job %s reported failure: %s",
                    job_id,
                    error,
                    extra={"job_id": job_id, "attempt": attempts + 1},
                )
                return WorkflowResponse(
                    success=False, error=str(error) if error else WORKFLOW_FAILED
                )

            logger.debug(
                "Job %s still pending (status=%r, attempt %d/%d)",
                job_id,
                status,
                attempts + 1,
                budget,
            )
            await asyncio.sleep(interval / 1000)
            attempts += 1

        logger.warning(
            "Polling timed out for job %s after %d attempts",
            job_id,
            budget,
            extra={"job_id": job_id, "attempt": budget},
        )
        return WorkflowResponse(success=False, error=timeout_error(budget))

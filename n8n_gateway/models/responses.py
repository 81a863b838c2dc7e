"""Generic API response envelope model.

All gateway HTTP responses are wrapped in this envelope for consistency:
{ success: bool, data: T | None, error: str | None, meta: dict | None }
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

from n8n_gateway.models.workflow import WorkflowResponse

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope for all API responses."""

    success: bool
    data: T | None = None
    error: str | None = None
    meta: dict | None = None

    @classmethod
    def from_workflow(
        cls, result: WorkflowResponse, meta: dict | None = None
    ) -> "ApiResponse":
        """Wrap a workflow client result for the HTTP surface."""
        return cls(success=result.success, data=result.data, error=result.error, meta=meta)

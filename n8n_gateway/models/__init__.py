"""Public models for the n8n gateway."""

from n8n_gateway.models.requests import (
    ApiKeyCreateRequest,
    ApiKeyRecord,
    ChatMessage,
    ChatRequest,
    ChatSession,
    ExecuteWorkflowRequest,
)
from n8n_gateway.models.responses import ApiResponse
from n8n_gateway.models.workflow import (
    FormFile,
    FormPayload,
    JobOutcome,
    WorkflowResponse,
    WorkflowStatus,
)

__all__ = [
    "ApiKeyCreateRequest",
    "ApiKeyRecord",
    "ApiResponse",
    "ChatMessage",
    "ChatRequest",
    "ChatSession",
    "ExecuteWorkflowRequest",
    "FormFile",
    "FormPayload",
    "JobOutcome",
    "WorkflowResponse",
    "WorkflowStatus",
]

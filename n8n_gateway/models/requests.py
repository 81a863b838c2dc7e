"""Pydantic request models and in-memory state models for chat sessions and API keys."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from n8n_gateway.models.workflow import WorkflowStatus


class ExecuteWorkflowRequest(BaseModel):
    """Request model for forwarding a JSON form submission to a webhook."""

    data: dict[str, Any] = Field(default_factory=dict)
    webhook_url: str | None = None


class ChatRequest(BaseModel):
    """Request model for a single chat message."""

    message: str = Field(..., min_length=1)
    session_id: str | None = None
    webhook_url: str | None = None


class ApiKeyCreateRequest(BaseModel):
    """Request model for storing a user API key."""

    key_name: str = Field(..., min_length=1, max_length=200)
    key_value: str = Field(..., min_length=1)


class ApiKeyRecord(BaseModel):
    """A stored API key row from the ``user_api_keys`` table."""

    id: str
    user_id: str
    key_name: str
    key_value: str = Field(alias="encrypted_key")
    created_at: datetime

    model_config = {"populate_by_name": True}


@dataclass
class ChatMessage:
    """One entry of a chat transcript."""

    role: str  # "user" or "assistant"
    content: str
    status: WorkflowStatus = WorkflowStatus.SUCCESS
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class ChatSession:
    """In-memory state for a chat conversation."""

    id: str  # UUID, also sent to n8n as sessionId
    messages: list[ChatMessage] = field(default_factory=list)
    status: WorkflowStatus = WorkflowStatus.IDLE
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

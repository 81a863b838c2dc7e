"""Workflow invocation types: the result envelope, job outcomes and form payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class WorkflowResponse(BaseModel, Generic[T]):
    """Uniform result of every webhook call or status poll.

    ``data`` is populated when ``success`` is True, ``error`` otherwise.
    """

    success: bool
    data: T | None = None
    error: str | None = None


class WorkflowStatus(str, Enum):
    """Client-side state of a workflow run."""

    IDLE = "idle"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


class JobOutcome(str, Enum):
    """Classification of a remote job status value."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class FormFile:
    """A single file part of a multipart submission."""

    field: str
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class FormPayload:
    """Multipart form payload: plain fields plus file parts.

    A field sent more than once (multi-select, checkbox group) holds a list
    of its values in submission order; httpx emits one part per value.
    """

    fields: dict[str, str | list[str]] = field(default_factory=dict)
    files: list[FormFile] = field(default_factory=list)

    def add_field(self, name: str, value: str) -> None:
        existing = self.fields.get(name)
        if existing is None:
            self.fields[name] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            self.fields[name] = [existing, value]

    def httpx_files(self) -> list[tuple[str, tuple[str, bytes, str]]]:
        """File parts in the shape ``httpx`` expects for ``files=``."""
        return [
            (f.field, (f.filename, f.content, f.content_type))
            for f in self.files
        ]

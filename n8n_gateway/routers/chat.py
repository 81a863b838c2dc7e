"""Chat endpoints.

- POST   /api/v1/chat: send a message to the chat workflow
- GET    /api/v1/chat/{session_id}: get a session transcript
- DELETE /api/v1/chat/{session_id}: clear a session
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from n8n_gateway.models.requests import ChatRequest, ChatSession
from n8n_gateway.models.responses import ApiResponse
from n8n_gateway.validators.url_validator import ensure_url_allowed


def _serialize_session(session: ChatSession) -> dict:
    return {
        "session_id": session.id,
        "status": session.status.value,
        "messages": [
            {
                "role": m.role,
                "content": m.content,
                "status": m.status.value,
                "created_at": m.created_at.isoformat(),
            }
            for m in session.messages
        ],
        "created_at": session.created_at.isoformat(),
        "updated_at": session.updated_at.isoformat(),
    }


def create_chat_router(
    *,
    chat_service: Any = None,
    allow_url_override: bool = True,
    allow_private_targets: bool = False,
) -> APIRouter:
    """Factory that creates the chat router with injected dependencies."""

    chat_router = APIRouter(prefix="/api/v1/chat", tags=["chat"])

    @chat_router.post("")
    async def send_message(body: ChatRequest) -> JSONResponse:
        """Send one message; the reply is the last transcript entry."""
        await ensure_url_allowed(
            body.webhook_url,
            allow_override=allow_url_override,
            allow_private=allow_private_targets,
        )
        session, result = await chat_service.send_message(
            body.message,
            session_id=body.session_id,
            webhook_url=body.webhook_url,
        )
        reply = session.messages[-1].content if session.messages else None
        return JSONResponse(
            status_code=200 if result.success else 502,
            content=ApiResponse(
                success=result.success,
                data={
                    "session_id": session.id,
                    "reply": reply,
                    "raw": result.data,
                },
                error=result.error,
            ).model_dump(mode="json"),
        )

    @chat_router.get("/{session_id}")
    async def get_session(session_id: str) -> dict:
        """Get the transcript of a chat session."""
        session = chat_service.get_session(session_id)
        return ApiResponse(success=True, data=_serialize_session(session)).model_dump()

    @chat_router.delete("/{session_id}")
    async def clear_session(session_id: str) -> dict:
        """Forget a chat session."""
        chat_service.clear_session(session_id)
        return ApiResponse(success=True, data={"session_id": session_id}).model_dump()

    return chat_router

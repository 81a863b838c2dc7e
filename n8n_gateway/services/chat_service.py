"""Chat sessions on top of an n8n chat workflow.

The ChatService keeps a transcript per session and forwards each user message
to the workflow webhook using the n8n chat-trigger payload convention
(``chatInput`` + ``sessionId``). The workflow owns conversation memory; the
transcript here only backs the chat view.

All state is held in-memory and is lost on restart.
"""

from __future__ import annotations

import json
import logging
from collections import OrderedDict
from datetime import datetime
from typing import Any
from uuid import uuid4

from n8n_gateway.integration.webhook import WorkflowClient
from n8n_gateway.middleware.error_handler import ChatSessionNotFoundError
from n8n_gateway.models.requests import ChatMessage, ChatSession
from n8n_gateway.models.workflow import WorkflowResponse, WorkflowStatus

logger = logging.getLogger(__name__)

# Keys checked, in order, for the assistant's reply text
_REPLY_KEYS = ("output", "text", "response", "message")


def extract_reply(data: Any) -> str:
    """Pull the assistant's reply text out of a workflow response body."""
    if isinstance(data, list):
        if not data:
            return ""
        data = data[0]
    if isinstance(data, str):
        return data
    if isinstance(data, dict):
        for key in _REPLY_KEYS:
            value = data.get(key)
            if isinstance(value, str):
                return value
    return json.dumps(data, default=str)


class ChatService:
    """Manages chat sessions and forwards messages to the chat workflow.

    Parameters
    ----------
    workflow_client:
        Client used to call the chat webhook.
    max_history:
        Messages kept per session; older ones are dropped first.
    max_sessions:
        Sessions kept in memory; the least recently used one is evicted
        when a new session would exceed the cap.
    """

    def __init__(
        self,
        *,
        workflow_client: WorkflowClient,
        max_history: int = 50,
        max_sessions: int = 1000,
    ) -> None:
        self._workflow_client = workflow_client
        self._max_history = max_history
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, ChatSession] = OrderedDict()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def send_message(
        self,
        message: str,
        session_id: str | None = None,
        webhook_url: str | None = None,
    ) -> tuple[ChatSession, WorkflowResponse]:
        """Record a user message, run the workflow and record its reply.

        An unknown or missing ``session_id`` starts a new session (with the
        given ID when one was supplied).
        """
        session = self._get_or_create(session_id)
        self._append(session, ChatMessage(role="user", content=message))
        session.status = WorkflowStatus.PROCESSING

        result = await self._workflow_client.execute_workflow(
            {"chatInput": message, "sessionId": session.id},
            webhook_url=webhook_url,
        )

        if result.success:
            session.status = WorkflowStatus.SUCCESS
            self._append(
                session,
                ChatMessage(role="assistant", content=extract_reply(result.data)),
            )
        else:
            session.status = WorkflowStatus.ERROR
            self._append(
                session,
                ChatMessage(
                    role="assistant",
                    content=result.error or "An error occurred",
                    status=WorkflowStatus.ERROR,
                ),
            )
            logger.warning("Chat workflow failed for session %s: %s", session.id, result.error)

        return session, result

    def get_session(self, session_id: str) -> ChatSession:
        """Return a session or raise ChatSessionNotFoundError."""
        session = self._sessions.get(session_id)
        if session is None:
            raise ChatSessionNotFoundError(f"Chat session '{session_id}' not found")
        return session

    def clear_session(self, session_id: str) -> None:
        """Drop a session and its transcript."""
        if self._sessions.pop(session_id, None) is None:
            raise ChatSessionNotFoundError(f"Chat session '{session_id}' not found")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_or_create(self, session_id: str | None) -> ChatSession:
        if session_id and session_id in self._sessions:
            self._sessions.move_to_end(session_id)
            return self._sessions[session_id]
        while len(self._sessions) >= self._max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info("Evicted chat session %s", evicted_id)
        session = ChatSession(id=session_id or str(uuid4()))
        self._sessions[session.id] = session
        logger.info("Started chat session %s", session.id)
        return session

    def _append(self, session: ChatSession, entry: ChatMessage) -> None:
        session.messages.append(entry)
        if len(session.messages) > self._max_history:
            del session.messages[: len(session.messages) - self._max_history]
        session.updated_at = datetime.utcnow()

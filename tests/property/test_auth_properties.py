"""Property tests for service key authentication and Pydantic validation.

Service key authentication: accept/reject based on key match.
Pydantic validation produces 422 with field errors.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from n8n_gateway.middleware.auth import ServiceKeyAuthMiddleware
from n8n_gateway.middleware.error_handler import register_error_handlers
from n8n_gateway.middleware.request_id import RequestIdMiddleware
from n8n_gateway.models.requests import ApiKeyCreateRequest, ChatRequest


_SERVICE_KEY = "test-service-key-abc123"


def _create_test_app() -> FastAPI:
    """FastAPI app with auth middleware, error handlers, and validated endpoints."""
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/authed")
    async def authed_endpoint() -> JSONResponse:
        return JSONResponse(
            status_code=200,
            content={"success": True, "data": "ok", "error": None, "meta": None},
        )

    @app.get("/health")
    async def health() -> JSONResponse:
        return JSONResponse(status_code=200, content={"success": True})

    @app.post("/api/v1/chat")
    async def chat_endpoint(body: ChatRequest) -> JSONResponse:
        return JSONResponse(status_code=200, content={"success": True})

    @app.post("/api/v1/keys")
    async def keys_endpoint(body: ApiKeyCreateRequest) -> JSONResponse:
        return JSONResponse(status_code=201, content={"success": True})

    app.add_middleware(ServiceKeyAuthMiddleware, service_key=_SERVICE_KEY)
    app.add_middleware(RequestIdMiddleware)
    return app


_app = _create_test_app()
_client = TestClient(_app, raise_server_exceptions=False)


random_keys = st.text(min_size=1, max_size=200, alphabet=st.characters(codec="ascii", categories=("L", "N", "P")))


def test_correct_key_is_accepted() -> None:
    resp = _client.get("/authed", headers={"X-Service-Key": _SERVICE_KEY})
    assert resp.status_code == 200
    assert resp.json()["success"] is True


@settings(max_examples=100)
@given(wrong_key=random_keys)
def test_wrong_key_is_rejected(wrong_key: str) -> None:
    assume(wrong_key != _SERVICE_KEY)
    resp = _client.get("/authed", headers={"X-Service-Key": wrong_key})
    assert resp.status_code == 401
    body = resp.json()
    assert body["success"] is False
    assert body["error"] is not None


def test_missing_key_is_rejected() -> None:
    resp = _client.get("/authed")
    assert resp.status_code == 401
    assert resp.json()["success"] is False


def test_probe_is_public() -> None:
    assert _client.get("/health").status_code == 200


invalid_payloads = st.one_of(
    st.just(("/api/v1/chat", {})),
    st.just(("/api/v1/chat", {"message": ""})),
    st.integers().map(lambda n: ("/api/v1/chat", {"message": "hi", "session_id": n})),
    st.just(("/api/v1/keys", {})),
    st.just(("/api/v1/keys", {"key_name": "OpenAI"})),
    st.just(("/api/v1/keys", {"key_value": "sk-1"})),
    st.just(("/api/v1/keys", {"key_name": "", "key_value": "sk-1"})),
)


@settings(max_examples=50)
@given(case=invalid_payloads)
def test_invalid_payload_returns_422_with_field_errors(case: tuple[str, dict]) -> None:
    path, payload = case
    resp = _client.post(path, json=payload, headers={"X-Service-Key": _SERVICE_KEY})
    assert resp.status_code == 422

    body = resp.json()
    assert body["success"] is False
    assert body["error"] is not None
    assert isinstance(body["meta"]["fields"], list)
    assert len(body["meta"]["fields"]) > 0
    for field_err in body["meta"]["fields"]:
        assert "field" in field_err
        assert "message" in field_err
        assert "type" in field_err

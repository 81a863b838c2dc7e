"""User API key endpoints.

- GET    /api/v1/keys: list the caller's keys (masked unless ?reveal=true)
- POST   /api/v1/keys: store a key
- DELETE /api/v1/keys/{key_id}: delete a key

The caller is identified by the ``X-User-ID`` header, set by the identity
provider in front of the gateway.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Header, Query
from fastapi.responses import JSONResponse

from n8n_gateway.integration.api_key_store import mask_key
from n8n_gateway.middleware.error_handler import KeyStoreNotConfiguredError, MissingUserError
from n8n_gateway.models.requests import ApiKeyCreateRequest, ApiKeyRecord
from n8n_gateway.models.responses import ApiResponse


def _serialize_key(record: ApiKeyRecord, reveal: bool = False) -> dict:
    return {
        "id": record.id,
        "key_name": record.key_name,
        "key_value": record.key_value if reveal else mask_key(record.key_value),
        "created_at": record.created_at.isoformat(),
    }


def create_keys_router(*, api_key_store: Any = None) -> APIRouter:
    """Factory that creates the API keys router with injected dependencies.

    ``api_key_store`` may be None when Supabase is not configured; every
    endpoint then answers 503.
    """

    keys_router = APIRouter(prefix="/api/v1/keys", tags=["keys"])

    def _store() -> Any:
        if api_key_store is None:
            raise KeyStoreNotConfiguredError()
        return api_key_store

    def _user(user_id: str | None) -> str:
        if not user_id:
            raise MissingUserError()
        return user_id

    @keys_router.get("")
    async def list_keys(
        reveal: bool = Query(default=False),
        x_user_id: str | None = Header(default=None),
    ) -> dict:
        """List the caller's API keys, newest first."""
        records = await _store().list_keys(_user(x_user_id))
        return ApiResponse(
            success=True,
            data={
                "keys": [_serialize_key(r, reveal=reveal) for r in records],
                "count": len(records),
            },
        ).model_dump()

    @keys_router.post("")
    async def add_key(
        body: ApiKeyCreateRequest,
        x_user_id: str | None = Header(default=None),
    ) -> JSONResponse:
        """Store a new API key. Returns 201 with the masked record."""
        record = await _store().add_key(_user(x_user_id), body.key_name, body.key_value)
        return JSONResponse(
            status_code=201,
            content=ApiResponse(success=True, data=_serialize_key(record)).model_dump(),
        )

    @keys_router.delete("/{key_id}")
    async def delete_key(
        key_id: str,
        x_user_id: str | None = Header(default=None),
    ) -> dict:
        """Delete one of the caller's API keys."""
        await _store().delete_key(_user(x_user_id), key_id)
        return ApiResponse(success=True, data={"id": key_id}).model_dump()

    return keys_router

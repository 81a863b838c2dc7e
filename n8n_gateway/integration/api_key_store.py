"""User API key storage backed by a Supabase (PostgREST) table.

Rows live in ``user_api_keys`` (id, user_id, key_name, encrypted_key,
created_at). Requests authenticate with the project key in both the
``apikey`` and ``Authorization: Bearer`` headers, as PostgREST expects.

SECURITY: Never logs key values.
"""

from __future__ import annotations

import logging

import httpx

from n8n_gateway.middleware.error_handler import ApiKeyNotFoundError, KeyStoreError
from n8n_gateway.models.requests import ApiKeyRecord

logger = logging.getLogger(__name__)

_MASK_CHAR = "•"
_MASK_MAX = 20


def mask_key(value: str) -> str:
    """Hide a key value, keeping a hint of its length (capped at 20)."""
    return _MASK_CHAR * min(len(value), _MASK_MAX)


class ApiKeyStore:
    """PostgREST client for per-user API keys.

    Parameters
    ----------
    supabase_url:
        Project URL (e.g. "https://abc.supabase.co").
    supabase_key:
        Project API key sent as ``apikey`` and bearer token.
    table:
        Table name (default "user_api_keys").
    timeout_seconds:
        HTTP timeout per request (default 10).
    """

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        table: str = "user_api_keys",
        timeout_seconds: float = 10.0,
    ) -> None:
        self._table_url = f"{supabase_url.rstrip('/')}/rest/v1/{table}"
        self._supabase_key = supabase_key
        self._timeout_seconds = timeout_seconds

    def _headers(self, **extra: str) -> dict[str, str]:
        return {
            "apikey": self._supabase_key,
            "Authorization": f"Bearer {self._supabase_key}",
            **extra,
        }

    async def list_keys(self, user_id: str) -> list[ApiKeyRecord]:
        """Return the user's keys, newest first."""
        rows = await self._request(
            "GET",
            params={
                "select": "*",
                "user_id": f"eq.{user_id}",
                "order": "created_at.desc",
            },
        )
        return [ApiKeyRecord.model_validate(row) for row in rows]

    async def add_key(self, user_id: str, key_name: str, key_value: str) -> ApiKeyRecord:
        """Insert a key and return the stored row."""
        rows = await self._request(
            "POST",
            json={"user_id": user_id, "key_name": key_name, "encrypted_key": key_value},
            headers=self._headers(Prefer="return=representation"),
        )
        if not rows:
            raise KeyStoreError("API key store returned no row for insert")
        logger.info("Stored API key %r for user_id=%s", key_name, user_id)
        return ApiKeyRecord.model_validate(rows[0])

    async def delete_key(self, user_id: str, key_id: str) -> None:
        """Delete one of the user's keys.

        Raises
        ------
        ApiKeyNotFoundError
            If no row matched both the key ID and the owner.
        """
        rows = await self._request(
            "DELETE",
            params={"id": f"eq.{key_id}", "user_id": f"eq.{user_id}"},
            headers=self._headers(Prefer="return=representation"),
        )
        if not rows:
            raise ApiKeyNotFoundError(f"API key '{key_id}' not found")
        logger.info("Deleted API key id=%s for user_id=%s", key_id, user_id)

    async def _request(
        self,
        method: str,
        *,
        params: dict[str, str] | None = None,
        json: dict | None = None,
        headers: dict[str, str] | None = None,
    ) -> list[dict]:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.request(
                    method,
                    self._table_url,
                    params=params,
                    json=json,
                    headers=headers or self._headers(),
                    timeout=self._timeout_seconds,
                )
            response.raise_for_status()
            data = response.json()

        except httpx.HTTPStatusError as exc:
            logger.warning(
                "API key store returned status %d for %s",
                exc.response.status_code,
                method,
            )
            raise KeyStoreError(
                f"API key store returned status {exc.response.status_code}"
            ) from exc

        except httpx.HTTPError as exc:
            logger.warning("API key store unreachable for %s: %s", method, exc)
            raise KeyStoreError("API key store unreachable") from exc

        except ValueError as exc:
            raise KeyStoreError("API key store returned malformed JSON") from exc

        if not isinstance(data, list):
            raise KeyStoreError("API key store returned an unexpected payload")
        return data

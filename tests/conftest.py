"""Shared test fixtures and hypothesis strategies for the gateway test suite."""

from __future__ import annotations

import json
import os

import httpx
import pytest
from hypothesis import settings as hypothesis_settings, strategies as st

from n8n_gateway.config.settings import GatewaySettings
from n8n_gateway.integration.status_poller import StatusPoller
from n8n_gateway.integration.webhook import WorkflowClient


WEBHOOK_URL = "https://n8n.example.com/webhook/form"
STATUS_URL = "https://n8n.example.com/webhook/status"

# Each example builds real httpx.AsyncClient instances, whose SSL setup alone
# can exceed hypothesis' default 200ms per-example deadline on slow machines.
hypothesis_settings.register_profile("gateway", deadline=None)
hypothesis_settings.load_profile("gateway")


# ---------------------------------------------------------------------------
# Ensure required env vars are set for GatewaySettings in tests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _set_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set minimal env vars so GatewaySettings can be instantiated in tests."""
    defaults = {
        "N8N_GATEWAY_SERVICE_KEY": "test-key",
    }
    for key, value in defaults.items():
        if key not in os.environ:
            monkeypatch.setenv(key, value)


# ---------------------------------------------------------------------------
# Settings fixture
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> GatewaySettings:
    """Test settings with safe defaults."""
    return GatewaySettings(
        service_key="test-key",
        webhook_url=WEBHOOK_URL,
        status_url=STATUS_URL,
        poll_interval_ms=10,
        poll_max_attempts=5,
    )


# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def workflow_client() -> WorkflowClient:
    return WorkflowClient(default_url=WEBHOOK_URL, timeout_seconds=5.0)


@pytest.fixture
def unconfigured_client() -> WorkflowClient:
    return WorkflowClient()


@pytest.fixture
def status_poller() -> StatusPoller:
    return StatusPoller(default_status_url=STATUS_URL, interval_ms=10, max_attempts=30)


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------

def json_response(status_code: int, body: object, method: str = "POST") -> httpx.Response:
    """Build an httpx.Response carrying a JSON body."""
    # Encode explicitly: httpx treats ``json=None`` as "no body", not ``null``.
    return httpx.Response(
        status_code,
        content=json.dumps(body).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        request=httpx.Request(method, WEBHOOK_URL),
    )


def raw_response(status_code: int, content: bytes, method: str = "POST") -> httpx.Response:
    """Build an httpx.Response with an arbitrary body."""
    return httpx.Response(
        status_code,
        content=content,
        request=httpx.Request(method, WEBHOOK_URL),
    )


# ---------------------------------------------------------------------------
# Hypothesis strategies (reusable across property tests)
# ---------------------------------------------------------------------------

json_scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-(10**9), max_value=10**9),
    st.text(max_size=30),
)

# JSON-compatible bodies as n8n would return them
json_bodies = st.recursive(
    json_scalars,
    lambda children: st.one_of(
        st.lists(children, max_size=4),
        st.dictionaries(st.text(min_size=1, max_size=10), children, max_size=4),
    ),
    max_leaves=10,
)

form_payloads = st.dictionaries(
    keys=st.sampled_from(
        ["textInput", "selectOption", "numberInput", "textareaInput", "dateInput", "checkboxInput"]
    ),
    values=json_scalars,
    max_size=6,
)

non_2xx_statuses = st.sampled_from([400, 401, 403, 404, 409, 422, 429, 500, 502, 503, 504])

job_ids = st.uuids().map(str)

pending_statuses = st.sampled_from(["processing", "running", "queued", "waiting", "new"])

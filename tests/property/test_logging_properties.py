"""Property tests for structured logging.

Every entry is valid JSON with request_id, level and timestamp; workflow
context fields pass through; secrets never reach the output.
"""

from __future__ import annotations

import json
import logging

from hypothesis import given, settings, strategies as st

from n8n_gateway.logging_config import JsonFormatter


# --- Strategies ---

request_ids = st.uuids().map(str)
messages = st.text(min_size=1, max_size=100, alphabet="abcdefghijklmnopqrstuvwxyz0123456789 ._-/")
levels = st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
webhook_urls = st.from_regex(r"https://[a-z]{3,10}\.[a-z]{2,4}/webhook/[a-z0-9]{1,10}", fullmatch=True)
job_ids = st.uuids().map(str)
durations = st.floats(min_value=0.1, max_value=60000.0, allow_nan=False, allow_infinity=False)
status_codes = st.integers(min_value=100, max_value=599)


def _make_record(
    message: str,
    level: str = "INFO",
    request_id: str | None = None,
    **extra: object,
) -> logging.LogRecord:
    """Create a LogRecord with optional extra attributes."""
    record = logging.LogRecord(
        name="test",
        level=getattr(logging, level),
        pathname="test.py",
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    if request_id is not None:
        record.request_id = request_id  # type: ignore[attr-defined]
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@settings(max_examples=100)
@given(message=messages, level=levels, request_id=request_ids)
def test_structured_log_format_basic(message: str, level: str, request_id: str) -> None:
    formatter = JsonFormatter()
    record = _make_record(message, level=level, request_id=request_id)
    parsed = json.loads(formatter.format(record))

    assert "timestamp" in parsed
    assert parsed["level"] == level
    assert parsed["request_id"] == request_id


@settings(max_examples=100)
@given(
    message=messages,
    webhook_url=webhook_urls,
    status_code=status_codes,
    duration_ms=durations,
)
def test_webhook_call_fields(
    message: str,
    webhook_url: str,
    status_code: int,
    duration_ms: float,
) -> None:
    formatter = JsonFormatter()
    record = _make_record(
        message,
        webhook_url=webhook_url,
        status_code=status_code,
        duration_ms=duration_ms,
    )
    parsed = json.loads(formatter.format(record))

    assert parsed["webhook_url"] == webhook_url
    assert parsed["status_code"] == status_code
    assert parsed["duration_ms"] == duration_ms


@settings(max_examples=100)
@given(
    message=messages,
    job_id=job_ids,
    attempt=st.integers(min_value=1, max_value=1000),
    error_reason=messages,
)
def test_poll_fields(message: str, job_id: str, attempt: int, error_reason: str) -> None:
    formatter = JsonFormatter()
    record = _make_record(
        message, level="WARNING", job_id=job_id, attempt=attempt, error_reason=error_reason
    )
    parsed = json.loads(formatter.format(record))

    assert parsed["job_id"] == job_id
    assert parsed["attempt"] == attempt
    assert "error_reason" in parsed


@settings(max_examples=100)
@given(
    secret_value=st.text(min_size=8, max_size=32, alphabet="abcdefghijklmnopqrstuvwxyz0123456789"),
    prefix=st.sampled_from([
        "service_key=",
        "api_key=",
        "apikey: ",
        "secret=",
        "password=",
        "token=",
        "encrypted_key=",
        "Service-Key: ",
    ]),
)
def test_no_secrets_in_logs(secret_value: str, prefix: str) -> None:
    formatter = JsonFormatter()

    tainted_message = f"Request failed with {prefix}{secret_value} in header"
    record = _make_record(tainted_message, level="ERROR", request_id="test-id")
    parsed = json.loads(formatter.format(record))

    assert secret_value not in parsed["message"]
    assert "[REDACTED]" in parsed["message"]


@settings(max_examples=50)
@given(webhook_url=webhook_urls, token=st.text(min_size=1, max_size=20, alphabet="abcdef0123456789"))
def test_webhook_url_query_is_dropped(webhook_url: str, token: str) -> None:
    record = _make_record("call", webhook_url=f"{webhook_url}?token={token}#frag")
    parsed = json.loads(JsonFormatter().format(record))

    assert parsed["webhook_url"] == webhook_url

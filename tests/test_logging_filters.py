"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from app.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    hash_identifier,
    set_request_id,
)


@pytest.fixture
def capture_logger():
    """Logger writing JSON lines through the redaction filter into a buffer."""

    logger = logging.getLogger("test_redaction")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    yield logger, stream

    logger.handlers.clear()
    clear_request_id()


def test_sensitive_filter_redacts_credentials(capture_logger):
    logger, stream = capture_logger

    logger.info(
        "auth_event",
        extra={
            "api_key": "staff-secret-123",
            "x-api-key": "another-secret",
            "loginPassword": "hunter2",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()
    assert "staff-secret-123" not in output
    assert "another-secret" not in output
    assert "hunter2" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_sensitive_filter_redacts_participant_secrets_in_nested_documents(capture_logger):
    logger, stream = capture_logger

    logger.info(
        "participant_event",
        extra={
            "participant": {
                "participantId": "HO-001",
                "wifiCredentials": {"ssid": "hack-3", "password": "wifi-pass"},
                "loginPassword": "s3cret",
            },
            "headers": [{"cookie": "hackoverflow_session=abc"}],
        },
    )

    payload = json.loads(stream.getvalue())
    assert payload["participant"]["participantId"] == "HO-001"
    assert payload["participant"]["wifiCredentials"] == "[REDACTED]"
    assert payload["participant"]["loginPassword"] == "[REDACTED]"
    assert payload["headers"][0]["cookie"] == "[REDACTED]"


def test_sensitive_filter_allows_safe_fields(capture_logger):
    logger, stream = capture_logger

    logger.info(
        "safe_event",
        extra={
            "route": "/v1/checkin",
            "status": 200,
            "duration_ms": 150.5,
        },
    )

    payload = json.loads(stream.getvalue())
    assert payload["message"] == "safe_event"
    assert payload["route"] == "/v1/checkin"
    assert payload["status"] == 200
    assert "[REDACTED]" not in stream.getvalue()


def test_request_id_from_context_is_attached(capture_logger):
    logger, stream = capture_logger
    set_request_id("req-123")

    logger.info("with_context")

    assert json.loads(stream.getvalue())["request_id"] == "req-123"


def test_exceptions_are_serialized(capture_logger):
    logger, stream = capture_logger

    try:
        raise RuntimeError("cleanup exploded")
    except RuntimeError:
        logger.exception("rate_limit.cleanup_failed")

    payload = json.loads(stream.getvalue())
    assert payload["level"] == "error"
    assert "cleanup exploded" in payload["exc_info"]


def test_hash_identifier_is_stable_and_short():
    digest = hash_identifier("203.0.113.7")

    assert digest == hash_identifier("203.0.113.7")
    assert digest != hash_identifier("203.0.113.8")
    assert len(digest) == 16
    assert "203.0.113.7" not in digest

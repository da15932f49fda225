"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before anything imports ``app.core.config`` so the
settings object can be built without a real deployment environment.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGODB_DB_NAME", "hackoverflow_test")
os.environ.setdefault("SESSION_SECRET", "test-session-secret-with-at-least-32-chars")
os.environ.setdefault("APP_STAFF_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_STAFF_API_KEYS", "staff-key-123,staff-key-456")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timezone
from typing import Any
from unittest.mock import MagicMock

import pytest

from app.core.rate_limit import shutdown_rate_limiters


class FakeClock:
    """Deterministic millisecond clock for limiter tests."""

    def __init__(self, start: int = 0) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture(autouse=True)
def _fresh_rate_limiters():
    """Give every test empty limiters and stop their cleanup threads afterwards."""
    shutdown_rate_limiters()
    yield
    shutdown_rate_limiters()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def staff_headers() -> dict[str, str]:
    return {"X-API-Key": "staff-key-123"}


def make_participant_document(**overrides: Any) -> dict[str, Any]:
    """Build a participant document as MongoDB would return it."""
    document: dict[str, Any] = {
        "_id": "65f000000000000000000001",
        "participantId": "HO-001",
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "+44 1234",
        "role": "Developer",
        "teamName": "Analytical Engines",
        "institute": "University of London",
        "labAllotted": "Lab 3",
        "wifiCredentials": {"ssid": "hack-3", "password": "wifi-pass"},
        "collegeCheckIn": {"status": False},
        "labCheckIn": {"status": False},
        "loginPassword": "s3cret",
        "createdAt": datetime(2026, 1, 10, 9, 0, tzinfo=timezone.utc),
    }
    document.update(overrides)
    return document


@pytest.fixture
def participant_document() -> dict[str, Any]:
    return make_participant_document()


@pytest.fixture
def mock_collection() -> MagicMock:
    collection = MagicMock(name="participants_collection")
    collection.name = "participants"
    return collection


@pytest.fixture
def participant_factory():
    return make_participant_document

"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import (
    AppError,
    AuthenticationAppError,
    DatabaseAppError,
    NotFoundAppError,
    RateLimitedAppError,
    ValidationAppError,
)
from app.core.exception_handlers import setup_exception_handlers, status_code_for


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers)


@pytest.mark.parametrize(
    ("error", "expected_status"),
    [
        (ValidationAppError(code="v", message="v"), 400),
        (AuthenticationAppError(code="a", message="a"), 403),
        (NotFoundAppError(code="n", message="n"), 404),
        (RateLimitedAppError(code="r", message="r"), 429),
        (DatabaseAppError(code="d", message="d"), 503),
        (AppError(code="x", message="x"), 400),
    ],
)
def test_status_code_mapping(error: AppError, expected_status: int) -> None:
    assert status_code_for(error) == expected_status


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_validation_error_includes_details(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation")
        async def test_endpoint():
            raise ValidationAppError(
                code="validation_error",
                message="Invalid email address",
                details={"context": {"field": "email"}},
            )

        response = client.get("/test-validation")

        assert response.status_code == 400
        data = response.json()
        assert data["error"]["code"] == "validation_error"
        assert data["error"]["message"] == "Invalid email address"
        assert data["error"]["details"]["context"]["field"] == "email"
        assert "request_id" in data["error"]

    def test_not_found_returns_404(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-missing")
        async def test_endpoint():
            raise NotFoundAppError(code="participant_not_found", message="Participant not found")

        response = client.get("/test-missing")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "participant_not_found"
        assert "details" not in response.json()["error"]

    def test_database_error_returns_503(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-db")
        async def test_endpoint():
            raise DatabaseAppError(code="db_error", message="Database error. Please try again.")

        response = client.get("/test-db")

        assert response.status_code == 503
        assert response.json()["error"]["message"] == "Database error. Please try again."

    def test_rate_limited_sets_retry_and_limit_headers(
        self, client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.get("/test-limited")
        async def test_endpoint():
            raise RateLimitedAppError(
                code="rate_limited",
                message="Rate limit exceeded. Please try again in 60 seconds.",
                details={"limit": 10, "remaining": 0, "reset_time": 123456, "retry_after": 60},
            )

        with patch("app.core.exception_handlers.settings") as mock_settings:
            mock_settings.app.rate_limit_include_headers = True
            response = client.get("/test-limited")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
        assert response.headers["X-RateLimit-Limit"] == "10"
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert response.headers["X-RateLimit-Reset"] == "123456"
        assert response.json()["error"]["details"]["retry_after"] == 60

    def test_rate_limited_headers_can_be_disabled(
        self, client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.get("/test-limited-quiet")
        async def test_endpoint():
            raise RateLimitedAppError(
                code="rate_limited",
                message="slow down",
                details={"limit": 10, "remaining": 0, "reset_time": 1, "retry_after": 5},
            )

        with patch("app.core.exception_handlers.settings") as mock_settings:
            mock_settings.app.rate_limit_include_headers = False
            response = client.get("/test-limited-quiet")

        assert response.headers["Retry-After"] == "5"
        assert "X-RateLimit-Limit" not in response.headers


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_general_exception_handler_hides_internals(self):
        from app.core.exception_handlers import general_exception_handler

        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = RuntimeError("ServerSelectionTimeoutError: localhost:27017")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data["error"]["code"] == "internal_server_error"
        assert "27017" not in data["error"]["message"]
        assert "RuntimeError" not in bytes(response.body).decode()
        assert "request_id" in data["error"]

    def test_unexpected_exception_returns_500(self, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-boom")
        async def test_endpoint():
            raise RuntimeError("boom")

        response = TestClient(app_with_handlers, raise_server_exceptions=False).get("/test-boom")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "internal_server_error"

    def test_setup_registers_both_handlers(self, app_with_handlers: FastAPI):
        assert AppError in app_with_handlers.exception_handlers
        assert Exception in app_with_handlers.exception_handlers

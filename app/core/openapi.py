"""OpenAPI customization utilities.

Enriches the generated schema with:
- Tags metadata
- Two security schemes: staff ``X-API-Key`` and the participant session cookie
- Per-operation security requirements derived from the route prefix

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from app.core.config import settings

_TAGS = [
    {"name": "Auth", "description": "Participant login, logout and session state."},
    {"name": "Participants", "description": "Participant registry lookups and dashboard."},
    {"name": "Check-in", "description": "Staff check-in operations."},
    {"name": "Database", "description": "MongoDB connectivity checks."},
    {"name": "Health", "description": "Liveness checks."},
]


def _security_for(path: str) -> list[dict[str, list]]:
    if path.endswith("/health") and not path.startswith("/v1/database"):
        return []
    if path.startswith("/v1/auth"):
        return []
    if path.endswith("/dashboard"):
        return [{"SessionCookie": []}]
    return [{"StaffApiKey": []}]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and security metadata."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        security_schemes = schema.setdefault("components", {}).setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "StaffApiKey",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-API-Key",
                "description": "Staff API key for check-in and registry endpoints.",
            },
        )
        security_schemes.setdefault(
            "SessionCookie",
            {
                "type": "apiKey",
                "in": "cookie",
                "name": settings.session.cookie_name,
                "description": "Signed session cookie set by POST /v1/auth/login.",
            },
        )

        tags = schema.setdefault("tags", [])
        existing = {t.get("name") for t in tags}
        tags.extend(tag for tag in _TAGS if tag["name"] not in existing)

        for path, methods in schema.get("paths", {}).items():
            security = _security_for(path)
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj["security"] = security

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]

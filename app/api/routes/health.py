from __future__ import annotations

from fastapi import APIRouter

from app.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe.

    Does not touch MongoDB (use ``/v1/database/health`` for that), so load
    balancers keep routing to the process while the database is degraded.

    Returns:
        dict: ``{"status": "ok", "environment": <APP_ENV>}``.
    """

    return {"status": "ok", "environment": settings.app_env}

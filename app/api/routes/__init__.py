from __future__ import annotations

from app.api.routes.auth import router as auth_router
from app.api.routes.checkin import router as checkin_router
from app.api.routes.database import router as database_router
from app.api.routes.health import router as health_router
from app.api.routes.participants import router as participants_router

__all__ = [
    "auth_router",
    "checkin_router",
    "database_router",
    "health_router",
    "participants_router",
]

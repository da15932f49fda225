"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers and
shutdown hooks) so tests can build isolated instances.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.adapters.mongodb.client import close_mongo_client
from app.api.routes import (
    auth_router,
    checkin_router,
    database_router,
    health_router,
    participants_router,
)
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import shutdown_rate_limiters
from app.core.session import add_session_middleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Release process-wide resources on shutdown.

    Rate limiters and the MongoDB client are created lazily on first use, so
    startup has nothing to open.
    """
    logger.info("app.startup", extra={"app_env": settings.app_env})
    try:
        yield
    finally:
        shutdown_rate_limiters()
        close_mongo_client()
        logger.info("app.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Hackathon Check-in API",
        description=(
            "Participant check-in service for a hackathon event. Participants log "
            "in with their ID and password to view their dashboard; staff check "
            "participants in at the college gate and at their lab. Login, check-in "
            "and database endpoints are rate limited per client."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=lifespan,
    )

    # Middleware (last added runs first: request id wraps the session layer)
    add_session_middleware(app, settings.session)
    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(auth_router, prefix="/v1")
    app.include_router(participants_router, prefix="/v1")
    app.include_router(checkin_router, prefix="/v1")
    app.include_router(database_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app

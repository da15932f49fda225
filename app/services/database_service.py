"""Database connectivity checks used by staff status screens."""

from __future__ import annotations

import logging
import time

from pymongo.database import Database
from pymongo.errors import PyMongoError

from app.core.errors import DatabaseAppError
from app.schemas.database import ConnectionStatusResponse, DatabaseHealthResponse

logger = logging.getLogger(__name__)


def _connection_failed(operation: str, exc: PyMongoError) -> DatabaseAppError:
    logger.error(
        "database.check_failed",
        extra={"operation": operation, "error_type": type(exc).__name__},
    )
    return DatabaseAppError(
        code="db_error",
        message="Database connection failed",
        details={"context": {"operation": operation}},
    )


def get_connection_status(database: Database, participants_collection: str) -> ConnectionStatusResponse:
    """List collections and count participants to prove the connection works.

    Raises:
        DatabaseAppError: If MongoDB cannot be reached.
    """
    try:
        collections = database.list_collection_names()
        participant_count = database[participants_collection].count_documents({})
    except PyMongoError as exc:
        raise _connection_failed("connection_status", exc) from exc

    return ConnectionStatusResponse(
        message="Database connected successfully",
        database=database.name,
        collections=sorted(collections),
        participant_count=participant_count,
    )


def get_database_health(database: Database) -> DatabaseHealthResponse:
    """Ping MongoDB and report the round-trip latency.

    Raises:
        DatabaseAppError: If the ping fails.
    """
    start = time.perf_counter()
    try:
        database.command("ping")
    except PyMongoError as exc:
        raise _connection_failed("ping", exc) from exc

    latency_ms = round((time.perf_counter() - start) * 1000, 2)
    return DatabaseHealthResponse(healthy=True, latency_ms=latency_ms)

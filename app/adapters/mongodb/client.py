"""Process-wide MongoDB client.

One ``MongoClient`` (with its own connection pool) is shared by the whole
process. It is created lazily on first use, so importing the app never opens
a connection, and closed in the application lifespan on shutdown.
"""

from __future__ import annotations

import logging
import threading

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from app.core.config import MongoSettings, settings
from app.core.errors import DatabaseAppError

logger = logging.getLogger(__name__)

_client: MongoClient | None = None
_client_lock = threading.Lock()


def create_mongo_client(mongo_settings: MongoSettings | None = None) -> MongoClient:
    """Build a MongoClient configured from settings.

    Args:
        mongo_settings: Optional override; defaults to global settings.

    Returns:
        MongoClient: Unconnected client (pymongo connects on first operation).

    Raises:
        DatabaseAppError: If the URI or options are invalid.
    """
    cfg = mongo_settings or settings.mongo

    try:
        return MongoClient(
            cfg.uri,
            maxPoolSize=cfg.max_pool_size,
            minPoolSize=cfg.min_pool_size,
            maxIdleTimeMS=cfg.max_idle_time_ms,
            connectTimeoutMS=cfg.connect_timeout_ms,
            socketTimeoutMS=cfg.socket_timeout_ms,
            tz_aware=True,
            appname="hackathon-checkin-api",
        )
    except PyMongoError as exc:
        logger.error(
            "mongodb.client_config_invalid",
            extra={"error_type": type(exc).__name__},
        )
        raise DatabaseAppError(
            code="db_config_invalid",
            message="MongoDB client configuration is invalid",
            details={"hint": "Check MONGODB_URI and MONGODB_* pool settings"},
        ) from exc


def get_mongo_client() -> MongoClient:
    """Return the shared client, creating it on first call."""
    global _client

    with _client_lock:
        if _client is None:
            _client = create_mongo_client()
            logger.info(
                "mongodb.client_created",
                extra={
                    "db_name": settings.mongo.db_name,
                    "max_pool_size": settings.mongo.max_pool_size,
                },
            )
        return _client


def get_database_name() -> str:
    return settings.mongo.db_name


def get_database() -> Database:
    """Return the configured database handle on the shared client."""
    return get_mongo_client()[get_database_name()]


def close_mongo_client() -> None:
    """Close the shared client if one was created."""
    global _client

    with _client_lock:
        client, _client = _client, None

    if client is not None:
        client.close()
        logger.info("mongodb.client_closed")

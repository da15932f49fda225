"""MongoDB adapter for the participant registry (pymongo)."""

from app.adapters.mongodb.client import (
    close_mongo_client,
    get_database,
    get_database_name,
    get_mongo_client,
)
from app.adapters.mongodb.participant_repository import ParticipantRepository

__all__ = [
    "ParticipantRepository",
    "close_mongo_client",
    "get_database",
    "get_database_name",
    "get_mongo_client",
]

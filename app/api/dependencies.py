"""FastAPI dependencies wiring routes to MongoDB-backed services.

Tests replace these through ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from pymongo.database import Database

from app.adapters.mongodb.client import get_database
from app.adapters.mongodb.participant_repository import ParticipantRepository
from app.core.config import settings
from app.services.checkin_service import CheckInService


def get_mongo_database() -> Database:
    return get_database()


def get_participant_repository(
    database: Annotated[Database, Depends(get_mongo_database)],
) -> ParticipantRepository:
    return ParticipantRepository(database[settings.mongo.participants_collection])


def get_checkin_service(
    repository: Annotated[ParticipantRepository, Depends(get_participant_repository)],
) -> CheckInService:
    return CheckInService(repository)


DatabaseDep = Annotated[Database, Depends(get_mongo_database)]
RepositoryDep = Annotated[ParticipantRepository, Depends(get_participant_repository)]
CheckInServiceDep = Annotated[CheckInService, Depends(get_checkin_service)]

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.dependencies import DatabaseDep
from app.core.auth import verify_staff_api_key
from app.core.config import settings
from app.core.rate_limit import enforce_database_rate_limit
from app.schemas.database import ConnectionStatusResponse, DatabaseHealthResponse
from app.services.database_service import get_connection_status, get_database_health

router = APIRouter(
    prefix="/database",
    tags=["Database"],
    dependencies=[Depends(enforce_database_rate_limit), Depends(verify_staff_api_key)],
)


@router.get("/status", response_model=ConnectionStatusResponse)
def database_status(database: DatabaseDep) -> ConnectionStatusResponse:
    """Collections and participant count of the configured database."""
    return get_connection_status(database, settings.mongo.participants_collection)


@router.get("/health", response_model=DatabaseHealthResponse)
def database_health(database: DatabaseDep) -> DatabaseHealthResponse:
    return get_database_health(database)

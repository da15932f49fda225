"""Pydantic schemas for database status endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ConnectionStatusResponse(BaseModel):
    message: str
    database: str
    collections: list[str]
    participant_count: int


class DatabaseHealthResponse(BaseModel):
    healthy: bool
    latency_ms: float = Field(..., description="Round-trip time of the ping command.")

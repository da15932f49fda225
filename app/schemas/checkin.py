"""Pydantic schemas for check-in requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.participant import CheckInType, ClientParticipant, normalize_email


class CheckInRequest(BaseModel):
    """Mark a participant as checked in at a checkpoint.

    The participant is identified by ``participant_id`` (preferred) or
    ``email``; at least one of them is required.
    """

    email: str | None = Field(None, description="Registered email address.")
    participant_id: str | None = Field(None, min_length=1)
    check_in_type: CheckInType

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        return normalize_email(value) if value is not None else None

    @model_validator(mode="after")
    def require_identifier(self) -> "CheckInRequest":
        if self.email is None and self.participant_id is None:
            raise ValueError("Either email or participant_id is required")
        return self


class ResetCheckInRequest(BaseModel):
    participant_id: str = Field(..., min_length=1, description="Participant to reset.")
    check_in_type: CheckInType


class CheckInResponse(BaseModel):
    participant: ClientParticipant
    check_in_time: str = Field(..., description="ISO-8601 time the checkpoint was passed.")
    message: str


class ResetCheckInResponse(BaseModel):
    participant: ClientParticipant
    message: str

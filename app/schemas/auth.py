"""Pydantic schemas for participant login and session endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Login form payload.

    Emptiness is checked by the route after the login throttle, so blank
    submissions still count as attempts.
    """

    participant_id: str = Field("", description="Participant ID from registration.")
    password: str = Field("", description="Password set during registration.")


class LoginResponse(BaseModel):
    participant_id: str
    name: str


class SessionResponse(BaseModel):
    """Current session state; ids are null when logged out."""

    is_logged_in: bool
    participant_id: str | None = None
    name: str | None = None


class LogoutResponse(BaseModel):
    status: str = "logged_out"

from __future__ import annotations

from fastapi import APIRouter, Request

from app.api.dependencies import RepositoryDep
from app.core.errors import ValidationAppError
from app.core.rate_limit import ACTION_LIMITER, enforce_rate_limit
from app.core.session import destroy_session, get_session_data, start_session
from app.schemas.auth import LoginRequest, LoginResponse, LogoutResponse, SessionResponse
from app.services.auth_service import authenticate_participant

router = APIRouter(prefix="/auth", tags=["Auth"])

LOGIN_THROTTLED_MESSAGE = "Too many login attempts. Please try again later."


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, request: Request, repository: RepositoryDep) -> LoginResponse:
    """Log a participant in with their ID and registration password.

    Attempts are throttled per participant ID (not per client address), so
    guessing one account's password from many addresses is still limited.

    Raises:
        RateLimitedAppError: Too many attempts for this participant ID (429).
        ValidationAppError: Participant ID or password left empty (400).
        AuthenticationAppError: Invalid credentials (403).
    """
    enforce_rate_limit(
        ACTION_LIMITER,
        f"login:{payload.participant_id}",
        message=LOGIN_THROTTLED_MESSAGE,
    )

    if not payload.participant_id.strip():
        raise ValidationAppError(code="validation_error", message="Participant ID is required")
    if not payload.password:
        raise ValidationAppError(code="validation_error", message="Password is required")

    participant = authenticate_participant(repository, payload.participant_id, payload.password)
    start_session(request, participant_id=participant.participant_id, name=participant.name)

    return LoginResponse(participant_id=participant.participant_id, name=participant.name)


@router.post("/logout", response_model=LogoutResponse)
def logout(request: Request) -> LogoutResponse:
    destroy_session(request)
    return LogoutResponse()


@router.get("/session", response_model=SessionResponse)
def current_session(request: Request) -> SessionResponse:
    """Return the active session, or ``is_logged_in: false``."""
    session = get_session_data(request)
    if session is None:
        return SessionResponse(is_logged_in=False)
    return SessionResponse(
        is_logged_in=True,
        participant_id=session.participant_id,
        name=session.name,
    )

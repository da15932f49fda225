"""Participant sessions stored in a signed cookie.

Starlette's ``SessionMiddleware`` signs the cookie with ``SESSION_SECRET``
(itsdangerous) so the payload cannot be tampered with client-side. The payload
only carries the participant id, display name, and the logged-in flag.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from pydantic import BaseModel, ValidationError
from starlette.middleware.sessions import SessionMiddleware

from app.core.config import SessionSettings, settings
from app.core.errors import AuthenticationAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

SESSION_KEY = "participant"


class ParticipantSession(BaseModel):
    """Data kept in the session cookie."""

    participant_id: str
    name: str
    is_logged_in: bool = False


def add_session_middleware(app: FastAPI, session_settings: SessionSettings | None = None) -> None:
    """Install the signed-cookie session middleware on ``app``."""

    cfg = session_settings or settings.session
    app.add_middleware(
        SessionMiddleware,
        secret_key=cfg.secret,
        session_cookie=cfg.cookie_name,
        max_age=cfg.max_age_seconds,
        same_site=cfg.same_site,
        https_only=cfg.https_only,
    )


def get_session_data(request: Request) -> ParticipantSession | None:
    """Return the logged-in participant session, or None."""

    raw = request.session.get(SESSION_KEY)
    if not raw:
        return None

    try:
        session = ParticipantSession.model_validate(raw)
    except ValidationError:
        # Payload from an older schema; treat as logged out.
        request.session.pop(SESSION_KEY, None)
        return None

    return session if session.is_logged_in else None


def start_session(request: Request, *, participant_id: str, name: str) -> ParticipantSession:
    session = ParticipantSession(participant_id=participant_id, name=name, is_logged_in=True)
    request.session[SESSION_KEY] = session.model_dump()
    return session


def destroy_session(request: Request) -> None:
    request.session.clear()


async def require_participant_session(participant_id: str, request: Request) -> ParticipantSession:
    """FastAPI dependency: allow only the participant named in the path.

    Args:
        participant_id: Path parameter of the protected route.
        request: Current request carrying the session cookie.

    Returns:
        The active session.

    Raises:
        AuthenticationAppError: When not logged in, or logged in as someone else.
    """

    session = get_session_data(request)
    if session is None:
        raise AuthenticationAppError(
            code="not_logged_in",
            message="Please log in to view this dashboard.",
            details={"participant_id": participant_id},
        )

    if session.participant_id != participant_id:
        logger.warning(
            "session.participant_mismatch",
            extra={
                "session_participant_hash": hash_identifier(session.participant_id),
                "requested_participant_hash": hash_identifier(participant_id),
            },
        )
        raise AuthenticationAppError(
            code="session_mismatch",
            message="Logged in as a different participant. Please log in again.",
            details={"participant_id": participant_id},
        )

    return session

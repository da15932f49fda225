"""Participant login against the registry.

Participants log in with their participant ID and the password they set at
registration (stored as ``loginPassword`` on the participant document).
Unknown IDs and wrong passwords produce the same error so the endpoint cannot
be used to enumerate participants.
"""

from __future__ import annotations

import hmac
import logging

from app.adapters.mongodb.participant_repository import ParticipantRepository
from app.core.errors import AuthenticationAppError
from app.core.logging import hash_identifier
from app.schemas.participant import DBParticipant

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid ID or password."


def _invalid_credentials() -> AuthenticationAppError:
    return AuthenticationAppError(
        code="invalid_credentials",
        message=INVALID_CREDENTIALS_MESSAGE,
    )


def authenticate_participant(
    repository: ParticipantRepository,
    participant_id: str,
    password: str,
) -> DBParticipant:
    """Verify a participant's credentials.

    Args:
        repository: Participant registry.
        participant_id: ID entered on the login form.
        password: Password entered on the login form.

    Returns:
        The authenticated participant.

    Raises:
        AuthenticationAppError: If the credentials are invalid or the account
            has no login password configured.
        DatabaseAppError: If the registry cannot be queried.
    """
    participant_hash = hash_identifier(participant_id)
    participant = repository.get_by_id(participant_id)

    if participant is None:
        logger.info(
            "auth.login_failed",
            extra={"participant_hash": participant_hash, "reason": "not_found"},
        )
        raise _invalid_credentials()

    if not participant.login_password:
        logger.warning(
            "auth.login_failed",
            extra={"participant_hash": participant_hash, "reason": "login_not_configured"},
        )
        raise AuthenticationAppError(
            code="login_not_configured",
            message="Account login not configured. Please contact the organizers.",
        )

    if not hmac.compare_digest(
        password.encode("utf-8"),
        participant.login_password.encode("utf-8"),
    ):
        logger.info(
            "auth.login_failed",
            extra={"participant_hash": participant_hash, "reason": "wrong_password"},
        )
        raise _invalid_credentials()

    logger.info("auth.login_succeeded", extra={"participant_hash": participant_hash})
    return participant

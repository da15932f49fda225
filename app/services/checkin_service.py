"""Check-in business logic.

Staff mark participants as having passed a checkpoint (college arrival or lab
arrival). Checking in twice is not an error: the second call reports the
original check-in time with an "Already checked in" message.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from app.adapters.mongodb.participant_repository import ParticipantRepository
from app.core.errors import DatabaseAppError
from app.core.logging import hash_identifier
from app.schemas.checkin import (
    CheckInRequest,
    CheckInResponse,
    ResetCheckInRequest,
    ResetCheckInResponse,
)
from app.schemas.participant import CheckInStatus, CheckInType, ClientParticipant, DBParticipant
from app.services.participant_service import (
    get_participant,
    get_participant_by_email,
)

logger = logging.getLogger(__name__)

MESSAGE_CHECKED_IN = "Check-in successful"
MESSAGE_ALREADY_CHECKED_IN = "Already checked in"
MESSAGE_RESET = "Check-in reset successful"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CheckInService:
    """Performs and resets participant check-ins.

    Attributes:
        repository: Participant registry.
    """

    def __init__(
        self,
        repository: ParticipantRepository,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.repository = repository
        self._clock = clock

    def _resolve(self, request: CheckInRequest) -> DBParticipant:
        # Participant ID wins when both identifiers are supplied.
        if request.participant_id:
            return get_participant(self.repository, request.participant_id)
        return get_participant_by_email(self.repository, request.email or "")

    def check_in(self, request: CheckInRequest) -> CheckInResponse:
        """Mark the participant as checked in at ``request.check_in_type``.

        Raises:
            NotFoundAppError: If no participant matches.
            DatabaseAppError: If the update did not modify the document.
        """
        participant = self._resolve(request)
        check_in_type = request.check_in_type
        current = participant.check_in(check_in_type)

        if current is not None and current.status:
            check_in_time = current.time or self._clock()
            return CheckInResponse(
                participant=ClientParticipant.from_db(participant),
                check_in_time=check_in_time.isoformat(),
                message=MESSAGE_ALREADY_CHECKED_IN,
            )

        now = self._clock()
        if not self.repository.update_check_in(participant.participant_id, check_in_type, at=now):
            raise DatabaseAppError(
                code="db_error",
                message="Failed to update check-in status",
                details={
                    "participant_id": participant.participant_id,
                    "check_in_type": check_in_type.value,
                },
            )

        updated = participant.with_check_in(check_in_type, CheckInStatus(status=True, time=now))
        logger.info(
            "checkin.completed",
            extra={
                "participant_hash": hash_identifier(participant.participant_id),
                "check_in_type": check_in_type.value,
            },
        )
        return CheckInResponse(
            participant=ClientParticipant.from_db(updated),
            check_in_time=now.isoformat(),
            message=MESSAGE_CHECKED_IN,
        )

    def quick_check_in(self, participant_id: str, check_in_type: CheckInType) -> CheckInResponse:
        """Check in by participant ID only (badge scan shortcut)."""
        return self.check_in(CheckInRequest(participant_id=participant_id, check_in_type=check_in_type))

    def reset(self, request: ResetCheckInRequest) -> ResetCheckInResponse:
        """Clear a checkpoint for the participant.

        Raises:
            NotFoundAppError: If no participant matches.
            DatabaseAppError: If the update did not modify the document.
        """
        participant = get_participant(self.repository, request.participant_id)
        check_in_type = request.check_in_type

        if not self.repository.reset_check_in(participant.participant_id, check_in_type):
            raise DatabaseAppError(
                code="db_error",
                message="Failed to reset check-in status",
                details={
                    "participant_id": participant.participant_id,
                    "check_in_type": check_in_type.value,
                },
            )

        updated = participant.with_check_in(check_in_type, CheckInStatus(status=False, time=None))
        logger.info(
            "checkin.reset",
            extra={
                "participant_hash": hash_identifier(participant.participant_id),
                "check_in_type": check_in_type.value,
            },
        )
        return ResetCheckInResponse(
            participant=ClientParticipant.from_db(updated),
            message=MESSAGE_RESET,
        )

"""Read-side helpers for participant lookups."""

from __future__ import annotations

from app.adapters.mongodb.participant_repository import ParticipantRepository
from app.core.config import settings
from app.core.errors import NotFoundAppError
from app.schemas.participant import ClientParticipant, DBParticipant, PaginatedParticipantsResponse


def participant_not_found(**details: str) -> NotFoundAppError:
    return NotFoundAppError(
        code="participant_not_found",
        message="Participant not found",
        details=details or None,
    )


def get_participant(repository: ParticipantRepository, participant_id: str) -> DBParticipant:
    """Fetch a participant by ID or raise NotFoundAppError."""
    participant = repository.get_by_id(participant_id)
    if participant is None:
        raise participant_not_found(participant_id=participant_id)
    return participant


def get_participant_by_email(repository: ParticipantRepository, email: str) -> DBParticipant:
    """Fetch a participant by email or raise NotFoundAppError."""
    participant = repository.get_by_email(email)
    if participant is None:
        raise participant_not_found()
    return participant


def resolve_list_limit(limit: int | None) -> int:
    """Clamp a requested list size; out-of-range values fall back to the default."""
    if limit is None or not 1 <= limit <= settings.app.participants_max_limit:
        return settings.app.participants_default_limit
    return limit


def list_participants(repository: ParticipantRepository, limit: int | None) -> list[ClientParticipant]:
    return [ClientParticipant.from_db(p) for p in repository.list_participants(resolve_list_limit(limit))]


def paginate_participants(
    repository: ParticipantRepository,
    page: int,
    page_size: int,
) -> PaginatedParticipantsResponse:
    participants, total, pages = repository.paginate(page, page_size)
    return PaginatedParticipantsResponse(
        participants=[ClientParticipant.from_db(p) for p in participants],
        total=total,
        pages=pages,
        current_page=page,
    )

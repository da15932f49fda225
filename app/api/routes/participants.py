from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import RepositoryDep
from app.core.auth import verify_staff_api_key
from app.core.errors import ValidationAppError
from app.core.rate_limit import enforce_action_rate_limit
from app.core.session import ParticipantSession, require_participant_session
from app.schemas.participant import (
    ClientParticipant,
    DashboardResponse,
    PaginatedParticipantsResponse,
    ParticipantCountResponse,
    ParticipantListResponse,
    normalize_email,
)
from app.services import participant_service

router = APIRouter(prefix="/participants", tags=["Participants"])

# Limiter runs before the key check; rejected keys consume budget too.
_staff_dependencies = [Depends(enforce_action_rate_limit), Depends(verify_staff_api_key)]


@router.get("", response_model=ParticipantListResponse, dependencies=_staff_dependencies)
def list_participants(
    repository: RepositoryDep,
    limit: Annotated[int | None, Query(description="Max participants (1-100, default 50).")] = None,
) -> ParticipantListResponse:
    """List participants. Out-of-range limits fall back to the default."""
    participants = participant_service.list_participants(repository, limit)
    return ParticipantListResponse(participants=participants, count=len(participants))


@router.get(
    "/paginated",
    response_model=PaginatedParticipantsResponse,
    dependencies=_staff_dependencies,
)
def paginate_participants(
    repository: RepositoryDep,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedParticipantsResponse:
    return participant_service.paginate_participants(repository, page, page_size)


@router.get("/count", response_model=ParticipantCountResponse, dependencies=_staff_dependencies)
def count_participants(repository: RepositoryDep) -> ParticipantCountResponse:
    return ParticipantCountResponse(count=repository.count())


@router.get("/by-email", response_model=ClientParticipant, dependencies=_staff_dependencies)
def get_participant_by_email(
    repository: RepositoryDep,
    email: Annotated[str, Query(min_length=1)],
) -> ClientParticipant:
    try:
        normalized = normalize_email(email)
    except ValueError as exc:
        raise ValidationAppError(code="validation_error", message=str(exc)) from exc

    return ClientParticipant.from_db(
        participant_service.get_participant_by_email(repository, normalized)
    )


@router.get(
    "/{participant_id}",
    response_model=ClientParticipant,
    dependencies=_staff_dependencies,
)
def get_participant(participant_id: str, repository: RepositoryDep) -> ClientParticipant:
    return ClientParticipant.from_db(participant_service.get_participant(repository, participant_id))


@router.get(
    "/{participant_id}/dashboard",
    response_model=DashboardResponse,
    dependencies=[Depends(enforce_action_rate_limit)],
)
def participant_dashboard(
    participant_id: str,
    repository: RepositoryDep,
    session: Annotated[ParticipantSession, Depends(require_participant_session)],
) -> DashboardResponse:
    """Dashboard data for the logged-in participant.

    Only the participant named in the path may view it; other sessions are
    rejected with 403.
    """
    participant = participant_service.get_participant(repository, session.participant_id)
    college = participant.college_check_in
    lab = participant.lab_check_in

    return DashboardResponse(
        participant=ClientParticipant.from_db(participant),
        college_checked_in=bool(college and college.status),
        lab_checked_in=bool(lab and lab.status),
    )

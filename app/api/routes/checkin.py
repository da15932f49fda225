from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.dependencies import CheckInServiceDep
from app.core.auth import verify_staff_api_key
from app.core.rate_limit import enforce_checkin_rate_limit
from app.schemas.checkin import (
    CheckInRequest,
    CheckInResponse,
    ResetCheckInRequest,
    ResetCheckInResponse,
)
from app.schemas.participant import CheckInType

router = APIRouter(
    prefix="/checkin",
    tags=["Check-in"],
    dependencies=[Depends(enforce_checkin_rate_limit), Depends(verify_staff_api_key)],
)


@router.post("", response_model=CheckInResponse)
def check_in(payload: CheckInRequest, service: CheckInServiceDep) -> CheckInResponse:
    """Check a participant in by participant ID or email.

    Checking in an already checked-in participant succeeds with the original
    check-in time and the message "Already checked in".
    """
    return service.check_in(payload)


@router.post("/reset", response_model=ResetCheckInResponse)
def reset_check_in(payload: ResetCheckInRequest, service: CheckInServiceDep) -> ResetCheckInResponse:
    return service.reset(payload)


@router.post("/college/{participant_id}", response_model=CheckInResponse)
def college_check_in(participant_id: str, service: CheckInServiceDep) -> CheckInResponse:
    return service.quick_check_in(participant_id, CheckInType.COLLEGE)


@router.post("/lab/{participant_id}", response_model=CheckInResponse)
def lab_check_in(participant_id: str, service: CheckInServiceDep) -> CheckInResponse:
    return service.quick_check_in(participant_id, CheckInType.LAB)

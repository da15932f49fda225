"""Pydantic schemas for participant documents and their client projection.

MongoDB stores participant fields in camelCase (``participantId``,
``collegeCheckIn`` ...). ``DBParticipant`` reads those via aliases;
``ClientParticipant`` is what the API returns: no ``_id``, no login
password, and check-in times rendered as ISO-8601 strings.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.networks import validate_email as validate_email_address
from pydantic_core import PydanticCustomError


def normalize_email(value: str) -> str:
    """Trim and lower-case an email address, rejecting malformed ones.

    Syntax checks are delegated to email-validator (through pydantic);
    deliverability is not checked.

    Raises:
        ValueError: If ``value`` is not a valid email address.
    """
    try:
        _, normalized = validate_email_address(value.strip().lower())
    except PydanticCustomError as exc:
        raise ValueError("Invalid email address") from exc
    return normalized

class CheckInType(str, Enum):
    """Check-in checkpoints; values are the document field names."""

    COLLEGE = "collegeCheckIn"
    LAB = "labCheckIn"

_CHECK_IN_FIELDS = {
    CheckInType.COLLEGE: "college_check_in",
    CheckInType.LAB: "lab_check_in",
}

class WifiCredentials(BaseModel):
    ssid: str | None = None
    password: str | None = None

class CheckInStatus(BaseModel):
    status: bool
    time: datetime | None = None

class DBParticipant(BaseModel):
    """A participant document as stored in the ``participants`` collection."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    participant_id: str = Field(..., min_length=1, alias="participantId")
    name: str = Field(..., min_length=1)
    email: str
    phone: str | None = None
    role: str | None = None
    team_name: str | None = Field(None, alias="teamName")
    institute: str | None = None
    lab_allotted: str | None = Field(None, alias="labAllotted")
    wifi_credentials: WifiCredentials | None = Field(None, alias="wifiCredentials")
    college_check_in: CheckInStatus | None = Field(None, alias="collegeCheckIn")
    lab_check_in: CheckInStatus | None = Field(None, alias="labCheckIn")
    login_password: str | None = Field(None, alias="loginPassword", repr=False)
    created_at: datetime | None = Field(None, alias="createdAt")
    updated_at: datetime | None = Field(None, alias="updatedAt")

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    def check_in(self, check_in_type: CheckInType) -> CheckInStatus | None:
        """Return the status of one checkpoint (None when never recorded)."""
        return getattr(self, _CHECK_IN_FIELDS[check_in_type])

    def with_check_in(self, check_in_type: CheckInType, status: CheckInStatus) -> "DBParticipant":
        """Return a copy with one checkpoint replaced."""
        return self.model_copy(update={_CHECK_IN_FIELDS[check_in_type]: status})

class ClientCheckInStatus(BaseModel):
    status: bool = Field(..., description="Whether the participant passed this checkpoint.")
    time: str | None = Field(None, description="ISO-8601 timestamp of the check-in.")

    @classmethod
    def from_status(cls, status: CheckInStatus | None) -> "ClientCheckInStatus | None":
        if status is None:
            return None
        return cls(
            status=status.status,
            time=status.time.isoformat() if status.time else None,
        )

class ClientParticipant(BaseModel):
    """Client-safe participant representation."""

    participant_id: str
    name: str
    email: str
    phone: str | None = None
    role: str | None = None
    team_name: str | None = None
    institute: str | None = None
    lab_allotted: str | None = None
    wifi_credentials: WifiCredentials | None = None
    college_check_in: ClientCheckInStatus | None = None
    lab_check_in: ClientCheckInStatus | None = None

    @classmethod
    def from_db(cls, participant: DBParticipant) -> "ClientParticipant":
        return cls(
            participant_id=participant.participant_id,
            name=participant.name,
            email=participant.email,
            phone=participant.phone,
            role=participant.role,
            team_name=participant.team_name,
            institute=participant.institute,
            lab_allotted=participant.lab_allotted,
            wifi_credentials=participant.wifi_credentials,
            college_check_in=ClientCheckInStatus.from_status(participant.college_check_in),
            lab_check_in=ClientCheckInStatus.from_status(participant.lab_check_in),
        )

class ParticipantListResponse(BaseModel):
    participants: list[ClientParticipant]
    count: int = Field(..., description="Number of participants in this response.")

class PaginatedParticipantsResponse(BaseModel):
    participants: list[ClientParticipant]
    total: int = Field(..., description="Total participants in the registry.")
    pages: int = Field(..., description="Number of pages for the requested page size.")
    current_page: int

class ParticipantCountResponse(BaseModel):
    count: int

class DashboardResponse(BaseModel):
    """Data shown on a logged-in participant's dashboard."""

    participant: ClientParticipant
    college_checked_in: bool
    lab_checked_in: bool

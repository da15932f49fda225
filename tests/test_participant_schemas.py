"""Tests for participant and check-in schemas."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from app.schemas.checkin import CheckInRequest, ResetCheckInRequest
from app.schemas.participant import (
    CheckInStatus,
    CheckInType,
    ClientParticipant,
    DBParticipant,
    normalize_email,
)


class TestNormalizeEmail:
    def test_trims_and_lowercases(self) -> None:
        assert normalize_email("  Ada@Example.COM ") == "ada@example.com"

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "ada",
            "ada@",
            "ada@example",
            "a da@example.com",
            ".ada@example.com",
            "ada..lovelace@example.com",
            "ada@example..com",
        ],
    )
    def test_rejects_malformed(self, value: str) -> None:
        with pytest.raises(ValueError, match="Invalid email address"):
            normalize_email(value)


class TestDBParticipant:
    def test_reads_camel_case_document(self, participant_document) -> None:
        participant = DBParticipant.model_validate(participant_document)

        assert participant.participant_id == "HO-001"
        assert participant.team_name == "Analytical Engines"
        assert participant.lab_allotted == "Lab 3"
        assert participant.wifi_credentials.ssid == "hack-3"
        assert participant.college_check_in == CheckInStatus(status=False)
        assert participant.login_password == "s3cret"

    def test_login_password_is_not_in_repr(self, participant_document) -> None:
        assert "s3cret" not in repr(DBParticipant.model_validate(participant_document))

    def test_email_is_normalized(self, participant_factory) -> None:
        participant = DBParticipant.model_validate(participant_factory(email="ADA@Example.com"))
        assert participant.email == "ada@example.com"

    def test_missing_participant_id_is_invalid(self, participant_factory) -> None:
        document = participant_factory()
        del document["participantId"]

        with pytest.raises(ValidationError):
            DBParticipant.model_validate(document)

    def test_check_in_accessors(self, participant_document) -> None:
        participant = DBParticipant.model_validate(participant_document)
        at = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)

        updated = participant.with_check_in(CheckInType.LAB, CheckInStatus(status=True, time=at))

        assert updated.check_in(CheckInType.LAB).time == at
        assert updated.check_in(CheckInType.COLLEGE).status is False
        assert participant.check_in(CheckInType.LAB).status is False

    def test_missing_checkpoint_reads_as_none(self, participant_factory) -> None:
        document = participant_factory()
        del document["labCheckIn"]

        assert DBParticipant.model_validate(document).check_in(CheckInType.LAB) is None


class TestClientParticipant:
    def test_projection_hides_internal_fields(self, participant_factory) -> None:
        at = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        participant = DBParticipant.model_validate(
            participant_factory(collegeCheckIn={"status": True, "time": at})
        )

        client = ClientParticipant.from_db(participant).model_dump()

        assert "login_password" not in client
        assert "_id" not in client
        assert "created_at" not in client
        assert client["college_check_in"] == {"status": True, "time": at.isoformat()}
        assert client["lab_check_in"] == {"status": False, "time": None}


class TestCheckInRequest:
    def test_accepts_participant_id(self) -> None:
        request = CheckInRequest(participant_id="HO-001", check_in_type="collegeCheckIn")
        assert request.check_in_type is CheckInType.COLLEGE

    def test_normalizes_email(self) -> None:
        request = CheckInRequest(email=" Ada@Example.com", check_in_type="labCheckIn")
        assert request.email == "ada@example.com"

    def test_requires_an_identifier(self) -> None:
        with pytest.raises(ValidationError, match="Either email or participant_id is required"):
            CheckInRequest(check_in_type="labCheckIn")

    def test_rejects_unknown_checkpoint(self) -> None:
        with pytest.raises(ValidationError):
            CheckInRequest(participant_id="HO-001", check_in_type="hotelCheckIn")

    def test_reset_requires_participant_id(self) -> None:
        with pytest.raises(ValidationError):
            ResetCheckInRequest(participant_id="", check_in_type="labCheckIn")

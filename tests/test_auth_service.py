"""Tests for participant login."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from app.core.errors import AuthenticationAppError
from app.schemas.participant import DBParticipant
from app.services.auth_service import INVALID_CREDENTIALS_MESSAGE, authenticate_participant


@pytest.fixture
def repository() -> MagicMock:
    return MagicMock(name="participant_repository")


def test_valid_credentials_return_participant(repository, participant_document) -> None:
    repository.get_by_id.return_value = DBParticipant.model_validate(participant_document)

    participant = authenticate_participant(repository, "HO-001", "s3cret")

    assert participant.name == "Ada Lovelace"
    repository.get_by_id.assert_called_once_with("HO-001")


def test_unknown_participant_and_wrong_password_look_the_same(repository, participant_document) -> None:
    repository.get_by_id.return_value = None
    with pytest.raises(AuthenticationAppError) as unknown:
        authenticate_participant(repository, "HO-404", "s3cret")

    repository.get_by_id.return_value = DBParticipant.model_validate(participant_document)
    with pytest.raises(AuthenticationAppError) as wrong:
        authenticate_participant(repository, "HO-001", "guess")

    assert unknown.value.code == wrong.value.code == "invalid_credentials"
    assert unknown.value.message == wrong.value.message == INVALID_CREDENTIALS_MESSAGE


def test_account_without_password_cannot_log_in(repository, participant_factory) -> None:
    repository.get_by_id.return_value = DBParticipant.model_validate(
        participant_factory(loginPassword=None)
    )

    with pytest.raises(AuthenticationAppError) as exc_info:
        authenticate_participant(repository, "HO-001", "")

    assert exc_info.value.code == "login_not_configured"

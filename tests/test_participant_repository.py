"""Tests for the MongoDB participant repository (collection mocked)."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from app.adapters.mongodb.participant_repository import ParticipantRepository
from app.core.errors import DatabaseAppError
from app.schemas.participant import CheckInType

FIXED_NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def repository(mock_collection: MagicMock) -> ParticipantRepository:
    return ParticipantRepository(mock_collection, clock=lambda: FIXED_NOW)


def _cursor(documents: list[dict]) -> MagicMock:
    cursor = MagicMock()
    cursor.__iter__.return_value = iter(documents)
    cursor.limit.return_value = cursor
    cursor.skip.return_value = cursor
    return cursor


class TestLookups:
    def test_get_by_id(self, repository, mock_collection, participant_document) -> None:
        mock_collection.find_one.return_value = participant_document

        participant = repository.get_by_id("HO-001")

        assert participant.participant_id == "HO-001"
        mock_collection.find_one.assert_called_once_with({"participantId": "HO-001"})

    def test_get_by_id_missing(self, repository, mock_collection) -> None:
        mock_collection.find_one.return_value = None
        assert repository.get_by_id("HO-404") is None

    def test_invalid_document_reads_as_missing(self, repository, mock_collection) -> None:
        mock_collection.find_one.return_value = {"_id": "x", "participantId": "HO-002"}
        assert repository.get_by_id("HO-002") is None

    def test_get_by_email_normalizes_query(self, repository, mock_collection, participant_document) -> None:
        mock_collection.find_one.return_value = participant_document

        repository.get_by_email("  ADA@example.com ")

        mock_collection.find_one.assert_called_once_with({"email": "ada@example.com"})

    def test_exists(self, repository, mock_collection) -> None:
        mock_collection.count_documents.return_value = 1

        assert repository.exists("HO-001") is True
        mock_collection.count_documents.assert_called_once_with({"participantId": "HO-001"}, limit=1)


class TestListing:
    def test_list_skips_invalid_documents(
        self, repository, mock_collection, participant_factory
    ) -> None:
        mock_collection.find.return_value = _cursor(
            [participant_factory(), {"participantId": "broken"}, participant_factory(participantId="HO-002")]
        )

        participants = repository.list_participants()

        assert [p.participant_id for p in participants] == ["HO-001", "HO-002"]

    def test_list_applies_limit(self, repository, mock_collection) -> None:
        cursor = _cursor([])
        mock_collection.find.return_value = cursor

        repository.list_participants(limit=5)

        cursor.limit.assert_called_once_with(5)

    def test_paginate(self, repository, mock_collection, participant_document) -> None:
        cursor = _cursor([participant_document])
        mock_collection.find.return_value = cursor
        mock_collection.count_documents.return_value = 41

        participants, total, pages = repository.paginate(page=3, page_size=20)

        assert len(participants) == 1
        assert total == 41
        assert pages == 3
        cursor.skip.assert_called_once_with(40)
        cursor.limit.assert_called_once_with(20)

    def test_paginate_empty_registry(self, repository, mock_collection) -> None:
        mock_collection.find.return_value = _cursor([])
        mock_collection.count_documents.return_value = 0

        assert repository.paginate(1, 20) == ([], 0, 0)

    @pytest.mark.parametrize(("page", "page_size"), [(0, 20), (1, 0)])
    def test_paginate_rejects_bad_arguments(self, repository, page, page_size) -> None:
        with pytest.raises(ValueError):
            repository.paginate(page, page_size)

    def test_collection_info(self, repository, mock_collection) -> None:
        mock_collection.count_documents.return_value = 7
        assert repository.collection_info() == {"name": "participants", "count": 7}


class TestCheckInUpdates:
    def test_update_check_in_sets_status_and_time(self, repository, mock_collection) -> None:
        mock_collection.update_one.return_value = MagicMock(modified_count=1)

        assert repository.update_check_in("HO-001", CheckInType.COLLEGE) is True

        mock_collection.update_one.assert_called_once_with(
            {"participantId": "HO-001"},
            {
                "$set": {
                    "collegeCheckIn.status": True,
                    "collegeCheckIn.time": FIXED_NOW,
                    "updatedAt": FIXED_NOW,
                }
            },
        )

    def test_reset_check_in_clears_time(self, repository, mock_collection) -> None:
        mock_collection.update_one.return_value = MagicMock(modified_count=1)

        assert repository.reset_check_in("HO-001", CheckInType.LAB) is True

        update = mock_collection.update_one.call_args.args[1]["$set"]
        assert update["labCheckIn.status"] is False
        assert update["labCheckIn.time"] is None

    def test_unmodified_update_returns_false(self, repository, mock_collection) -> None:
        mock_collection.update_one.return_value = MagicMock(modified_count=0)
        assert repository.update_check_in("HO-404", CheckInType.LAB) is False


def test_driver_errors_become_database_errors(repository, mock_collection) -> None:
    mock_collection.find_one.side_effect = ServerSelectionTimeoutError("no servers")

    with pytest.raises(DatabaseAppError) as exc_info:
        repository.get_by_id("HO-001")

    assert exc_info.value.code == "db_error"
    assert exc_info.value.message == "Database error. Please try again."
    assert exc_info.value.details["context"]["operation"] == "get_by_id"

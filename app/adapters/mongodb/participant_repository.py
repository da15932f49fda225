"""Participant registry operations on the ``participants`` collection.

Documents are validated with ``DBParticipant`` on the way out; documents that
fail validation are logged and skipped (lists) or treated as missing (single
lookups). Driver failures surface as ``DatabaseAppError``.
"""

from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Mapping

from pydantic import ValidationError
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from app.core.errors import DatabaseAppError
from app.core.logging import hash_identifier
from app.schemas.participant import CheckInType, DBParticipant

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def _database_errors(operation: str) -> Iterator[None]:
    """Translate driver errors into DatabaseAppError for one operation."""
    try:
        yield
    except PyMongoError as exc:
        logger.error(
            "participants.db_error",
            extra={"operation": operation, "error_type": type(exc).__name__},
        )
        raise DatabaseAppError(
            code="db_error",
            message="Database error. Please try again.",
            details={"context": {"operation": operation}},
        ) from exc


class ParticipantRepository:
    """Type-safe access to participant documents.

    Attributes:
        collection: pymongo collection holding participant documents.
    """

    def __init__(
        self,
        collection: Collection,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.collection = collection
        self._clock = clock

    def _parse(self, document: Mapping[str, Any]) -> DBParticipant | None:
        try:
            return DBParticipant.model_validate(document)
        except ValidationError as exc:
            logger.warning(
                "participants.invalid_document",
                extra={
                    "document_id": str(document.get("_id")),
                    "error_count": exc.error_count(),
                },
            )
            return None

    def _parse_many(self, documents: Iterator[Mapping[str, Any]]) -> list[DBParticipant]:
        participants = []
        for document in documents:
            participant = self._parse(document)
            if participant is not None:
                participants.append(participant)
        return participants

    def get_by_id(self, participant_id: str) -> DBParticipant | None:
        with _database_errors("get_by_id"):
            document = self.collection.find_one({"participantId": participant_id})
        return self._parse(document) if document else None

    def get_by_email(self, email: str) -> DBParticipant | None:
        """Look up a participant by email (stored lower-cased)."""
        with _database_errors("get_by_email"):
            document = self.collection.find_one({"email": email.strip().lower()})
        return self._parse(document) if document else None

    def list_participants(self, limit: int | None = None) -> list[DBParticipant]:
        """Return participants in natural order, optionally capped at ``limit``."""
        with _database_errors("list_participants"):
            cursor = self.collection.find({})
            if limit and limit > 0:
                cursor = cursor.limit(limit)
            return self._parse_many(cursor)

    def paginate(self, page: int, page_size: int) -> tuple[list[DBParticipant], int, int]:
        """Return one page of participants.

        Args:
            page: 1-based page number.
            page_size: Participants per page.

        Returns:
            Tuple of (participants, total, pages) where ``pages`` is
            ``ceil(total / page_size)``.

        Raises:
            ValueError: If ``page`` or ``page_size`` is below 1.
        """
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be >= 1")

        with _database_errors("paginate"):
            total = self.collection.count_documents({})
            cursor = self.collection.find({}).skip((page - 1) * page_size).limit(page_size)
            participants = self._parse_many(cursor)

        return participants, total, math.ceil(total / page_size)

    def count(self) -> int:
        with _database_errors("count"):
            return self.collection.count_documents({})

    def exists(self, participant_id: str) -> bool:
        with _database_errors("exists"):
            return self.collection.count_documents({"participantId": participant_id}, limit=1) > 0

    def collection_info(self) -> dict[str, Any]:
        return {"name": self.collection.name, "count": self.count()}

    def _set_check_in(
        self,
        participant_id: str,
        check_in_type: CheckInType,
        *,
        status: bool,
        operation: str,
        at: datetime | None = None,
    ) -> bool:
        now = at or self._clock()
        field = check_in_type.value
        with _database_errors(operation):
            result = self.collection.update_one(
                {"participantId": participant_id},
                {
                    "$set": {
                        f"{field}.status": status,
                        f"{field}.time": now if status else None,
                        "updatedAt": now,
                    }
                },
            )

        logger.info(
            f"participants.{operation}",
            extra={
                "participant_hash": hash_identifier(participant_id),
                "check_in_type": field,
                "modified": result.modified_count,
            },
        )
        return result.modified_count > 0

    def update_check_in(
        self,
        participant_id: str,
        check_in_type: CheckInType,
        *,
        at: datetime | None = None,
    ) -> bool:
        """Mark a checkpoint as passed at ``at`` (default: now).

        Returns:
            True if a document was modified.
        """
        return self._set_check_in(
            participant_id, check_in_type, status=True, operation="update_check_in", at=at
        )

    def reset_check_in(self, participant_id: str, check_in_type: CheckInType) -> bool:
        """Clear a checkpoint (status false, time null).

        Returns:
            True if a document was modified.
        """
        return self._set_check_in(participant_id, check_in_type, status=False, operation="reset_check_in")

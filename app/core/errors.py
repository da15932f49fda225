"""Domain errors raised by services, adapters and route dependencies.

Each subclass maps to one HTTP status in ``app.core.exception_handlers``;
raising code never builds responses itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Optional context rendered under ``error.details`` in responses."""

    hint: str
    participant_id: str
    check_in_type: str
    limit: int
    remaining: int
    reset_time: int
    retry_after: int
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for expected failures of the check-in API.

    Attributes:
        code: Stable snake_case identifier clients can branch on.
        message: Message safe to show to staff or participants.
        details: Extra context, e.g. rate limit counters.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Malformed input that passed schema validation (400)."""


class AuthenticationAppError(AppError):
    """Missing or invalid staff key, bad credentials, or wrong session (403)."""


class NotFoundAppError(AppError):
    """No participant matches the lookup (404)."""


class RateLimitedAppError(AppError):
    """The caller exhausted its sliding-window budget (429)."""


class DatabaseAppError(AppError):
    """MongoDB failed or an update did not take effect (503)."""

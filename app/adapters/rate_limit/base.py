"""Rate limiter interfaces.

Request handlers depend on this abstraction (not the concrete implementation)
so the storage backend can be swapped later with minimal changes.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


class RateLimitConfig(BaseModel):
    """Immutable limiter policy.

    Attributes:
        max_requests: Admitted requests per sliding window.
        window_ms: Sliding window length in milliseconds.
    """

    max_requests: int = Field(..., ge=1)
    window_ms: int = Field(..., ge=1000)

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check/peek operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        reset_time: Epoch milliseconds when the window (or block) resets.
        retry_after_ms: Suggested wait time in milliseconds (0 when allowed).
    """

    allowed: bool
    limit: int
    remaining: int
    reset_time: int
    retry_after_ms: int

    @property
    def retry_after_seconds(self) -> int:
        """Wait time rounded up to whole seconds, as reported to clients."""
        return math.ceil(self.retry_after_ms / 1000)


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check(self, identifier: str) -> RateLimitResult:
        """Decide admission for ``identifier`` and consume budget when allowed.

        Args:
            identifier: Key partitioning the limiter state (e.g., client IP).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def peek(self, identifier: str) -> RateLimitResult:
        """Report the current admission state without consuming budget."""
        raise NotImplementedError

    @abstractmethod
    def reset(self, identifier: str) -> None:
        """Forget all history and blocks for ``identifier``."""
        raise NotImplementedError

    @abstractmethod
    def destroy(self) -> None:
        """Release background resources and drop all state."""
        raise NotImplementedError

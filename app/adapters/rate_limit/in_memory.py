"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: a single lock guards the identifier map, including the
  background cleanup sweep.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitConfig, RateLimitResult

logger = logging.getLogger(__name__)

DEFAULT_CLEANUP_INTERVAL_SECONDS = 5 * 60


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class _RateLimitEntry:
    timestamps: list[int] = field(default_factory=list)
    blocked: bool = False
    blocked_until: int = 0

    def is_blocked(self, now: int) -> bool:
        return self.blocked and self.blocked_until > now


class SlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter admitting at most N requests in any trailing window.

    Every admitted request records its timestamp. Once an identifier has
    ``max_requests`` timestamps inside the window, the next request is rejected
    and the identifier enters a cooldown lasting a full ``window_ms`` from that
    rejected call. During the cooldown the timestamp history is not consulted.

    A daemon thread calls :meth:`cleanup` every ``cleanup_interval_seconds`` to
    drop identifiers that stopped sending requests. Call :meth:`destroy` on
    shutdown to stop it.
    """

    def __init__(
        self,
        config: RateLimitConfig,
        *,
        clock: Callable[[], int] = _now_ms,
        cleanup_interval_seconds: float | None = DEFAULT_CLEANUP_INTERVAL_SECONDS,
    ) -> None:
        """Initialize the limiter.

        Args:
            config: Validated limiter policy.
            clock: Time source returning UNIX time in milliseconds.
            cleanup_interval_seconds: Period of the background sweep. ``None``
                disables the background thread (``cleanup`` can still be
                called directly).

        Raises:
            ValueError: If ``cleanup_interval_seconds`` is not positive.
        """
        if cleanup_interval_seconds is not None and cleanup_interval_seconds <= 0:
            raise ValueError("cleanup_interval_seconds must be > 0")

        self._config = config
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, _RateLimitEntry] = {}
        self._stop_event = threading.Event()
        self._cleanup_thread: threading.Thread | None = None

        if cleanup_interval_seconds is not None:
            self._cleanup_thread = threading.Thread(
                target=self._run_cleanup_loop,
                args=(cleanup_interval_seconds,),
                name="rate-limit-cleanup",
                daemon=True,
            )
            self._cleanup_thread.start()

    @classmethod
    def create(cls, *, max_requests: int, window_ms: int, **kwargs) -> "SlidingWindowRateLimiter":
        """Build a limiter from raw policy values, validating them first."""
        return cls(RateLimitConfig(max_requests=max_requests, window_ms=window_ms), **kwargs)

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._entries

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"SlidingWindowRateLimiter(max_requests={self._config.max_requests}, "
            f"window_ms={self._config.window_ms}, tracked={len(self)})"
        )

    def _blocked_result(self, entry: _RateLimitEntry, now: int) -> RateLimitResult:
        return RateLimitResult(
            allowed=False,
            limit=self._config.max_requests,
            remaining=0,
            reset_time=entry.blocked_until,
            retry_after_ms=entry.blocked_until - now,
        )

    def check(self, identifier: str) -> RateLimitResult:
        """Decide admission for ``identifier``, recording the request if allowed.

        Args:
            identifier: Rate limit key (e.g., client IP or ``login:<id>``).

        Returns:
            RateLimitResult with the admission decision and metadata.
        """
        max_requests = self._config.max_requests
        window_ms = self._config.window_ms

        with self._lock:
            now = self._clock()
            window_start = now - window_ms

            entry = self._entries.get(identifier)
            if entry is not None and entry.is_blocked(now):
                return self._blocked_result(entry, now)

            if entry is None:
                entry = _RateLimitEntry()
            else:
                entry.timestamps = [ts for ts in entry.timestamps if ts > window_start]
                entry.blocked = False

            if len(entry.timestamps) >= max_requests:
                # Cooldown is a full window from now, not until the oldest
                # timestamp would leave the window.
                entry.blocked = True
                entry.blocked_until = now + window_ms
                self._entries[identifier] = entry
                return RateLimitResult(
                    allowed=False,
                    limit=max_requests,
                    remaining=0,
                    reset_time=entry.blocked_until,
                    retry_after_ms=window_ms,
                )

            entry.timestamps.append(now)
            self._entries[identifier] = entry

            return RateLimitResult(
                allowed=True,
                limit=max_requests,
                remaining=max_requests - len(entry.timestamps),
                reset_time=entry.timestamps[0] + window_ms,
                retry_after_ms=0,
            )

    def peek(self, identifier: str) -> RateLimitResult:
        """Report the admission state for ``identifier`` without mutating it."""
        max_requests = self._config.max_requests
        window_ms = self._config.window_ms

        with self._lock:
            now = self._clock()
            entry = self._entries.get(identifier)

            if entry is None:
                return RateLimitResult(
                    allowed=True,
                    limit=max_requests,
                    remaining=max_requests,
                    reset_time=now + window_ms,
                    retry_after_ms=0,
                )

            if entry.is_blocked(now):
                return self._blocked_result(entry, now)

            valid = [ts for ts in entry.timestamps if ts > now - window_ms]

        remaining = max(0, max_requests - len(valid))
        allowed = remaining > 0
        oldest = valid[0] if valid else now

        return RateLimitResult(
            allowed=allowed,
            limit=max_requests,
            remaining=remaining,
            reset_time=oldest + window_ms,
            retry_after_ms=0 if allowed else oldest + window_ms - now,
        )

    def reset(self, identifier: str) -> None:
        with self._lock:
            self._entries.pop(identifier, None)

    def cleanup(self) -> int:
        """Drop identifiers with no in-window timestamps and no active block.

        Returns:
            Number of removed identifiers.
        """
        with self._lock:
            now = self._clock()
            window_start = now - self._config.window_ms

            stale = [
                identifier
                for identifier, entry in self._entries.items()
                if not any(ts > window_start for ts in entry.timestamps)
                and not entry.is_blocked(now)
            ]
            for identifier in stale:
                del self._entries[identifier]

            remaining = len(self._entries)

        if stale:
            logger.debug(
                "rate_limit.cleanup",
                extra={"removed": len(stale), "tracked": remaining},
            )
        return len(stale)

    def destroy(self) -> None:
        """Stop the background sweep and clear all stored entries."""
        self._stop_event.set()
        thread = self._cleanup_thread
        self._cleanup_thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)

        with self._lock:
            self._entries.clear()

    def _run_cleanup_loop(self, interval_seconds: float) -> None:
        while not self._stop_event.wait(interval_seconds):
            try:
                self.cleanup()
            except Exception:
                logger.exception("rate_limit.cleanup_failed")

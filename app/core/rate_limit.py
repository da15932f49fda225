"""Rate limiting wiring for FastAPI routes.

This module connects the limiter adapter to the HTTP layer.

Design goals:
- Minimal coupling: routes depend on a dependency function (or call
  ``enforce_rate_limit`` with a domain key) only.
- Independent policies: each named limiter is its own instance with its own
  identifier map and cleanup schedule.
- Safe shutdown: ``shutdown_rate_limiters`` stops every background sweep.

Named limiters:
- ``action``: lenient, general-purpose (participant reads, login attempts).
- ``checkin``: strict, for check-in mutations.
- ``database``: medium, for database status/health probes.
"""

from __future__ import annotations

import logging
import threading
from typing import Awaitable, Callable

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitConfig, RateLimitResult
from app.adapters.rate_limit.in_memory import SlidingWindowRateLimiter
from app.core.config import settings
from app.core.errors import RateLimitedAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

ACTION_LIMITER = "action"
CHECKIN_LIMITER = "checkin"
DATABASE_LIMITER = "database"

ANONYMOUS_IDENTIFIER = "anonymous"

_limiters: dict[str, tuple[AbstractRateLimiter, RateLimitConfig, float]] = {}
_registry_lock = threading.Lock()


def _policy_for(name: str) -> RateLimitConfig:
    """Resolve the configured policy of a named limiter.

    Raises:
        ValueError: If ``name`` is not a known limiter.
    """

    app = settings.app
    policies = {
        ACTION_LIMITER: (app.action_rate_limit_requests, app.action_rate_limit_window_ms),
        CHECKIN_LIMITER: (app.checkin_rate_limit_requests, app.checkin_rate_limit_window_ms),
        DATABASE_LIMITER: (app.database_rate_limit_requests, app.database_rate_limit_window_ms),
    }
    if name not in policies:
        raise ValueError(f"Unknown rate limiter: {name!r}")

    max_requests, window_ms = policies[name]
    return RateLimitConfig(max_requests=max_requests, window_ms=window_ms)


def get_rate_limiter(name: str) -> AbstractRateLimiter:
    """Return the process-wide limiter registered under ``name``.

    Instances are created on first use and cached to preserve state across
    requests. If the configured policy changes (primarily in tests), the old
    instance is destroyed and rebuilt.

    Args:
        name: One of ``ACTION_LIMITER``, ``CHECKIN_LIMITER``, ``DATABASE_LIMITER``.

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """

    config = _policy_for(name)
    interval = settings.app.rate_limit_cleanup_interval_seconds

    with _registry_lock:
        cached = _limiters.get(name)
        if cached is not None and cached[1] == config and cached[2] == interval:
            return cached[0]

        if cached is not None:
            cached[0].destroy()

        limiter = SlidingWindowRateLimiter(config, cleanup_interval_seconds=interval)
        _limiters[name] = (limiter, config, interval)
        logger.info(
            "rate_limit.limiter_created",
            extra={
                "limiter": name,
                "max_requests": config.max_requests,
                "window_ms": config.window_ms,
            },
        )
        return limiter


def shutdown_rate_limiters() -> None:
    """Destroy every registered limiter (stops cleanup threads, drops state)."""

    with _registry_lock:
        limiters = [entry[0] for entry in _limiters.values()]
        _limiters.clear()

    for limiter in limiters:
        limiter.destroy()


def get_client_identifier(request: Request) -> str:
    """Derive the rate limit identifier from client-forwarded address headers.

    Uses the first address of ``X-Forwarded-For``, then ``X-Real-IP``, and
    falls back to a constant sentinel when neither is present.

    Args:
        request: FastAPI request.

    Returns:
        str: Identifier for per-client limiting.
    """

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return ANONYMOUS_IDENTIFIER


def enforce_rate_limit(
    limiter_name: str,
    identifier: str,
    *,
    message: str | None = None,
) -> RateLimitResult | None:
    """Consume one request from ``identifier``'s budget on a named limiter.

    Args:
        limiter_name: Registered limiter to check against.
        identifier: Rate limit key (client address or domain key).
        message: Optional client-facing message used when throttled.

    Returns:
        The admission result, or ``None`` when rate limiting is disabled.

    Raises:
        RateLimitedAppError: When the identifier exceeded its limit.
    """

    if not settings.app.rate_limit_enabled:
        return None

    result = get_rate_limiter(limiter_name).check(identifier)
    identifier_hash = hash_identifier(identifier)

    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "limiter": limiter_name,
                "identifier_hash": identifier_hash,
                "remaining": result.remaining,
            },
        )
        return result

    retry_after = result.retry_after_seconds
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "limiter": limiter_name,
            "identifier_hash": identifier_hash,
            "limit": result.limit,
            "retry_after_s": retry_after,
        },
    )

    raise RateLimitedAppError(
        code="rate_limited",
        message=message or f"Rate limit exceeded. Please try again in {retry_after} seconds.",
        details={
            "limit": result.limit,
            "remaining": result.remaining,
            "reset_time": result.reset_time,
            "retry_after": retry_after,
        },
    )


def rate_limit_by_client(limiter_name: str) -> Callable[[Request], Awaitable[None]]:
    """Build a FastAPI dependency limiting requests per client address.

    Usage:
        @router.post("/checkin", dependencies=[Depends(rate_limit_by_client(CHECKIN_LIMITER))])

    Args:
        limiter_name: Registered limiter to check against.

    Returns:
        Async dependency raising RateLimitedAppError when throttled.
    """

    _policy_for(limiter_name)

    async def _dependency(request: Request) -> None:
        enforce_rate_limit(limiter_name, get_client_identifier(request))

    _dependency.__name__ = f"rate_limit_{limiter_name}"
    return _dependency


enforce_action_rate_limit = rate_limit_by_client(ACTION_LIMITER)
enforce_checkin_rate_limit = rate_limit_by_client(CHECKIN_LIMITER)
enforce_database_rate_limit = rate_limit_by_client(DATABASE_LIMITER)

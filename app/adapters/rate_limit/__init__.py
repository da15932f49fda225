"""Rate limiting adapters.

This package keeps the limiter behind a small abstraction so the in-memory
sliding-window implementation can later be replaced by a shared store without
changing the request-handling layer.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitConfig, RateLimitResult
from app.adapters.rate_limit.in_memory import SlidingWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "RateLimitConfig",
    "RateLimitResult",
    "SlidingWindowRateLimiter",
]

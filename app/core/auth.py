"""Staff API key authentication.

Staff-only endpoints (check-in mutations, participant lookups, database
status) require an ``X-API-Key`` header matching one of the configured keys.
Participants never use API keys; they authenticate with a session cookie
(see ``app.core.session``).

Design principles:
- Configuration-driven: keys come from ``APP_STAFF_API_KEYS``, not code
- Pure validation function, wrapped by a thin FastAPI dependency
- Keys are compared in constant time and only logged hashed
"""

from __future__ import annotations

import hmac
import logging
from typing import Annotated

from fastapi import Header

from app.core.config import settings
from app.core.errors import AuthenticationAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)


def parse_api_keys(keys_string: str | None) -> set[str]:
    """Parse comma-separated API keys into a set.

    Examples:
        >>> parse_api_keys("key1, key2 , key3 ")
        {'key1', 'key2', 'key3'}
        >>> parse_api_keys(None)
        set()
    """
    if not keys_string:
        return set()

    return {key.strip() for key in keys_string.split(",") if key.strip()}


def _matches_any(provided_key: str, valid_keys: set[str]) -> bool:
    provided = provided_key.encode("utf-8")
    # No short-circuit so timing does not depend on which key matched.
    matched = False
    for key in valid_keys:
        matched |= hmac.compare_digest(provided, key.encode("utf-8"))
    return matched


def validate_staff_api_key(provided_key: str | None) -> None:
    """Validate that the provided key matches one of the configured staff keys.

    Args:
        provided_key: API key to validate (may be missing).

    Raises:
        AuthenticationAppError: If the key is missing or invalid, or if
            authentication is required but no keys are configured.
    """
    if not settings.app.staff_api_key_required:
        return

    valid_keys = parse_api_keys(settings.app.staff_api_keys)

    if not valid_keys:
        logger.error(
            "auth.staff_keys_not_configured",
            extra={"auth_required": True},
        )
        raise AuthenticationAppError(
            code="api_keys_not_configured",
            message="Staff authentication is enabled but no valid keys are configured",
            details={
                "hint": "Set APP_STAFF_API_KEYS or disable auth with APP_STAFF_API_KEY_REQUIRED=false"
            },
        )

    if not provided_key:
        logger.warning("auth.missing_key", extra={"api_key_present": False})
        raise AuthenticationAppError(
            code="missing_api_key",
            message="Missing API key. Provide X-API-Key header.",
        )

    if not _matches_any(provided_key, valid_keys):
        logger.warning(
            "auth.invalid_key",
            extra={"api_key_hash": hash_identifier(provided_key)},
        )
        raise AuthenticationAppError(
            code="invalid_api_key",
            message="Invalid or missing API key",
        )


async def verify_staff_api_key(
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> None:
    """FastAPI dependency guarding staff endpoints.

    Usage:
        @router.post("/checkin", dependencies=[Depends(verify_staff_api_key)])

    Raises:
        AuthenticationAppError: Rendered as 403 by the global handler.
    """
    if not settings.app.staff_api_key_required:
        logger.debug("auth.skipped", extra={"reason": "staff_api_key_required_false"})
        return

    validate_staff_api_key(x_api_key)
    logger.debug(
        "auth.success",
        extra={"api_key_hash": hash_identifier(x_api_key or "")},
    )

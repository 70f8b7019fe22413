"""Client authentication for the write endpoints."""

import hmac
import logging

from fastapi import Depends, Request

from slicr.api.deps import get_settings
from slicr.config import Settings
from slicr.errors import AuthConfigurationError, AuthError

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"


def check_credentials(api_key: str | None, origin: str | None, settings: Settings) -> None:
    """Accept a matching API key, or a browser request from an allowed origin.

    Raises:
        AuthError: If the credential is missing or wrong
        AuthConfigurationError: If no API key is configured and the origin
            is not allowed
    """
    if api_key:
        if settings.api_key and hmac.compare_digest(api_key.encode(), settings.api_key.encode()):
            return
        logger.warning("Rejected request with invalid API key")
        raise AuthError("Invalid API key")

    if origin and origin in settings.allowed_origins:
        return

    if not settings.api_key:
        logger.error("No API key configured and origin %r not allowed", origin)
        raise AuthConfigurationError("Server authentication is not configured")

    logger.warning("Rejected request without credentials (origin=%r)", origin)
    raise AuthError("Missing API key")


async def verify_client(request: Request, settings: Settings = Depends(get_settings)) -> None:
    """Dependency guarding endpoints that spend compute or storage."""
    check_credentials(
        request.headers.get(API_KEY_HEADER),
        request.headers.get("origin"),
        settings,
    )

"""Caller API key extraction for the HTTP transport."""

import logging

from assistants_mcp.config.loader import Settings, get_settings
from assistants_mcp.mcp.errors import ErrorCategory, MCPError

logger = logging.getLogger(__name__)

MIN_API_KEY_LENGTH = 10


def extract_bearer_token(authorization: str | None) -> str | None:
    """Extract token from Authorization header."""
    if authorization is None:
        return None

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]


def resolve_api_key(
    path_key: str | None = None,
    authorization: str | None = None,
    settings: Settings | None = None,
) -> str:
    """
    Pick the OpenAI key for a request.

    Order: key in the URL path, then the bearer token, then the configured
    default. The key is forwarded upstream as-is; only its length is checked.

    Raises:
        MCPError: UNAUTHORIZED category when no usable key is found.
    """
    settings = settings or get_settings()
    key = path_key or extract_bearer_token(authorization) or settings.openai_api_key

    if not key or len(key) < MIN_API_KEY_LENGTH:
        logger.warning("Rejected request without a usable API key")
        raise MCPError.from_category(
            ErrorCategory.UNAUTHORIZED,
            "Invalid or missing API key. Provide your OpenAI API key in the URL path "
            "(/mcp/{api_key}) or as 'Authorization: Bearer <key>'.",
        )
    return key

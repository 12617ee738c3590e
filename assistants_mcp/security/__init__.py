"""Security modules."""

from assistants_mcp.security.auth import extract_bearer_token, resolve_api_key

__all__ = ["extract_bearer_token", "resolve_api_key"]

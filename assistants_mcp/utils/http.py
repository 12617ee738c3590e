"""HTTP client utilities with retry and timeout handling."""

import logging

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from assistants_mcp.config.loader import get_settings
from assistants_mcp.mcp.errors import UpstreamServerError

logger = logging.getLogger(__name__)

# Failures worth another attempt; 4xx responses never are
RETRYABLE_ERRORS = (httpx.ConnectError, httpx.TimeoutException, UpstreamServerError)


def create_http_client(
    timeout: float | None = None,
    base_url: str | None = None,
    headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Create an async HTTP client with sensible defaults.

    Args:
        timeout: Request timeout in seconds. Uses default from settings if None.
        base_url: Optional base URL for all requests.
        headers: Extra headers sent with every request.
        transport: Replacement transport, e.g. httpx.MockTransport in tests.

    Returns:
        Configured httpx.AsyncClient instance.
    """
    settings = get_settings()

    if timeout is None:
        timeout = float(settings.request_timeout)

    return httpx.AsyncClient(
        base_url=base_url or "",
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        headers={
            "User-Agent": f"{settings.server_name}/{settings.server_version}",
            **(headers or {}),
        },
        transport=transport,
    )


def http_retry(attempts: int, wait: wait_base | None = None):
    """
    Retry decorator for HTTP requests.

    Retries connection failures, timeouts and 5xx responses with
    exponential backoff, then re-raises the last error.
    """
    return retry(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait or wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )

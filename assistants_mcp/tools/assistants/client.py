"""OpenAI Assistants API (v2) client."""

import logging
from typing import Any

import httpx
from tenacity.wait import wait_base

from assistants_mcp.config.loader import get_settings
from assistants_mcp.mcp.errors import BackendError, UpstreamServerError
from assistants_mcp.utils.http import create_http_client, http_retry

logger = logging.getLogger(__name__)


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _error_message(response: httpx.Response, body: Any) -> str:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return f"HTTP {response.status_code}"


def _list_params(
    limit: int | None = None,
    order: str | None = None,
    after: str | None = None,
    before: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    params = {"limit": limit, "order": order, "after": after, "before": before, **extra}
    return {k: v for k, v in params.items() if v is not None}


class AssistantsClient:
    """
    Client for the OpenAI Assistants REST API.

    One method per operation. Each returns the decoded JSON object or
    raises BackendError carrying the HTTP status (None when no response
    was received).
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_wait: wait_base | None = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.timeout = float(timeout if timeout is not None else settings.request_timeout)
        self.max_retries = max_retries if max_retries is not None else settings.max_retries
        self._transport = transport
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "OpenAI-Beta": settings.openai_beta_header,
            "Content-Type": "application/json",
        }
        self._retry = http_retry(self.max_retries, retry_wait)

    async def _request(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        @self._retry
        async def send() -> httpx.Response:
            async with create_http_client(
                timeout=self.timeout,
                base_url=self.base_url,
                headers=self._headers,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, json=body, params=params)
            if response.status_code >= 500:
                error_body = _error_body(response)
                raise UpstreamServerError(
                    response.status_code, _error_message(response, error_body), error_body
                )
            return response

        logger.debug(f"{method} {path}")
        try:
            response = await send()
        except httpx.TimeoutException as e:
            raise BackendError(
                None, f"Request timed out after {self.timeout:g}s: {method} {path}"
            ) from e
        except httpx.HTTPError as e:
            raise BackendError(None, f"Connection to OpenAI failed: {e}") from e

        if response.status_code >= 400:
            error_body = _error_body(response)
            raise BackendError(
                response.status_code, _error_message(response, error_body), error_body
            )
        return response.json()

    # =========================================================================
    # Assistants
    # =========================================================================

    async def create_assistant(self, request: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/assistants", body=request)

    async def list_assistants(
        self,
        limit: int | None = None,
        order: str | None = None,
        after: str | None = None,
        before: str | None = None,
    ) -> dict[str, Any]:
        return await self._request(
            "GET", "/assistants", params=_list_params(limit, order, after, before)
        )

    async def get_assistant(self, assistant_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/assistants/{assistant_id}")

    async def update_assistant(
        self, assistant_id: str, request: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._request("POST", f"/assistants/{assistant_id}", body=request)

    async def delete_assistant(self, assistant_id: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/assistants/{assistant_id}")

    # =========================================================================
    # Threads
    # =========================================================================

    async def create_thread(self, request: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self._request("POST", "/threads", body=request or {})

    async def get_thread(self, thread_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/threads/{thread_id}")

    async def update_thread(self, thread_id: str, request: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", f"/threads/{thread_id}", body=request)

    async def delete_thread(self, thread_id: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/threads/{thread_id}")

    # =========================================================================
    # Messages
    # =========================================================================

    async def create_message(self, thread_id: str, request: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", f"/threads/{thread_id}/messages", body=request)

    async def list_messages(
        self,
        thread_id: str,
        limit: int | None = None,
        order: str | None = None,
        after: str | None = None,
        before: str | None = None,
        run_id: str | None = None,
    ) -> dict[str, Any]:
        return await self._request(
            "GET",
            f"/threads/{thread_id}/messages",
            params=_list_params(limit, order, after, before, run_id=run_id),
        )

    async def get_message(self, thread_id: str, message_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/threads/{thread_id}/messages/{message_id}")

    async def update_message(
        self, thread_id: str, message_id: str, request: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._request(
            "POST", f"/threads/{thread_id}/messages/{message_id}", body=request
        )

    async def delete_message(self, thread_id: str, message_id: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/threads/{thread_id}/messages/{message_id}")

    # =========================================================================
    # Runs
    # =========================================================================

    async def create_run(self, thread_id: str, request: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", f"/threads/{thread_id}/runs", body=request)

    async def list_runs(
        self,
        thread_id: str,
        limit: int | None = None,
        order: str | None = None,
        after: str | None = None,
        before: str | None = None,
    ) -> dict[str, Any]:
        return await self._request(
            "GET",
            f"/threads/{thread_id}/runs",
            params=_list_params(limit, order, after, before),
        )

    async def get_run(self, thread_id: str, run_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/threads/{thread_id}/runs/{run_id}")

    async def update_run(
        self, thread_id: str, run_id: str, request: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._request("POST", f"/threads/{thread_id}/runs/{run_id}", body=request)

    async def cancel_run(self, thread_id: str, run_id: str) -> dict[str, Any]:
        return await self._request("POST", f"/threads/{thread_id}/runs/{run_id}/cancel")

    async def submit_tool_outputs(
        self, thread_id: str, run_id: str, tool_outputs: list[dict[str, Any]]
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/threads/{thread_id}/runs/{run_id}/submit_tool_outputs",
            body={"tool_outputs": tool_outputs},
        )

    # =========================================================================
    # Run steps
    # =========================================================================

    async def list_run_steps(
        self,
        thread_id: str,
        run_id: str,
        limit: int | None = None,
        order: str | None = None,
        after: str | None = None,
        before: str | None = None,
        include: list[str] | None = None,
    ) -> dict[str, Any]:
        extra = {"include[]": include} if include else {}
        return await self._request(
            "GET",
            f"/threads/{thread_id}/runs/{run_id}/steps",
            params=_list_params(limit, order, after, before, **extra),
        )

    async def get_run_step(self, thread_id: str, run_id: str, step_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/threads/{thread_id}/runs/{run_id}/steps/{step_id}")

    # =========================================================================
    # Key check
    # =========================================================================

    async def validate_api_key(self) -> bool:
        """True if the key is accepted by the API."""
        try:
            await self._request("GET", "/models")
        except BackendError as e:
            logger.info(f"API key check failed: {e.message}")
            return False
        return True

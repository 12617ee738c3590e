"""JSON-RPC 2.0 message processing."""

import json
import logging
from typing import Any

from pydantic import ValidationError

from assistants_mcp.mcp.errors import INVALID_REQUEST, PARSE_ERROR, MCPError
from assistants_mcp.mcp.handlers import MCPHandlers
from assistants_mcp.mcp.models import JsonRpcError, JsonRpcRequest, JsonRpcResponse

logger = logging.getLogger(__name__)


def error_response(request_id: Any, error: MCPError) -> JsonRpcResponse:
    return JsonRpcResponse(id=request_id, error=JsonRpcError(**error.to_dict()))


def _echo_id(data: Any) -> int | str | None:
    """The id to answer an unusable request with, when one can be recovered."""
    if isinstance(data, dict):
        request_id = data.get("id")
        if isinstance(request_id, (int, str)) and not isinstance(request_id, bool):
            return request_id
    return None


class JsonRpcProcessor:
    """Process JSON-RPC 2.0 messages."""

    def __init__(self, handlers: MCPHandlers):
        self.handlers = handlers

    def parse_request(
        self, raw_data: str | bytes
    ) -> tuple[JsonRpcRequest | None, JsonRpcResponse | None]:
        """
        Parse a JSON-RPC request from raw data.

        Returns (request, error_response) tuple. One will be None.
        """
        try:
            if isinstance(raw_data, bytes):
                raw_data = raw_data.decode("utf-8")
            data = json.loads(raw_data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            # Parse errors don't have a request id
            return None, error_response(None, MCPError(PARSE_ERROR, f"Parse error: {e}"))

        return self.validate_envelope(data)

    def validate_envelope(
        self, data: Any
    ) -> tuple[JsonRpcRequest | None, JsonRpcResponse | None]:
        """Check an already decoded message against the request shape."""
        request_id = _echo_id(data)

        if not isinstance(data, dict):
            return None, error_response(
                None, MCPError(INVALID_REQUEST, "Invalid Request: expected a JSON object")
            )

        try:
            request = JsonRpcRequest.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "request"
            return None, error_response(
                request_id,
                MCPError(INVALID_REQUEST, f"Invalid Request: '{field}' {first['msg'].lower()}"),
            )

        if not request.has_id and not request.is_notification:
            return None, error_response(
                None,
                MCPError(
                    INVALID_REQUEST,
                    f"Invalid Request: missing 'id' for method '{request.method}'",
                ),
            )

        return request, None

    async def process_request(self, request: JsonRpcRequest) -> JsonRpcResponse | None:
        """
        Process a validated JSON-RPC request.

        Returns None for notifications.
        """
        result, error = await self.handlers.dispatch(request.method, request.params)

        # Notifications don't get responses
        if request.is_notification:
            if error is not None:
                logger.debug(f"Ignoring error for notification {request.method}: {error}")
            return None

        if error is not None:
            return JsonRpcResponse(id=request.id, error=JsonRpcError(**error))
        return JsonRpcResponse(id=request.id, result=result)

    async def handle_payload(self, data: Any) -> JsonRpcResponse | None:
        """Handle an already decoded message."""
        request, error = self.validate_envelope(data)
        if error is not None:
            return error
        return await self.process_request(request)  # type: ignore[arg-type]

    async def handle_message(self, raw_data: str | bytes) -> JsonRpcResponse | None:
        """
        Handle a raw JSON-RPC message end-to-end.

        Returns a response or None for notifications.
        """
        request, error = self.parse_request(raw_data)
        if error is not None:
            return error
        return await self.process_request(request)  # type: ignore[arg-type]

    def serialize_response(self, response: JsonRpcResponse) -> str:
        """Serialize a JSON-RPC response to a single-line JSON string."""
        return json.dumps(response.model_dump())

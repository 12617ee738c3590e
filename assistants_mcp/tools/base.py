"""Decorator for Backend-bound tool handlers."""

import functools
from typing import Any, Awaitable, Callable

from assistants_mcp.mcp.errors import BackendError, ToolExecutionError, error_from_http_status
from assistants_mcp.mcp.schemas import ToolName

BoundHandler = Callable[[Any, dict[str, Any]], Awaitable[Any]]


def tool(name: ToolName, action: str) -> Callable[[BoundHandler], BoundHandler]:
    """
    Decorator to mark a function as the handler of an MCP tool.

    Usage:
        @tool(ToolName.ASSISTANT_GET, action="get assistant")
        async def get_assistant(client, arguments):
            return await client.get_assistant(arguments["assistant_id"])

    BackendError raised by the handler is translated into a
    ToolExecutionError carrying the categorized MCPError, e.g.
    "Failed to get assistant: Resource not found...".

    The decorated function will have _tool_metadata attached.
    """

    def decorator(func: BoundHandler) -> BoundHandler:
        @functools.wraps(func)
        async def wrapper(client: Any, arguments: dict[str, Any]) -> Any:
            try:
                return await func(client, arguments)
            except BackendError as e:
                error = error_from_http_status(
                    e.status_code, e.body, context=name.value, message=e.message
                )
                raise ToolExecutionError(name.value, f"Failed to {action}", error) from e

        # Attach metadata for registration
        wrapper._tool_metadata = {"name": name, "action": action}  # type: ignore[attr-defined]
        return wrapper

    return decorator


def get_tool_metadata(func: Callable) -> dict[str, Any] | None:
    """Get tool metadata from a decorated function."""
    return getattr(func, "_tool_metadata", None)

"""MCP (Model Context Protocol) implementation with JSON-RPC 2.0."""

from assistants_mcp.mcp.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    ErrorCategory,
    MCPError,
    ProtocolErrorCode,
)
from assistants_mcp.mcp.models import (
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    TextContent,
    Tool,
    ToolCallResult,
)
from assistants_mcp.mcp.registry import ToolRegistry

__all__ = [
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "Tool",
    "TextContent",
    "ToolCallResult",
    "ToolRegistry",
    "MCPError",
    "ErrorCategory",
    "ProtocolErrorCode",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
]

"""Tool registry for managing MCP tools."""

import logging
from typing import Any, Awaitable, Callable, Iterable

from pydantic import BaseModel

from assistants_mcp.mcp.errors import METHOD_NOT_FOUND, MCPError
from assistants_mcp.mcp.models import Tool, ToolAnnotations, ToolsListResult
from assistants_mcp.mcp.pagination import paginate_array, pagination_summary
from assistants_mcp.mcp.schemas import EXPECTED_TOOL_NAMES, ParamSpec, ToolSchema

logger = logging.getLogger(__name__)

# Handlers take coerced arguments and return the Backend's JSON value
ToolHandler = Callable[[dict[str, Any]], Awaitable[Any]]


def build_property(param: ParamSpec) -> dict[str, Any]:
    """JSON Schema property for one declared parameter."""
    prop: dict[str, Any] = {
        "type": param.type.json_type,
        "description": param.description,
    }
    if param.enum:
        prop["enum"] = list(param.enum)
    if param.items:
        prop["items"] = param.items
    return prop


def build_input_schema(schema: ToolSchema) -> dict[str, Any]:
    """Derive a tool's inputSchema from its parameter table entry."""
    return {
        "type": "object",
        "properties": {p.name: build_property(p) for p in schema.params},
        "required": schema.required,
    }


class ToolDefinition:
    """A registered tool with its schema and handler."""

    def __init__(self, schema: ToolSchema, handler: ToolHandler):
        self.schema = schema
        self.handler = handler

    @property
    def name(self) -> str:
        return self.schema.name.value

    def to_mcp_tool(self) -> Tool:
        """Convert to MCP Tool model for protocol responses."""
        return Tool(
            name=self.name,
            description=self.schema.description,
            inputSchema=build_input_schema(self.schema),
            annotations=ToolAnnotations(
                title=self.schema.title,
                readOnlyHint=self.schema.read_only,
                destructiveHint=self.schema.destructive,
            ),
        )


class CompletenessReport(BaseModel):
    """Registered handler names compared with the expected tool set."""

    is_complete: bool
    missing_tools: list[str]
    extra_tools: list[str]


class ToolRegistry:
    """
    Registry for MCP tools.

    Filled once at startup by a provider's register_tools() and read-only
    afterwards. Iteration order is registration order, which is the order
    tools/list advertises.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}

    def register(self, schema: ToolSchema, handler: ToolHandler) -> None:
        """Register a tool with the registry."""
        name = schema.name.value
        if name in self._tools:
            logger.warning(f"Tool '{name}' already registered, overwriting")
        self._tools[name] = ToolDefinition(schema=schema, handler=handler)
        logger.debug(f"Registered tool: {name}")

    def get(self, name: str) -> ToolDefinition | None:
        """Get a tool by name."""
        return self._tools.get(name)

    def resolve(self, name: str) -> ToolDefinition:
        """
        Get a tool by name or fail the request.

        Raises:
            MCPError: METHOD_NOT_FOUND if no tool has that name.
        """
        tool = self.get(name)
        if tool is None:
            raise MCPError(
                METHOD_NOT_FOUND,
                f"Tool not found: {name}",
                {"availableTools": self.names},
            )
        return tool

    def get_handler(self, name: str) -> ToolHandler:
        """Get the handler bound to a tool name."""
        return self.resolve(name).handler

    def list_tools(self) -> list[Tool]:
        """List all registered tools as MCP Tool models."""
        return [tool.to_mcp_tool() for tool in self._tools.values()]

    def list_page(self, cursor: str | None = None, limit: int | None = None) -> ToolsListResult:
        """One page of tool descriptors for tools/list."""
        page = paginate_array(self.list_tools(), cursor=cursor, limit=limit)
        logger.debug("Tools pagination: %s", pagination_summary(page, cursor, limit))
        return ToolsListResult(tools=page.items, nextCursor=page.nextCursor)

    def validate_completeness(
        self, expected: Iterable[str] = EXPECTED_TOOL_NAMES
    ) -> CompletenessReport:
        """Compare registered handlers against the expected tool names."""
        expected = set(expected)
        registered = set(self._tools)
        missing = sorted(expected - registered)
        extra = sorted(registered - expected)
        return CompletenessReport(
            is_complete=not missing and not extra,
            missing_tools=missing,
            extra_tools=extra,
        )

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    @property
    def tool_count(self) -> int:
        """Return the number of registered tools."""
        return len(self._tools)

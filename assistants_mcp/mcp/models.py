"""Pydantic models for MCP JSON-RPC 2.0 protocol."""

from typing import Any, Literal

from pydantic import BaseModel, Field, StrictStr, field_validator

TOOL_NAME_PATTERN = r"^[a-z][a-z0-9-]*[a-z0-9]$"


# =============================================================================
# JSON-RPC 2.0 Base Models
# =============================================================================


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request object."""

    jsonrpc: Literal["2.0"]
    id: int | str | None = None
    method: StrictStr
    params: dict[str, Any] | None = None

    @field_validator("id", mode="before")
    @classmethod
    def reject_bool_id(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("id must be a string, number or null")
        return value

    @property
    def has_id(self) -> bool:
        """True when the client sent an id member (even a null one)."""
        return "id" in self.model_fields_set

    @property
    def is_notification(self) -> bool:
        """Notifications carry no id and expect no response."""
        return not self.has_id and self.method.startswith("notifications/")


class JsonRpcError(BaseModel):
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        data: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            data["data"] = self.data
        return data


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response object."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: int | str | None = None
    result: Any = None
    error: JsonRpcError | None = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        """Exactly one of result/error is emitted."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.model_dump()
        else:
            data["result"] = self.result
        return data


# =============================================================================
# MCP Content Types
# =============================================================================


class TextContent(BaseModel):
    """Text content returned by tools."""

    type: Literal["text"] = "text"
    text: str


# =============================================================================
# MCP Tool Models
# =============================================================================


class ToolAnnotations(BaseModel):
    """Behaviour hints advertised alongside a tool."""

    title: str
    readOnlyHint: bool = False
    destructiveHint: bool = False


class Tool(BaseModel):
    """MCP tool definition (the advertised ToolDescriptor)."""

    name: str = Field(..., pattern=TOOL_NAME_PATTERN, description="Tool name (kebab-case)")
    description: str = Field(..., description="Human-readable description")
    inputSchema: dict[str, Any] = Field(..., description="JSON Schema for tool input")
    annotations: ToolAnnotations | None = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        kwargs.setdefault("exclude_none", True)
        return super().model_dump(**kwargs)


class ToolCallResult(BaseModel):
    """Result of a tool call."""

    content: list[TextContent]
    isError: bool = False

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        """isError is only emitted for failed calls."""
        data: dict[str, Any] = {"content": [c.model_dump() for c in self.content]}
        if self.isError:
            data["isError"] = True
        return data


# =============================================================================
# MCP Protocol Models
# =============================================================================


class ClientInfo(BaseModel):
    """Client information sent during initialization."""

    name: str
    version: str


class ServerInfo(BaseModel):
    """Server information returned during initialization."""

    name: str
    version: str


class Capabilities(BaseModel):
    """Server capabilities."""

    tools: dict[str, Any] = Field(default_factory=lambda: {"listChanged": False})
    resources: dict[str, Any] = Field(
        default_factory=lambda: {"subscribe": False, "listChanged": False}
    )
    prompts: dict[str, Any] = Field(default_factory=lambda: {"listChanged": False})
    completions: dict[str, Any] = Field(default_factory=dict)


class InitializeParams(BaseModel):
    """Parameters for initialize request."""

    protocolVersion: str
    capabilities: dict[str, Any] = Field(default_factory=dict)
    clientInfo: ClientInfo


class InitializeResult(BaseModel):
    """Result of initialize request."""

    protocolVersion: str
    capabilities: Capabilities
    serverInfo: ServerInfo


class ListParams(BaseModel):
    """Parameters shared by the */list methods."""

    cursor: str | None = None


class ToolsListResult(BaseModel):
    """Result of tools/list request."""

    tools: list[Tool]
    nextCursor: str | None = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        data: dict[str, Any] = {"tools": [t.model_dump() for t in self.tools]}
        if self.nextCursor is not None:
            data["nextCursor"] = self.nextCursor
        return data


class ToolCallParams(BaseModel):
    """Parameters for tools/call request."""

    name: StrictStr
    arguments: dict[str, Any] | None = None


class ResourceReadParams(BaseModel):
    """Parameters for resources/read request."""

    uri: StrictStr


class PromptGetParams(BaseModel):
    """Parameters for prompts/get request."""

    name: StrictStr
    arguments: dict[str, Any] | None = None


class CompletionRef(BaseModel):
    """Reference to the prompt or resource being completed."""

    type: str
    name: str | None = None
    uri: str | None = None


class CompletionArgument(BaseModel):
    """The argument being completed and its partial value."""

    name: str
    value: str = ""


class CompletionParams(BaseModel):
    """Parameters for completion/complete request."""

    ref: CompletionRef
    argument: CompletionArgument

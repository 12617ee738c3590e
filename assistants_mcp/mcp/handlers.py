"""MCP method handlers for JSON-RPC requests."""

import json
import logging
from typing import Any, Mapping

from pydantic import BaseModel, ValidationError

from assistants_mcp.config.loader import Settings, get_settings
from assistants_mcp.content.catalog import ContentCatalog
from assistants_mcp.mcp.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    MCPError,
    ToolExecutionError,
)
from assistants_mcp.mcp.models import (
    Capabilities,
    CompletionParams,
    InitializeParams,
    InitializeResult,
    ListParams,
    PromptGetParams,
    ResourceReadParams,
    ServerInfo,
    TextContent,
    ToolCallParams,
    ToolCallResult,
)
from assistants_mcp.mcp.registry import ToolRegistry
from assistants_mcp.mcp.schemas import ToolSchema
from assistants_mcp.mcp.validation import ValidationResult
from assistants_mcp.utils.logging import redact

logger = logging.getLogger(__name__)

MISSING_API_KEY_MESSAGE = (
    "OPENAI_API_KEY environment variable is required. Please configure it in your MCP client."
)


def validate_arguments(schema: ToolSchema, arguments: Mapping[str, Any]) -> ValidationResult:
    """
    Run a tool's declared checks in order and stop at the first failure.

    Absent optional parameters are skipped; absent required parameters go
    through their check, which reports them as missing.
    """
    for param in schema.params:
        value = arguments.get(param.name)
        if value is None and not param.required:
            continue
        if param.check is None:
            continue
        result = param.check(value, arguments)
        if not result.is_valid:
            return result

    for check in schema.checks:
        result = check(arguments)
        if not result.is_valid:
            return result
    return ValidationResult.ok()


def coerce_arguments(schema: ToolSchema, arguments: Mapping[str, Any]) -> dict[str, Any]:
    """Keep declared parameters that carry a value."""
    return {
        name: value
        for name, value in arguments.items()
        if name in schema.param_names and value is not None
    }


def _parse(model: type[BaseModel], params: dict[str, Any] | None, method: str) -> Any:
    try:
        return model.model_validate(params or {})
    except ValidationError as e:
        raise MCPError(
            INVALID_PARAMS,
            f"Invalid params for {method}: {e.errors()[0]['msg']}",
            {"errors": json.loads(e.json(include_url=False))},
        ) from e


class MCPHandlers:
    """
    Handlers for MCP protocol methods.

    Stateless across requests: the registry and catalog are read-only, so
    one instance may serve concurrent requests.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        catalog: ContentCatalog,
        settings: Settings | None = None,
        api_key_configured: bool = True,
    ):
        self.registry = registry
        self.catalog = catalog
        self.settings = settings or get_settings()
        self.api_key_configured = api_key_configured

    async def handle_initialize(self, params: dict[str, Any] | None) -> dict[str, Any]:
        """Handle the initialize request."""
        try:
            init_params = InitializeParams.model_validate(params or {})
            logger.info(
                f"Client initializing: {init_params.clientInfo.name} "
                f"{init_params.clientInfo.version} (protocol {init_params.protocolVersion})"
            )
        except ValidationError as e:
            # Still proceed with defaults
            logger.warning(f"Invalid initialize params: {e}")

        result = InitializeResult(
            protocolVersion=self.settings.protocol_version,
            capabilities=Capabilities(),
            serverInfo=ServerInfo(
                name=self.settings.server_name,
                version=self.settings.server_version,
            ),
        )
        return result.model_dump()

    async def handle_initialized(self, params: dict[str, Any] | None) -> None:
        """Handle the notifications/initialized notification (no response)."""
        logger.info("Client confirmed initialization")
        return None

    async def handle_tools_list(self, params: dict[str, Any] | None) -> dict[str, Any]:
        """Handle the tools/list request."""
        list_params = _parse(ListParams, params, "tools/list")
        return self.registry.list_page(cursor=list_params.cursor).model_dump()

    async def handle_tools_call(self, params: dict[str, Any] | None) -> dict[str, Any]:
        """
        Handle the tools/call request.

        Malformed params, an unknown tool and failed argument validation
        raise MCPError. Once the handler runs, every failure is reported as
        an isError result instead.
        """
        call_params = _parse(ToolCallParams, params, "tools/call")

        if not self.api_key_configured:
            raise MCPError(INVALID_PARAMS, "Invalid params", MISSING_API_KEY_MESSAGE)

        tool = self.registry.resolve(call_params.name)
        arguments = call_params.arguments or {}

        validation = validate_arguments(tool.schema, arguments)
        if not validation.is_valid:
            logger.info(f"Validation failed for {tool.name}: {validation.message}")
            raise validation.error

        logger.info(f"Calling tool: {tool.name}")
        try:
            value = await tool.handler(coerce_arguments(tool.schema, arguments))
        except ToolExecutionError as e:
            logger.warning(
                f"Tool {tool.name} failed: {e} args={redact(arguments)} "
                f"category={e.error.category}"
            )
            return ToolCallResult(content=[TextContent(text=e.text)], isError=True).model_dump()
        except Exception as e:
            logger.exception(f"Error executing tool {tool.name} args={redact(arguments)}")
            return ToolCallResult(
                content=[TextContent(text=f"Error: {e}")], isError=True
            ).model_dump()

        return ToolCallResult(
            content=[TextContent(text=json.dumps(value, indent=2))]
        ).model_dump()

    async def handle_resources_list(self, params: dict[str, Any] | None) -> dict[str, Any]:
        list_params = _parse(ListParams, params, "resources/list")
        return self.catalog.list_resources(cursor=list_params.cursor)

    async def handle_resources_read(self, params: dict[str, Any] | None) -> dict[str, Any]:
        read_params = _parse(ResourceReadParams, params, "resources/read")
        return self.catalog.read_resource(read_params.uri)

    async def handle_prompts_list(self, params: dict[str, Any] | None) -> dict[str, Any]:
        list_params = _parse(ListParams, params, "prompts/list")
        return self.catalog.list_prompts(cursor=list_params.cursor)

    async def handle_prompts_get(self, params: dict[str, Any] | None) -> dict[str, Any]:
        get_params = _parse(PromptGetParams, params, "prompts/get")
        return self.catalog.get_prompt(get_params.name, get_params.arguments)

    async def handle_completion(self, params: dict[str, Any] | None) -> dict[str, Any]:
        completion_params = _parse(CompletionParams, params, "completion/complete")
        return self.catalog.complete(completion_params.ref, completion_params.argument)

    async def dispatch(
        self, method: str, params: dict[str, Any] | None
    ) -> tuple[Any | None, dict[str, Any] | None]:
        """
        Dispatch a method call to the appropriate handler.

        Returns (result, error) tuple. One will be None.
        """
        handlers = {
            "initialize": self.handle_initialize,
            "notifications/initialized": self.handle_initialized,
            "tools/list": self.handle_tools_list,
            "tools/call": self.handle_tools_call,
            "resources/list": self.handle_resources_list,
            "resources/read": self.handle_resources_read,
            "prompts/list": self.handle_prompts_list,
            "prompts/get": self.handle_prompts_get,
            "completion/complete": self.handle_completion,
        }

        handler = handlers.get(method)
        if handler is None:
            return None, MCPError(METHOD_NOT_FOUND, f"Method not found: {method}").to_dict()

        try:
            result = await handler(params)
            return result, None
        except MCPError as e:
            return None, e.to_dict()
        except Exception as e:
            logger.exception(f"Error handling method {method}")
            return None, MCPError(INTERNAL_ERROR, f"Internal error: {e}").to_dict()

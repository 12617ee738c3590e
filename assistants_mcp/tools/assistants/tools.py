"""Assistants API provider tools."""

import functools
import logging
from typing import Any

from assistants_mcp.mcp.registry import ToolRegistry
from assistants_mcp.mcp.schemas import SCHEMAS_BY_NAME, ToolName
from assistants_mcp.tools.assistants.client import AssistantsClient
from assistants_mcp.tools.base import get_tool_metadata, tool

logger = logging.getLogger(__name__)

PAGINATION_KEYS = ("limit", "order", "after", "before")


def _body(arguments: dict[str, Any], *path_keys: str) -> dict[str, Any]:
    """Arguments minus those that go into the URL."""
    return {k: v for k, v in arguments.items() if k not in path_keys}


def _page(arguments: dict[str, Any]) -> dict[str, Any]:
    return {k: arguments[k] for k in PAGINATION_KEYS if k in arguments}


# =============================================================================
# Assistants
# =============================================================================


@tool(ToolName.ASSISTANT_CREATE, action="create assistant")
async def create_assistant(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.create_assistant(arguments)


@tool(ToolName.ASSISTANT_LIST, action="list assistants")
async def list_assistants(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.list_assistants(**_page(arguments))


@tool(ToolName.ASSISTANT_GET, action="get assistant")
async def get_assistant(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.get_assistant(arguments["assistant_id"])


@tool(ToolName.ASSISTANT_UPDATE, action="update assistant")
async def update_assistant(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.update_assistant(
        arguments["assistant_id"], _body(arguments, "assistant_id")
    )


@tool(ToolName.ASSISTANT_DELETE, action="delete assistant")
async def delete_assistant(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.delete_assistant(arguments["assistant_id"])


# =============================================================================
# Threads
# =============================================================================


@tool(ToolName.THREAD_CREATE, action="create thread")
async def create_thread(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.create_thread(arguments)


@tool(ToolName.THREAD_GET, action="get thread")
async def get_thread(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.get_thread(arguments["thread_id"])


@tool(ToolName.THREAD_UPDATE, action="update thread")
async def update_thread(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.update_thread(arguments["thread_id"], _body(arguments, "thread_id"))


@tool(ToolName.THREAD_DELETE, action="delete thread")
async def delete_thread(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.delete_thread(arguments["thread_id"])


# =============================================================================
# Messages
# =============================================================================


@tool(ToolName.MESSAGE_CREATE, action="create message")
async def create_message(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.create_message(arguments["thread_id"], _body(arguments, "thread_id"))


@tool(ToolName.MESSAGE_LIST, action="list messages")
async def list_messages(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.list_messages(
        arguments["thread_id"], run_id=arguments.get("run_id"), **_page(arguments)
    )


@tool(ToolName.MESSAGE_GET, action="get message")
async def get_message(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.get_message(arguments["thread_id"], arguments["message_id"])


@tool(ToolName.MESSAGE_UPDATE, action="update message")
async def update_message(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.update_message(
        arguments["thread_id"],
        arguments["message_id"],
        _body(arguments, "thread_id", "message_id"),
    )


@tool(ToolName.MESSAGE_DELETE, action="delete message")
async def delete_message(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.delete_message(arguments["thread_id"], arguments["message_id"])


# =============================================================================
# Runs
# =============================================================================


@tool(ToolName.RUN_CREATE, action="create run")
async def create_run(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.create_run(arguments["thread_id"], _body(arguments, "thread_id"))


@tool(ToolName.RUN_LIST, action="list runs")
async def list_runs(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.list_runs(arguments["thread_id"], **_page(arguments))


@tool(ToolName.RUN_GET, action="get run")
async def get_run(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.get_run(arguments["thread_id"], arguments["run_id"])


@tool(ToolName.RUN_UPDATE, action="update run")
async def update_run(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.update_run(
        arguments["thread_id"], arguments["run_id"], _body(arguments, "thread_id", "run_id")
    )


@tool(ToolName.RUN_CANCEL, action="cancel run")
async def cancel_run(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.cancel_run(arguments["thread_id"], arguments["run_id"])


@tool(ToolName.RUN_SUBMIT_TOOL_OUTPUTS, action="submit tool outputs")
async def submit_tool_outputs(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.submit_tool_outputs(
        arguments["thread_id"], arguments["run_id"], arguments["tool_outputs"]
    )


# =============================================================================
# Run steps
# =============================================================================


@tool(ToolName.RUN_STEP_LIST, action="list run steps")
async def list_run_steps(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.list_run_steps(
        arguments["thread_id"],
        arguments["run_id"],
        include=arguments.get("include"),
        **_page(arguments),
    )


@tool(ToolName.RUN_STEP_GET, action="get run step")
async def get_run_step(client: AssistantsClient, arguments: dict[str, Any]) -> Any:
    return await client.get_run_step(
        arguments["thread_id"], arguments["run_id"], arguments["step_id"]
    )


HANDLERS = (
    create_assistant,
    list_assistants,
    get_assistant,
    update_assistant,
    delete_assistant,
    create_thread,
    get_thread,
    update_thread,
    delete_thread,
    create_message,
    list_messages,
    get_message,
    update_message,
    delete_message,
    create_run,
    list_runs,
    get_run,
    update_run,
    cancel_run,
    submit_tool_outputs,
    list_run_steps,
    get_run_step,
)


def register_tools(registry: ToolRegistry, client: AssistantsClient) -> None:
    """Register the Assistants API tools, bound to one client, with the registry."""
    for handler in HANDLERS:
        metadata = get_tool_metadata(handler)
        schema = SCHEMAS_BY_NAME[metadata["name"]]
        registry.register(schema, functools.partial(handler, client))
    logger.info(f"Registered {len(HANDLERS)} Assistants API tools")


def create_registry(client: AssistantsClient) -> ToolRegistry:
    """Build a registry holding every Assistants API tool."""
    registry = ToolRegistry()
    register_tools(registry, client)
    return registry

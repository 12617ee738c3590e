"""Tests for tools/call dispatch: validation, execution and error mapping."""

import json

import pytest

from assistants_mcp.mcp.errors import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    BackendError,
)
from assistants_mcp.mcp.handlers import (
    MISSING_API_KEY_MESSAGE,
    MCPHandlers,
    coerce_arguments,
    validate_arguments,
)
from assistants_mcp.mcp.jsonrpc import JsonRpcProcessor
from assistants_mcp.mcp.schemas import SCHEMAS_BY_NAME, ToolName

from fakes import ASSISTANT_ID, CALL_ID, RUN_ID, THREAD_ID


def tool_payload(response: dict) -> dict:
    """Decode the JSON text of a successful tool result."""
    assert "error" not in response, response
    result = response["result"]
    assert "isError" not in result
    return json.loads(result["content"][0]["text"])


class TestValidateArguments:
    def test_declared_order_first_failure_wins(self):
        schema = SCHEMAS_BY_NAME[ToolName.MESSAGE_CREATE]
        result = validate_arguments(schema, {"role": "system", "content": ""})
        # thread_id is declared first
        assert "thread_id" in result.message

    def test_optional_params_skipped_when_absent(self):
        schema = SCHEMAS_BY_NAME[ToolName.ASSISTANT_CREATE]
        assert validate_arguments(schema, {"model": "gpt-4"}).is_valid

    def test_tool_level_check_runs_last(self):
        schema = SCHEMAS_BY_NAME[ToolName.ASSISTANT_LIST]
        result = validate_arguments(schema, {"after": ASSISTANT_ID, "before": ASSISTANT_ID})
        assert "both 'after' and 'before'" in result.message

    def test_pagination_checked_after_declared_params(self):
        schema = SCHEMAS_BY_NAME[ToolName.MESSAGE_LIST]
        result = validate_arguments(schema, {"thread_id": "bad", "limit": 500})
        assert "thread_id" in result.message

        result = validate_arguments(schema, {"thread_id": THREAD_ID, "limit": 500})
        assert "'limit'" in result.message

    def test_tool_resources_checked_against_tools(self):
        schema = SCHEMAS_BY_NAME[ToolName.ASSISTANT_CREATE]
        args = {
            "model": "gpt-4",
            "tools": [{"type": "code_interpreter"}],
            "tool_resources": {"file_search": {"vector_store_ids": ["vs_1"]}},
        }
        result = validate_arguments(schema, args)
        assert not result.is_valid
        assert "file_search" in result.message

    def test_update_without_tools_accepts_tool_resources(self):
        schema = SCHEMAS_BY_NAME[ToolName.ASSISTANT_UPDATE]
        args = {
            "assistant_id": ASSISTANT_ID,
            "tool_resources": {"file_search": {"vector_store_ids": ["vs_1"]}},
        }
        assert validate_arguments(schema, args).is_valid

    def test_coerce_drops_unknown_keys_and_nulls(self):
        schema = SCHEMAS_BY_NAME[ToolName.ASSISTANT_CREATE]
        coerced = coerce_arguments(schema, {"model": "gpt-4", "name": None, "bogus": 1})
        assert coerced == {"model": "gpt-4"}


class TestToolsCallValidation:
    @pytest.mark.asyncio
    async def test_missing_model(self, call_tool, fake_backend):
        response = await call_tool("assistant-create", {"name": "Bot"})

        assert response["error"]["code"] == INVALID_PARAMS
        assert "model" in response["error"]["message"]
        assert "gpt-4" in response["error"]["message"]
        assert fake_backend.calls == []

    @pytest.mark.asyncio
    async def test_bad_assistant_id(self, call_tool, fake_backend):
        response = await call_tool("assistant-get", {"assistant_id": "invalid-id"})

        message = response["error"]["message"]
        assert response["error"]["code"] == INVALID_PARAMS
        assert "asst_" in message
        assert "invalid-id" in message
        assert fake_backend.calls == []

    @pytest.mark.asyncio
    async def test_limit_out_of_range(self, call_tool):
        response = await call_tool("assistant-list", {"limit": 101})
        assert response["error"]["code"] == INVALID_PARAMS
        assert "limit" in response["error"]["message"]

    @pytest.mark.asyncio
    async def test_bool_temperature(self, call_tool):
        response = await call_tool("assistant-create", {"model": "gpt-4", "temperature": True})
        assert response["error"]["code"] == INVALID_PARAMS
        assert "temperature" in response["error"]["message"]

    @pytest.mark.asyncio
    async def test_unknown_tool(self, call_tool):
        response = await call_tool("nonexistent-tool")
        assert response["error"]["code"] == METHOD_NOT_FOUND
        assert "nonexistent-tool" in response["error"]["message"]

    @pytest.mark.asyncio
    async def test_missing_name(self, processor, sample_jsonrpc_request):
        response = await processor.handle_payload(
            sample_jsonrpc_request("tools/call", {"arguments": {}})
        )
        assert response.model_dump()["error"]["code"] == INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_missing_api_key(self, registry, catalog, settings, sample_jsonrpc_request):
        handlers = MCPHandlers(registry, catalog, settings, api_key_configured=False)
        processor = JsonRpcProcessor(handlers)

        response = await processor.handle_payload(
            sample_jsonrpc_request(
                "tools/call", {"name": "assistant-get", "arguments": {"assistant_id": ASSISTANT_ID}}
            )
        )
        error = response.model_dump()["error"]
        assert error["code"] == INVALID_PARAMS
        assert error["message"] == "Invalid params"
        assert error["data"] == MISSING_API_KEY_MESSAGE

    @pytest.mark.asyncio
    async def test_missing_api_key_does_not_block_listing(
        self, registry, catalog, settings, sample_jsonrpc_request
    ):
        processor = JsonRpcProcessor(
            MCPHandlers(registry, catalog, settings, api_key_configured=False)
        )
        response = await processor.handle_payload(sample_jsonrpc_request("tools/list"))
        assert "result" in response.model_dump()


class TestToolsCallExecution:
    @pytest.mark.asyncio
    async def test_create_then_get(self, call_tool, fake_backend):
        created = tool_payload(
            await call_tool(
                "assistant-create",
                {"model": "gpt-4", "name": "Math Tutor", "tools": [{"type": "code_interpreter"}]},
            )
        )
        assert created["id"].startswith("asst_")
        assert created["name"] == "Math Tutor"

        fetched = tool_payload(await call_tool("assistant-get", {"assistant_id": created["id"]}))
        assert fetched == created

    @pytest.mark.asyncio
    async def test_get_is_idempotent(self, call_tool):
        created = tool_payload(await call_tool("assistant-create", {"model": "gpt-4"}))
        first = await call_tool("assistant-get", {"assistant_id": created["id"]})
        second = await call_tool("assistant-get", {"assistant_id": created["id"]})
        assert first["result"] == second["result"]

    @pytest.mark.asyncio
    async def test_result_is_pretty_json(self, call_tool):
        response = await call_tool("thread-create", {})
        text = response["result"]["content"][0]["text"]
        assert response["result"]["content"][0]["type"] == "text"
        assert "\n  " in text

    @pytest.mark.asyncio
    async def test_undeclared_arguments_are_not_forwarded(self, call_tool, fake_backend):
        await call_tool("assistant-create", {"model": "gpt-4", "secret_flag": True})
        name, args, _ = fake_backend.calls[0]
        assert name == "create_assistant"
        assert args[0] == {"model": "gpt-4"}

    @pytest.mark.asyncio
    async def test_path_ids_not_in_body(self, call_tool, fake_backend):
        thread = tool_payload(await call_tool("thread-create", {}))
        await call_tool(
            "message-create",
            {"thread_id": thread["id"], "role": "user", "content": "Hello", "metadata": {"a": "b"}},
        )
        name, args, _ = fake_backend.calls[-1]
        assert name == "create_message"
        assert args == (thread["id"], {"role": "user", "content": "Hello", "metadata": {"a": "b"}})

    @pytest.mark.asyncio
    async def test_conversation_workflow(self, call_tool, fake_backend):
        assistant = tool_payload(await call_tool("assistant-create", {"model": "gpt-4o"}))
        thread = tool_payload(
            await call_tool(
                "thread-create", {"messages": [{"role": "user", "content": "What is 2+2?"}]}
            )
        )
        run = tool_payload(
            await call_tool(
                "run-create", {"thread_id": thread["id"], "assistant_id": assistant["id"]}
            )
        )
        assert run["status"] == "queued"

        messages = tool_payload(
            await call_tool("message-list", {"thread_id": thread["id"], "order": "asc"})
        )
        assert len(messages["data"]) == 1

        cancelled = tool_payload(
            await call_tool("run-cancel", {"thread_id": thread["id"], "run_id": run["id"]})
        )
        assert cancelled["status"] == "cancelling"

    @pytest.mark.asyncio
    async def test_list_forwards_pagination(self, call_tool, fake_backend):
        await call_tool("assistant-list", {"limit": 5, "order": "asc"})
        assert fake_backend.calls[-1] == ("list_assistants", (), {"limit": 5, "order": "asc"})

    @pytest.mark.asyncio
    async def test_submit_tool_outputs(self, call_tool, fake_backend):
        fake_backend.runs[RUN_ID] = {"id": RUN_ID, "thread_id": THREAD_ID, "status": "requires_action"}
        outputs = [{"tool_call_id": CALL_ID, "output": "4"}]

        run = tool_payload(
            await call_tool(
                "run-submit-tool-outputs",
                {"thread_id": THREAD_ID, "run_id": RUN_ID, "tool_outputs": outputs},
            )
        )
        assert run["status"] == "queued"
        assert fake_backend.calls[-1][1] == (THREAD_ID, RUN_ID, outputs)


class TestToolsCallErrors:
    @pytest.mark.asyncio
    async def test_backend_404_is_tool_error(self, call_tool):
        response = await call_tool("assistant-get", {"assistant_id": ASSISTANT_ID})

        assert "error" not in response
        result = response["result"]
        assert result["isError"] is True
        text = result["content"][0]["text"]
        assert text.startswith("Error: Failed to get assistant:")
        assert "category: resource" in text
        assert "HTTP 404" in text

    @pytest.mark.parametrize(
        "status,category",
        [
            (401, "authentication"),
            (403, "authorization"),
            (429, "rate_limiting"),
            (500, "internal"),
        ],
    )
    @pytest.mark.asyncio
    async def test_backend_status_categories(self, call_tool, fake_backend, status, category):
        fake_backend.fail_with = BackendError(status, "upstream says no", {"error": {"message": "upstream says no"}})

        response = await call_tool("assistant-list", {})

        text = response["result"]["content"][0]["text"]
        assert response["result"]["isError"] is True
        assert f"category: {category}" in text
        assert f"HTTP {status}" in text

    @pytest.mark.asyncio
    async def test_connection_failure(self, call_tool, fake_backend):
        fake_backend.fail_with = BackendError(None, "Connection to OpenAI failed: refused")

        response = await call_tool("thread-create", {})

        text = response["result"]["content"][0]["text"]
        assert response["result"]["isError"] is True
        assert "Connection to OpenAI failed" in text
        assert "category: internal" in text

    @pytest.mark.asyncio
    async def test_unexpected_handler_exception(self, handlers, processor, sample_jsonrpc_request):
        async def broken(arguments):
            raise RuntimeError("boom")

        handlers.registry.register(SCHEMAS_BY_NAME[ToolName.THREAD_CREATE], broken)

        response = await processor.handle_payload(
            sample_jsonrpc_request("tools/call", {"name": "thread-create", "arguments": {}})
        )
        result = response.model_dump()["result"]
        assert result["isError"] is True
        assert result["content"][0]["text"] == "Error: boom"


class TestDispatch:
    @pytest.mark.asyncio
    async def test_unknown_method(self, handlers):
        result, error = await handlers.dispatch("resources/subscribe", {})
        assert result is None
        assert error["code"] == METHOD_NOT_FOUND
        assert error["message"] == "Method not found: resources/subscribe"

    @pytest.mark.asyncio
    async def test_missing_method_is_invalid_request(self, processor):
        response = await processor.handle_payload({"jsonrpc": "2.0", "id": 3})
        data = response.model_dump()
        assert data["id"] == 3
        assert data["error"]["code"] == INVALID_REQUEST

    @pytest.mark.asyncio
    async def test_unexpected_error_is_internal(self, handlers, monkeypatch):
        async def explode(params):
            raise RuntimeError("kaput")

        monkeypatch.setattr(handlers, "handle_tools_list", explode)
        result, error = await handlers.dispatch("tools/list", {})
        assert error["code"] == -32603
        assert "kaput" in error["message"]

"""Tests for the parameter schema table and the tool registry."""

import pytest

from assistants_mcp.mcp.errors import METHOD_NOT_FOUND, MCPError
from assistants_mcp.mcp.registry import ToolRegistry, build_input_schema
from assistants_mcp.mcp.schemas import (
    EXPECTED_TOOL_NAMES,
    SCHEMAS_BY_NAME,
    TOOL_SCHEMAS,
    ToolName,
)
from assistants_mcp.mcp.validation import validate_pagination_params
from assistants_mcp.tools.assistants.tools import HANDLERS, create_registry
from assistants_mcp.tools.base import get_tool_metadata

from fakes import FakeAssistantsClient


class TestSchemaTable:
    def test_twenty_two_tools(self):
        assert len(TOOL_SCHEMAS) == 22
        assert len(EXPECTED_TOOL_NAMES) == 22
        assert {s.name.value for s in TOOL_SCHEMAS} == EXPECTED_TOOL_NAMES

    def test_names_are_kebab_case(self):
        for name in EXPECTED_TOOL_NAMES:
            assert name == name.lower()
            assert "_" not in name

    def test_assistant_create_requires_only_model(self):
        schema = SCHEMAS_BY_NAME[ToolName.ASSISTANT_CREATE]
        assert schema.required == ["model"]

    def test_message_create_required(self):
        schema = SCHEMAS_BY_NAME[ToolName.MESSAGE_CREATE]
        assert schema.required == ["thread_id", "role", "content"]

    def test_submit_tool_outputs_required(self):
        schema = SCHEMAS_BY_NAME[ToolName.RUN_SUBMIT_TOOL_OUTPUTS]
        assert schema.required == ["thread_id", "run_id", "tool_outputs"]

    def test_every_parameter_is_checked(self):
        for schema in TOOL_SCHEMAS:
            grouped = set()
            if validate_pagination_params in schema.checks:
                grouped = {"limit", "order", "after", "before"}
            for param in schema.params:
                if param.name in grouped:
                    assert param.check is None
                else:
                    assert param.check is not None, f"{schema.name.value}.{param.name}"

    def test_list_tools_check_pagination_as_a_group(self):
        for schema in TOOL_SCHEMAS:
            if schema.name.value.endswith("-list"):
                assert schema.checks == (validate_pagination_params,)

    def test_list_tools_are_read_only(self):
        for schema in TOOL_SCHEMAS:
            if schema.name.value.endswith(("-list", "-get")):
                assert schema.read_only
                assert not schema.destructive

    def test_delete_tools_are_destructive(self):
        destructive = {s.name.value for s in TOOL_SCHEMAS if s.destructive}
        assert destructive == {
            "assistant-delete",
            "thread-delete",
            "message-delete",
        }


class TestInputSchema:
    def test_shape(self):
        schema = build_input_schema(SCHEMAS_BY_NAME[ToolName.ASSISTANT_LIST])
        assert schema["type"] == "object"
        assert set(schema["properties"]) == {"limit", "order", "after", "before"}
        assert schema["required"] == []

    def test_enum_is_advertised_as_string(self):
        schema = build_input_schema(SCHEMAS_BY_NAME[ToolName.MESSAGE_CREATE])
        role = schema["properties"]["role"]
        assert role["type"] == "string"
        assert role["enum"] == ["user", "assistant"]

    def test_array_items_are_advertised(self):
        schema = build_input_schema(SCHEMAS_BY_NAME[ToolName.ASSISTANT_CREATE])
        tools = schema["properties"]["tools"]
        assert tools["type"] == "array"
        assert tools["items"]["required"] == ["type"]

    def test_required_properties_exist(self):
        for tool_schema in TOOL_SCHEMAS:
            schema = build_input_schema(tool_schema)
            for name in schema["required"]:
                assert name in schema["properties"]


class TestRegistry:
    def test_every_handler_is_decorated(self):
        names = {get_tool_metadata(h)["name"].value for h in HANDLERS}
        assert names == EXPECTED_TOOL_NAMES

    def test_create_registry_is_complete(self, registry):
        report = registry.validate_completeness()
        assert report.is_complete
        assert report.missing_tools == []
        assert report.extra_tools == []
        assert registry.tool_count == 22

    def test_registration_order_follows_table(self, registry):
        assert registry.names == [s.name.value for s in TOOL_SCHEMAS]

    def test_missing_tools_reported(self):
        registry = ToolRegistry()
        registry.register(SCHEMAS_BY_NAME[ToolName.ASSISTANT_GET], lambda args: None)
        report = registry.validate_completeness()
        assert not report.is_complete
        assert "assistant-create" in report.missing_tools
        assert "assistant-get" not in report.missing_tools

    def test_extra_tools_reported(self, registry):
        report = registry.validate_completeness(expected=EXPECTED_TOOL_NAMES - {"run-cancel"})
        assert not report.is_complete
        assert report.extra_tools == ["run-cancel"]

    def test_resolve_unknown_tool(self, registry):
        with pytest.raises(MCPError) as exc_info:
            registry.resolve("nonexistent-tool")
        assert exc_info.value.code == METHOD_NOT_FOUND
        assert "nonexistent-tool" in exc_info.value.message
        assert len(exc_info.value.data["availableTools"]) == 22

    def test_get_unknown_tool_returns_none(self, registry):
        assert registry.get("nonexistent-tool") is None

    def test_reregistering_overwrites(self, registry):
        schema = SCHEMAS_BY_NAME[ToolName.THREAD_GET]

        async def replacement(arguments):
            return {"replaced": True}

        registry.register(schema, replacement)
        assert registry.tool_count == 22
        assert registry.get_handler("thread-get") is replacement

    def test_descriptor_annotations(self, registry):
        tool = registry.get("assistant-delete").to_mcp_tool().model_dump()
        assert tool["annotations"]["title"] == "Delete Assistant"
        assert tool["annotations"]["destructiveHint"] is True
        assert tool["annotations"]["readOnlyHint"] is False


class TestListPage:
    def test_pages_cover_every_tool_once(self, registry):
        seen = []
        cursor = None
        pages = 0
        while True:
            page = registry.list_page(cursor=cursor)
            seen.extend(t.name for t in page.tools)
            pages += 1
            cursor = page.nextCursor
            if cursor is None:
                break

        assert pages == 3
        assert len(seen) == 22
        assert set(seen) == EXPECTED_TOOL_NAMES

    def test_first_page_has_default_size(self, registry):
        page = registry.list_page()
        assert len(page.tools) == 10
        assert page.nextCursor is not None

    def test_dump_omits_cursor_on_last_page(self):
        registry = create_registry(FakeAssistantsClient())
        page = registry.list_page(limit=50).model_dump()
        assert len(page["tools"]) == 22
        assert "nextCursor" not in page

"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from assistants_mcp.config.loader import DEFAULT_CONTENT_DIR, get_settings
from assistants_mcp.content.catalog import ContentCatalog
from assistants_mcp.main import app
from assistants_mcp.mcp.handlers import MCPHandlers
from assistants_mcp.mcp.jsonrpc import JsonRpcProcessor
from assistants_mcp.tools.assistants.tools import create_registry

from fakes import FakeAssistantsClient


@pytest.fixture
def client():
    """Synchronous test client for FastAPI app."""
    return TestClient(app)


@pytest.fixture
def settings():
    """Get application settings."""
    return get_settings()


@pytest.fixture
def fake_backend():
    return FakeAssistantsClient()


@pytest.fixture
def registry(fake_backend):
    """A registry whose tools are bound to the in-memory backend."""
    return create_registry(fake_backend)


@pytest.fixture(scope="session")
def catalog():
    return ContentCatalog.load(DEFAULT_CONTENT_DIR)


@pytest.fixture
def handlers(registry, catalog, settings):
    return MCPHandlers(registry, catalog, settings)


@pytest.fixture
def processor(handlers):
    return JsonRpcProcessor(handlers)


@pytest.fixture
def http_backend(monkeypatch, fake_backend):
    """Route the HTTP transport's Backend to the in-memory fake."""
    monkeypatch.setattr("assistants_mcp.main.AssistantsClient", lambda api_key: fake_backend)
    return fake_backend


@pytest.fixture
def sample_jsonrpc_request():
    """Sample JSON-RPC request factory."""

    def _make_request(method: str, params: dict = None, id: int = 1):
        return {
            "jsonrpc": "2.0",
            "id": id,
            "method": method,
            "params": params or {},
        }

    return _make_request


@pytest.fixture
def call_tool(processor, sample_jsonrpc_request):
    """Send a tools/call through the full processor and return the response dict."""

    async def _call(name: str, arguments: dict | None = None, id: int = 1) -> dict:
        response = await processor.handle_payload(
            sample_jsonrpc_request("tools/call", {"name": name, "arguments": arguments or {}}, id)
        )
        return response.model_dump()

    return _call

"""Tests for API key resolution and log redaction."""

import io
import json

import pytest

from assistants_mcp.config.loader import Settings
from assistants_mcp.mcp.errors import INTERNAL_ERROR, MCPError
from assistants_mcp.security.auth import extract_bearer_token, resolve_api_key
from assistants_mcp.utils.logging import (
    REDACTED,
    get_logger,
    get_request_id,
    redact,
    set_request_id,
    setup_logging,
)

from fakes import API_KEY


class TestBearerToken:
    @pytest.mark.parametrize(
        "header,expected",
        [
            (None, None),
            ("Bearer abc", "abc"),
            ("bearer abc", "abc"),
            ("Basic abc", None),
            ("Bearer", None),
            ("Bearer a b", None),
        ],
    )
    def test_extract(self, header, expected):
        assert extract_bearer_token(header) == expected


class TestResolveApiKey:
    def test_path_key_first(self):
        key = resolve_api_key("sk-path-0123456789", f"Bearer {API_KEY}", Settings(openai_api_key=""))
        assert key == "sk-path-0123456789"

    def test_bearer_then_settings(self):
        settings = Settings(openai_api_key="sk-default-0123456789")
        assert resolve_api_key(None, f"Bearer {API_KEY}", settings) == API_KEY
        assert resolve_api_key(None, None, settings) == "sk-default-0123456789"

    def test_missing_key(self):
        with pytest.raises(MCPError) as exc_info:
            resolve_api_key(None, None, Settings(openai_api_key=""))

        assert exc_info.value.code == INTERNAL_ERROR
        assert exc_info.value.category == "authentication"

    def test_short_key(self):
        with pytest.raises(MCPError):
            resolve_api_key("sk-123", None, Settings(openai_api_key=""))


class TestRedact:
    def test_masks_sensitive_keys(self):
        value = {"api_key": "sk-1", "Authorization": "Bearer x", "name": "Bot"}
        assert redact(value) == {"api_key": REDACTED, "Authorization": REDACTED, "name": "Bot"}

    def test_nested(self):
        value = {"metadata": {"access_token": "t"}, "items": [{"password": "p", "ok": 1}]}
        assert redact(value) == {
            "metadata": {"access_token": REDACTED},
            "items": [{"password": REDACTED, "ok": 1}],
        }

    def test_does_not_modify_input(self):
        value = {"secret": "s"}
        redact(value)
        assert value == {"secret": "s"}


class TestLogging:
    def test_request_id(self):
        assert set_request_id("req-1") == "req-1"
        assert get_request_id() == "req-1"
        assert len(set_request_id()) == 8

    def test_structured_lines_go_to_stream(self, monkeypatch):
        stream = io.StringIO()
        monkeypatch.setattr(
            "assistants_mcp.utils.logging.get_settings",
            lambda: Settings(log_format="json", log_level="INFO"),
        )
        setup_logging(stream=stream)
        set_request_id("abc")

        get_logger("test").info("hello", tool="assistant-get")

        line = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert line["event"] == "hello"
        assert line["tool"] == "assistant-get"
        assert line["request_id"] == "abc"
        assert line["level"] == "info"

"""Structured logging setup."""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any, TextIO

import structlog

from assistants_mcp.config.loader import get_settings

# Context variable for request ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

SENSITIVE_KEYS = ("api_key", "apikey", "token", "password", "secret", "authorization")
REDACTED = "[REDACTED]"


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID for the current context."""
    if request_id is None:
        request_id = str(uuid.uuid4())[:8]
    request_id_var.set(request_id)
    return request_id


def add_request_id(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add request ID to log records."""
    request_id = get_request_id()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def redact(value: Any) -> Any:
    """Copy of value with credential-looking keys masked, for logging arguments."""
    if isinstance(value, dict):
        return {
            k: REDACTED
            if isinstance(k, str) and any(s in k.lower() for s in SENSITIVE_KEYS)
            else redact(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [redact(v) for v in value]
    return value


def setup_logging(stream: TextIO | None = None) -> None:
    """
    Set up structured logging.

    Args:
        stream: Where log lines go. The stdio transport passes sys.stderr
            because stdout carries protocol frames.
    """
    settings = get_settings()
    stream = stream or sys.stdout
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_request_id,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    # Also configure standard library logging
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=stream,
        level=level,
        force=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger."""
    return structlog.get_logger(name)

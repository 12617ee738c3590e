"""JSON-RPC 2.0 error codes, error categories and error response helpers."""

from enum import Enum, IntEnum
from typing import Any


class ProtocolErrorCode(IntEnum):
    """Standard JSON-RPC 2.0 error codes. The only codes sent as error.code."""

    PARSE_ERROR = -32700  # Invalid JSON was received
    INVALID_REQUEST = -32600  # The JSON sent is not a valid Request object
    METHOD_NOT_FOUND = -32601  # The method does not exist / is not available
    INVALID_PARAMS = -32602  # Invalid method parameter(s)
    INTERNAL_ERROR = -32603  # Internal JSON-RPC error


# Aliases kept for callers that compare against plain ints
PARSE_ERROR = ProtocolErrorCode.PARSE_ERROR
INVALID_REQUEST = ProtocolErrorCode.INVALID_REQUEST
METHOD_NOT_FOUND = ProtocolErrorCode.METHOD_NOT_FOUND
INVALID_PARAMS = ProtocolErrorCode.INVALID_PARAMS
INTERNAL_ERROR = ProtocolErrorCode.INTERNAL_ERROR


class ErrorCategory(Enum):
    """
    Fine-grained failure categories derived from upstream HTTP statuses.

    Each member carries the legacy server-defined code older clients
    relied on, the standard code it is reported under, a stable category
    string and a documentation hint. The category only travels inside
    error.data.
    """

    UNAUTHORIZED = (
        -32001,
        ProtocolErrorCode.INTERNAL_ERROR,
        "authentication",
        "https://platform.openai.com/docs/api-reference/authentication",
    )
    FORBIDDEN = (
        -32002,
        ProtocolErrorCode.INTERNAL_ERROR,
        "authorization",
        "https://platform.openai.com/docs/guides/error-codes",
    )
    # NOT_FOUND and RATE_LIMITED report as INVALID_PARAMS for compatibility
    # with existing clients; see DESIGN.md.
    NOT_FOUND = (
        -32003,
        ProtocolErrorCode.INVALID_PARAMS,
        "resource",
        "https://platform.openai.com/docs/api-reference/assistants",
    )
    RATE_LIMITED = (
        -32004,
        ProtocolErrorCode.INVALID_PARAMS,
        "rate_limiting",
        "https://platform.openai.com/docs/guides/rate-limits",
    )
    INTERNAL = (
        ProtocolErrorCode.INTERNAL_ERROR.value,
        ProtocolErrorCode.INTERNAL_ERROR,
        "internal",
        "https://platform.openai.com/docs/guides/error-codes",
    )

    def __init__(
        self,
        legacy_code: int,
        standard_code: ProtocolErrorCode,
        label: str,
        documentation: str,
    ) -> None:
        self.legacy_code = legacy_code
        self.standard_code = standard_code
        self.label = label
        self.documentation = documentation

    @classmethod
    def from_http_status(cls, status: int) -> "ErrorCategory":
        """Map an upstream HTTP status to its category."""
        return _STATUS_CATEGORIES.get(status, cls.INTERNAL)


_STATUS_CATEGORIES = {
    401: ErrorCategory.UNAUTHORIZED,
    403: ErrorCategory.FORBIDDEN,
    404: ErrorCategory.NOT_FOUND,
    429: ErrorCategory.RATE_LIMITED,
}

_CATEGORY_MESSAGES = {
    ErrorCategory.UNAUTHORIZED: "Authentication failed. Please check your API key.",
    ErrorCategory.FORBIDDEN: "Access forbidden. Please check your permissions.",
    ErrorCategory.NOT_FOUND: "Resource not found. Please check the ID and try again.",
    ErrorCategory.RATE_LIMITED: "Rate limit exceeded. Please wait and try again.",
}


def error_message(code: int) -> str:
    """Get the standard message for a JSON-RPC error code."""
    messages = {
        PARSE_ERROR: "Parse error",
        INVALID_REQUEST: "Invalid Request",
        METHOD_NOT_FOUND: "Method not found",
        INVALID_PARAMS: "Invalid params",
        INTERNAL_ERROR: "Internal error",
    }
    return messages.get(code, "Unknown error")


def make_error_data(code: int, message: str | None = None, data: Any = None) -> dict[str, Any]:
    """Create an error object for JSON-RPC response."""
    error: dict[str, Any] = {
        "code": int(code),
        "message": message or error_message(code),
    }
    if data is not None:
        error["data"] = data
    return error


class MCPError(Exception):
    """An error that is reported to the client as a JSON-RPC error object."""

    def __init__(self, code: ProtocolErrorCode, message: str, data: Any = None):
        super().__init__(message)
        self.code = ProtocolErrorCode(code)
        self.message = message
        self.data = data

    @classmethod
    def from_category(
        cls, category: ErrorCategory, message: str, **extra: Any
    ) -> "MCPError":
        """Build an error whose fine-grained category travels in data."""
        data: dict[str, Any] = {
            "originalCode": category.legacy_code,
            "category": category.label,
            "documentation": category.documentation,
        }
        data.update({k: v for k, v in extra.items() if v is not None})
        return cls(category.standard_code, message, data)

    @property
    def category(self) -> str | None:
        """The category label carried in data, if any."""
        if isinstance(self.data, dict):
            return self.data.get("category")
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize as a JSON-RPC error object."""
        return make_error_data(self.code, self.message, self.data)


class BackendError(Exception):
    """
    An upstream REST call failed.

    status_code is None when no HTTP response was received at all
    (connection failure or timeout after retries).
    """

    def __init__(self, status_code: int | None, message: str, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.body = body


class UpstreamServerError(BackendError):
    """A 5xx response. The only status class that is retried."""


class ToolExecutionError(Exception):
    """A tool ran and failed. Reported inside a successful tools/call result."""

    def __init__(self, tool_name: str, action: str, error: MCPError):
        super().__init__(f"{action}: {error.message}")
        self.tool_name = tool_name
        self.action = action
        self.error = error

    @property
    def text(self) -> str:
        """Caller-facing text for the isError result."""
        details = [f"category: {self.error.category or 'internal'}"]
        if isinstance(self.error.data, dict) and self.error.data.get("httpStatus"):
            details.append(f"HTTP {self.error.data['httpStatus']}")
        return f"Error: {self} ({', '.join(details)})"


def error_from_http_status(
    status: int | None,
    body: Any = None,
    context: str | None = None,
    message: str | None = None,
) -> MCPError:
    """
    Translate an upstream HTTP failure into an MCPError.

    401/403/404/429 get a stable category message. Anything else keeps
    the upstream message when one is present, then the given message.
    """
    category = ErrorCategory.from_http_status(status)
    if category is ErrorCategory.INTERNAL:
        text = _upstream_message(body) or message or f"HTTP {status}: Request failed"
        return MCPError.from_category(
            category,
            text,
            httpStatus=status,
            openaiError=body,
            context=context,
        )

    return MCPError.from_category(
        category,
        _CATEGORY_MESSAGES[category],
        httpStatus=status,
        openaiError=body,
        context=context,
        retryAfter="60s" if category is ErrorCategory.RATE_LIMITED else None,
    )


def _upstream_message(body: Any) -> str | None:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return None

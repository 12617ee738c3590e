"""
Validation primitives for tool arguments.

Every function checks one value against one rule and returns a
ValidationResult instead of raising. Failure messages are written to be
read by the calling model: they name the parameter, show what was
received when that helps, state what is expected and give an example.
"""

import json
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from assistants_mcp.mcp.errors import INVALID_PARAMS, MCPError

API_DOCS = "docs://openai-assistants-api"
BEST_PRACTICES = "docs://best-practices"

METADATA_MAX_BYTES = 16384

SUPPORTED_MODELS = (
    "gpt-4",
    "gpt-4o",
    "gpt-4o-mini",
    "gpt-4-turbo",
    "gpt-4-turbo-preview",
    "gpt-4-0125-preview",
    "gpt-4-1106-preview",
    "gpt-4-vision-preview",
    "gpt-4.1",
    "gpt-4.1-mini",
    "gpt-4.1-nano",
    "gpt-3.5-turbo",
    "gpt-3.5-turbo-0125",
    "gpt-3.5-turbo-1106",
    "gpt-3.5-turbo-16k",
)

TOOL_TYPES = ("code_interpreter", "file_search", "function")
MESSAGE_ROLES = ("user", "assistant")
SORT_ORDERS = ("asc", "desc")

_ID_EXAMPLE_SUFFIX = "abc123def456ghi789jkl012"


class ResourceKind(Enum):
    """OpenAI object kinds whose IDs we validate, with their ID prefix."""

    ASSISTANT = "asst_"
    THREAD = "thread_"
    MESSAGE = "msg_"
    RUN = "run_"
    STEP = "step_"
    FILE = "file-"
    TOOL_CALL = "call_"

    @property
    def pattern(self) -> re.Pattern[str]:
        return re.compile(rf"^{re.escape(self.value)}[A-Za-z0-9]{{24}}$")

    @property
    def example(self) -> str:
        return f"{self.value}{_ID_EXAMPLE_SUFFIX}"

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", " ")


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a single validation check."""

    is_valid: bool
    error: MCPError | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return _OK

    @classmethod
    def fail(cls, message: str) -> "ValidationResult":
        return cls(False, MCPError(INVALID_PARAMS, message))

    @property
    def message(self) -> str | None:
        return self.error.message if self.error else None


_OK = ValidationResult(True)


def json_type(value: Any) -> str:
    """Name a Python value by its JSON type, for error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def is_number(value: Any) -> bool:
    """True for real numbers. bool is an int subclass and is excluded, as is NaN."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def _examples_text(examples: Sequence[str] | None) -> str:
    return f" Examples: {', '.join(examples)}." if examples else ""


def validate_required_string(
    value: Any, param_name: str, examples: Sequence[str] | None = None
) -> ValidationResult:
    """Value must be present, a string, and not blank."""
    if value is None:
        return ValidationResult.fail(
            f"Required parameter '{param_name}' is missing. Provide a non-empty string value."
            f"{_examples_text(examples)} See {API_DOCS} for parameter specifications."
        )
    if not isinstance(value, str):
        return ValidationResult.fail(
            f"Parameter '{param_name}' must be a string, but received: {json_type(value)}."
            f"{_examples_text(examples)}"
        )
    if not value.strip():
        return ValidationResult.fail(
            f"Parameter '{param_name}' cannot be empty. Provide a non-empty string value."
            f"{_examples_text(examples)}"
        )
    return ValidationResult.ok()


def validate_optional_string(
    value: Any, param_name: str, example: str | None = None
) -> ValidationResult:
    """Absent is fine; present must be a string."""
    if value is None or isinstance(value, str):
        return ValidationResult.ok()
    hint = f" Example: {json.dumps(example)}." if example else ""
    return ValidationResult.fail(
        f"Parameter '{param_name}' must be a string, but received: {json_type(value)}.{hint}"
    )


def validate_enum(
    value: Any, param_name: str, allowed: Sequence[str], default: Any = None
) -> ValidationResult:
    """
    Value must be one of allowed.

    An absent value passes when a default exists; the caller applies it.
    """
    allowed_text = ", ".join(allowed)
    if value is None:
        if default is not None:
            return ValidationResult.ok()
        return ValidationResult.fail(
            f"Required parameter '{param_name}' is missing. Allowed values: {allowed_text}. "
            f"See {API_DOCS} for parameter specifications."
        )
    if not isinstance(value, str) or value not in allowed:
        return ValidationResult.fail(
            f"Invalid value '{value}' for parameter '{param_name}'. Allowed values: "
            f"{allowed_text}. Example: {param_name}: \"{allowed[0]}\"."
        )
    return ValidationResult.ok()


def validate_numeric_range(
    value: Any,
    param_name: str,
    minimum: float,
    maximum: float,
    default: float | None = None,
) -> ValidationResult:
    """Value must be a number within [minimum, maximum]."""
    if value is None:
        if default is not None:
            return ValidationResult.ok()
        return ValidationResult.fail(
            f"Required parameter '{param_name}' is missing. Provide a number between "
            f"{minimum} and {maximum} (inclusive). See {API_DOCS} for parameter specifications."
        )
    if not is_number(value):
        example = min(maximum, max(minimum, default if default is not None else minimum))
        return ValidationResult.fail(
            f"Parameter '{param_name}' must be a valid number between {minimum} and {maximum} "
            f"(inclusive), but received: {value!r}. Example: {param_name}: {example}."
        )
    if value < minimum or value > maximum:
        return ValidationResult.fail(
            f"Parameter '{param_name}' must be between {minimum} and {maximum} (inclusive), "
            f"but received: {value}. Adjust the value to be within the valid range. "
            f"See {API_DOCS} for parameter limits."
        )
    return ValidationResult.ok()


def validate_openai_id(value: Any, param_name: str, kind: ResourceKind) -> ValidationResult:
    """Value must be an ID of the given kind, e.g. asst_ followed by 24 alphanumerics."""
    expected = f"'{kind.value}' followed by 24 alphanumeric characters (e.g., '{kind.example}')"
    if value is None or (isinstance(value, str) and not value.strip()):
        return ValidationResult.fail(
            f"Required parameter '{param_name}' is missing. Provide a valid {kind.label} ID "
            f"in format {expected}. See {API_DOCS} for more information."
        )
    if not isinstance(value, str):
        return ValidationResult.fail(
            f"Parameter '{param_name}' must be a string, but received: {json_type(value)}. "
            f"Expected {kind.label} ID format: {expected}."
        )
    if not kind.pattern.match(value):
        return ValidationResult.fail(
            f"Invalid {kind.label} ID format for parameter '{param_name}'. Expected {expected}, "
            f"but received: '{value}'. See {API_DOCS} for ID format specifications."
        )
    return ValidationResult.ok()


def validate_model(value: Any, param_name: str = "model") -> ValidationResult:
    """Value must name a supported model."""
    if value is None:
        return ValidationResult.fail(
            f"Required parameter '{param_name}' is missing. Specify a supported model like "
            f"'gpt-4', 'gpt-4o', 'gpt-4-turbo', or 'gpt-3.5-turbo'. "
            f"See {API_DOCS} for the complete list of supported models."
        )
    if not isinstance(value, str):
        return ValidationResult.fail(
            f"Parameter '{param_name}' must be a string, but received: {json_type(value)}. "
            f"Supported models include: {', '.join(SUPPORTED_MODELS)}."
        )
    if value not in SUPPORTED_MODELS:
        return ValidationResult.fail(
            f"Invalid model '{value}' for parameter '{param_name}'. Supported models include: "
            f"{', '.join(SUPPORTED_MODELS)}. See assistant://templates for configuration examples."
        )
    return ValidationResult.ok()


def validate_array(value: Any, param_name: str, required: bool = False) -> ValidationResult:
    """Presence is checked before type."""
    if value is None:
        if required:
            return ValidationResult.fail(
                f"Required parameter '{param_name}' is missing. Provide an array value. "
                f"Example: {param_name}: []. See {API_DOCS} for parameter specifications."
            )
        return ValidationResult.ok()
    if not isinstance(value, list):
        return ValidationResult.fail(
            f"Parameter '{param_name}' must be an array, but received: {json_type(value)}. "
            f"Example: {param_name}: []."
        )
    return ValidationResult.ok()


def validate_metadata(value: Any, param_name: str = "metadata") -> ValidationResult:
    """Optional object whose compact JSON form fits in 16KB."""
    if value is None:
        return ValidationResult.ok()
    if not isinstance(value, dict):
        return ValidationResult.fail(
            f"Parameter '{param_name}' must be an object with key-value pairs, but received: "
            f"{json_type(value)}. Example: {param_name}: {{\"key\": \"value\", \"category\": \"support\"}}."
        )
    size = len(json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))
    if size > METADATA_MAX_BYTES:
        return ValidationResult.fail(
            f"Parameter '{param_name}' exceeds the 16KB size limit. Current size: {size} bytes. "
            f"Reduce the amount of metadata or use shorter keys/values. "
            f"See {API_DOCS} for metadata limitations."
        )
    return ValidationResult.ok()


def validate_tools(value: Any, param_name: str = "tools") -> ValidationResult:
    """Optional array of tool objects; function tools need function.name."""
    if value is None:
        return ValidationResult.ok()
    result = validate_array(value, param_name)
    if not result.is_valid:
        return result

    for index, tool in enumerate(value):
        if not isinstance(tool, dict):
            return ValidationResult.fail(
                f"Tool at index {index} in '{param_name}' must be an object. Example: "
                f"{{\"type\": \"code_interpreter\"}} or {{\"type\": \"function\", \"function\": {{...}}}}. "
                f"See {BEST_PRACTICES} for tool configuration."
            )
        tool_type = tool.get("type")
        if tool_type not in TOOL_TYPES:
            return ValidationResult.fail(
                f"Tool at index {index} in '{param_name}' has invalid type '{tool_type}'. "
                f"Allowed types: {', '.join(TOOL_TYPES)}. Example: {{\"type\": \"code_interpreter\"}}. "
                f"See assistant://templates for tool examples."
            )
        if tool_type == "function":
            function = tool.get("function")
            if not isinstance(function, dict):
                return ValidationResult.fail(
                    f"Function tool at index {index} in '{param_name}' is missing 'function' "
                    f"property. Example: {{\"type\": \"function\", \"function\": "
                    f"{{\"name\": \"my_function\", \"description\": \"Function description\"}}}}."
                )
            name = function.get("name")
            if not isinstance(name, str) or not name:
                return ValidationResult.fail(
                    f"Function tool at index {index} in '{param_name}' is missing or has invalid "
                    f"'name' property. Provide a string name for the function. "
                    f"Example: \"name\": \"calculate_sum\"."
                )
    return ValidationResult.ok()


def validate_tool_resources(
    value: Any, tools: Iterable[Any] | None, param_name: str = "tool_resources"
) -> ValidationResult:
    """Optional object; each resource section needs its matching tool in tools."""
    if value is None:
        return ValidationResult.ok()
    if not isinstance(value, dict):
        return ValidationResult.fail(
            f"Parameter '{param_name}' must be an object, but received: {json_type(value)}. "
            f"Example: {{\"file_search\": {{\"vector_store_ids\": [\"vs_123\"]}}}}. "
            f"See {BEST_PRACTICES} for tool resource configuration."
        )

    tool_types = {
        tool.get("type") for tool in (tools or []) if isinstance(tool, dict)
    }
    for section in ("file_search", "code_interpreter"):
        if value.get(section) is not None and section not in tool_types:
            return ValidationResult.fail(
                f"Cannot specify '{section}' in '{param_name}' without including the {section} "
                f"tool in the tools array. Add {{\"type\": \"{section}\"}} to tools or remove "
                f"{section} from {param_name}. See {BEST_PRACTICES} for configuration guidance."
            )
    return ValidationResult.ok()


def validate_message_role(value: Any, param_name: str = "role") -> ValidationResult:
    return validate_enum(value, param_name, MESSAGE_ROLES)


def validate_tool_outputs(value: Any, param_name: str = "tool_outputs") -> ValidationResult:
    """Required array of {tool_call_id, output} objects."""
    result = validate_array(value, param_name, required=True)
    if not result.is_valid:
        return result

    example = f"{{\"tool_call_id\": \"{ResourceKind.TOOL_CALL.example}\", \"output\": \"42\"}}"
    for index, output in enumerate(value):
        if not isinstance(output, dict):
            return ValidationResult.fail(
                f"Tool output at index {index} in '{param_name}' must be an object. "
                f"Example: {example}."
            )
        if output.get("tool_call_id") is None:
            return ValidationResult.fail(
                f"Tool output at index {index} in '{param_name}' is missing 'tool_call_id'. "
                f"Each tool output must include the tool_call_id from the run's "
                f"required_action. Example: {example}."
            )
        result = validate_openai_id(
            output["tool_call_id"], f"{param_name}[{index}].tool_call_id", ResourceKind.TOOL_CALL
        )
        if not result.is_valid:
            return result
        if not isinstance(output.get("output"), str):
            return ValidationResult.fail(
                f"Tool output at index {index} in '{param_name}' is missing or has invalid "
                f"'output'. Provide the function result as a string. Example: {example}."
            )
    return ValidationResult.ok()


def validate_thread_messages(value: Any, param_name: str = "messages") -> ValidationResult:
    """Optional array of initial {role, content} messages."""
    result = validate_array(value, param_name)
    if not result.is_valid or value is None:
        return result

    for index, message in enumerate(value):
        if not isinstance(message, dict):
            return ValidationResult.fail(
                f"Message at index {index} in '{param_name}' must be an object. "
                f"Example: {{\"role\": \"user\", \"content\": \"Hello!\"}}."
            )
        result = validate_message_role(message.get("role"), f"{param_name}[{index}].role")
        if not result.is_valid:
            return result
        result = validate_required_string(
            message.get("content"), f"{param_name}[{index}].content", ['"Hello!"']
        )
        if not result.is_valid:
            return result
    return ValidationResult.ok()


def validate_cursor_id(value: Any, param_name: str) -> ValidationResult:
    """after/before list cursors are non-empty object IDs."""
    if value is None:
        return ValidationResult.ok()
    if not isinstance(value, str) or not value.strip():
        return ValidationResult.fail(
            f"Parameter '{param_name}' must be a non-empty string cursor ID "
            f"(e.g., '{ResourceKind.ASSISTANT.example}'). Use the ID of the boundary item "
            f"from the previous page."
        )
    return ValidationResult.ok()


def validate_pagination_params(arguments: Mapping[str, Any]) -> ValidationResult:
    """limit/order/after/before as accepted by the upstream list endpoints."""
    checks = (
        lambda: validate_numeric_range(arguments.get("limit"), "limit", 1, 100, 20),
        lambda: validate_enum(arguments.get("order"), "order", SORT_ORDERS, "desc"),
        lambda: validate_cursor_id(arguments.get("after"), "after"),
        lambda: validate_cursor_id(arguments.get("before"), "before"),
        lambda: validate_exclusive_cursors(arguments),
    )
    for check in checks:
        result = check()
        if not result.is_valid:
            return result
    return ValidationResult.ok()


def validate_exclusive_cursors(arguments: Mapping[str, Any]) -> ValidationResult:
    if arguments.get("after") and arguments.get("before"):
        return ValidationResult.fail(
            "Cannot specify both 'after' and 'before' parameters simultaneously. Use 'after' "
            "for forward pagination or 'before' for backward pagination, but not both."
        )
    return ValidationResult.ok()

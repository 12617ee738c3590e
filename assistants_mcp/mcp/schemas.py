"""
Parameter schema table for the Assistants API tools.

Pure data: for each tool, its advertised metadata and the ordered list of
parameters with their type, required flag and the validation primitive
that applies. The registry derives inputSchema from this table and the
dispatcher runs the checks in the declared order.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping

from assistants_mcp.mcp.validation import (
    MESSAGE_ROLES,
    SORT_ORDERS,
    TOOL_TYPES,
    ResourceKind,
    ValidationResult,
    validate_array,
    validate_message_role,
    validate_metadata,
    validate_model,
    validate_numeric_range,
    validate_openai_id,
    validate_optional_string,
    validate_pagination_params,
    validate_required_string,
    validate_thread_messages,
    validate_tool_outputs,
    validate_tool_resources,
    validate_tools,
)

ParamCheck = Callable[[Any, Mapping[str, Any]], ValidationResult]
ToolCheck = Callable[[Mapping[str, Any]], ValidationResult]


class ToolName(str, Enum):
    """The closed set of tools this server exposes."""

    ASSISTANT_CREATE = "assistant-create"
    ASSISTANT_LIST = "assistant-list"
    ASSISTANT_GET = "assistant-get"
    ASSISTANT_UPDATE = "assistant-update"
    ASSISTANT_DELETE = "assistant-delete"
    THREAD_CREATE = "thread-create"
    THREAD_GET = "thread-get"
    THREAD_UPDATE = "thread-update"
    THREAD_DELETE = "thread-delete"
    MESSAGE_CREATE = "message-create"
    MESSAGE_LIST = "message-list"
    MESSAGE_GET = "message-get"
    MESSAGE_UPDATE = "message-update"
    MESSAGE_DELETE = "message-delete"
    RUN_CREATE = "run-create"
    RUN_LIST = "run-list"
    RUN_GET = "run-get"
    RUN_UPDATE = "run-update"
    RUN_CANCEL = "run-cancel"
    RUN_SUBMIT_TOOL_OUTPUTS = "run-submit-tool-outputs"
    RUN_STEP_LIST = "run-step-list"
    RUN_STEP_GET = "run-step-get"


class ParamType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    ENUM = "enum"
    ARRAY = "array"
    OBJECT = "object"

    @property
    def json_type(self) -> str:
        return "string" if self is ParamType.ENUM else self.value


@dataclass(frozen=True)
class ParamSpec:
    """One declared tool parameter."""

    name: str
    type: ParamType
    description: str
    required: bool = False
    check: ParamCheck | None = None
    enum: tuple[str, ...] | None = None
    items: dict[str, Any] | None = None


@dataclass(frozen=True)
class ToolSchema:
    """Everything declared about one tool, minus its handler."""

    name: ToolName
    title: str
    description: str
    params: tuple[ParamSpec, ...]
    # Cross-parameter checks, run after every parameter check passed
    checks: tuple[ToolCheck, ...] = ()
    read_only: bool = False
    destructive: bool = False

    @property
    def required(self) -> list[str]:
        return [p.name for p in self.params if p.required]

    @property
    def param_names(self) -> frozenset[str]:
        return frozenset(p.name for p in self.params)


# =============================================================================
# Parameter builders
# =============================================================================


def id_param(name: str, kind: ResourceKind, description: str, required: bool = True) -> ParamSpec:
    return ParamSpec(
        name=name,
        type=ParamType.STRING,
        description=description,
        required=required,
        check=lambda value, _args: validate_openai_id(value, name, kind),
    )


def string_param(name: str, description: str, example: str | None = None) -> ParamSpec:
    return ParamSpec(
        name=name,
        type=ParamType.STRING,
        description=description,
        check=lambda value, _args: validate_optional_string(value, name, example),
    )


def metadata_param(subject: str) -> ParamSpec:
    return ParamSpec(
        name="metadata",
        type=ParamType.OBJECT,
        description=(
            f"Custom key-value pairs stored on the {subject} (max 16KB serialized), "
            'e.g. {"department": "support", "priority": "high"}.'
        ),
        check=lambda value, _args: validate_metadata(value, "metadata"),
    )


def model_param(required: bool, description: str) -> ParamSpec:
    return ParamSpec(
        name="model",
        type=ParamType.STRING,
        description=description,
        required=required,
        check=lambda value, _args: validate_model(value, "model"),
    )


TOOLS_ITEMS = {
    "type": "object",
    "properties": {"type": {"type": "string", "enum": list(TOOL_TYPES)}},
    "required": ["type"],
}


def tools_param(description: str) -> ParamSpec:
    return ParamSpec(
        name="tools",
        type=ParamType.ARRAY,
        description=description,
        check=lambda value, _args: validate_tools(value, "tools"),
        items=TOOLS_ITEMS,
    )


def _check_tool_resources(value: Any, arguments: Mapping[str, Any]) -> ValidationResult:
    return validate_tool_resources(value, arguments.get("tools") or [], "tool_resources")


def _check_tool_resources_update(value: Any, arguments: Mapping[str, Any]) -> ValidationResult:
    # Without a new tools array the assistant keeps its current tools,
    # which are not known here; only the shape can be checked.
    tools = arguments.get("tools")
    if tools is None:
        tools = [{"type": t} for t in TOOL_TYPES]
    return validate_tool_resources(value, tools, "tool_resources")


def tool_resources_param(check: ParamCheck) -> ParamSpec:
    return ParamSpec(
        name="tool_resources",
        type=ParamType.OBJECT,
        description=(
            "Resources for the enabled tools, e.g. "
            '{"file_search": {"vector_store_ids": ["vs_abc123"]}} or '
            '{"code_interpreter": {"file_ids": ["file-abc123def456ghi789jkl012"]}}. '
            "Each section requires the matching tool in 'tools'."
        ),
        check=check,
    )


def pagination_params(kind: ResourceKind, noun: str) -> tuple[ParamSpec, ...]:
    """
    limit/order/after/before as accepted by the upstream list endpoints.

    Checked together by validate_pagination_params, listed in the tool's checks.
    """
    return (
        ParamSpec(
            name="limit",
            type=ParamType.NUMBER,
            description=f"Maximum number of {noun} to return (1-100, default: 20).",
        ),
        ParamSpec(
            name="order",
            type=ParamType.ENUM,
            description='Sort order by creation date: "desc" for newest first (default), "asc" for oldest first.',
            enum=SORT_ORDERS,
        ),
        ParamSpec(
            name="after",
            type=ParamType.STRING,
            description=f'Cursor: {kind.label} ID to start listing after (format: "{kind.value}abc123...").',
        ),
        ParamSpec(
            name="before",
            type=ParamType.STRING,
            description=f'Cursor: {kind.label} ID to end listing before (format: "{kind.value}abc123...").',
        ),
    )


ASSISTANT_ID = id_param(
    "assistant_id",
    ResourceKind.ASSISTANT,
    'The assistant ID (format: "asst_abc123..."). Get it from assistant-create or assistant-list.',
)
THREAD_ID = id_param(
    "thread_id",
    ResourceKind.THREAD,
    'The thread ID (format: "thread_abc123..."). Get it from thread-create.',
)
MESSAGE_ID = id_param(
    "message_id", ResourceKind.MESSAGE, 'The message ID (format: "msg_abc123...").'
)
RUN_ID = id_param("run_id", ResourceKind.RUN, 'The run ID (format: "run_abc123...").')
STEP_ID = id_param("step_id", ResourceKind.STEP, 'The run step ID (format: "step_abc123...").')

ASSISTANT_NAME = ParamSpec(
    name="name",
    type=ParamType.STRING,
    description='A descriptive name for the assistant (e.g., "Customer Support Bot").',
    check=lambda value, _args: (
        ValidationResult.ok()
        if value is None
        else validate_required_string(
            value, "name", ['"Customer Support Bot"', '"Code Review Assistant"']
        )
    ),
)
ASSISTANT_DESCRIPTION = string_param(
    "description",
    "A brief description of what the assistant does.",
    "Helps customers with product questions and troubleshooting",
)
ASSISTANT_INSTRUCTIONS = string_param(
    "instructions",
    "System instructions that define the assistant's behavior, tone and role.",
    "You are a helpful customer support assistant. Be polite and provide clear answers.",
)
TEMPERATURE = ParamSpec(
    name="temperature",
    type=ParamType.NUMBER,
    description="Sampling temperature between 0 and 2. Higher values make output more random.",
    check=lambda value, _args: validate_numeric_range(value, "temperature", 0, 2),
)
TOP_P = ParamSpec(
    name="top_p",
    type=ParamType.NUMBER,
    description="Nucleus sampling probability mass between 0 and 1.",
    check=lambda value, _args: validate_numeric_range(value, "top_p", 0, 1),
)


# =============================================================================
# The table
# =============================================================================


TOOL_SCHEMAS: tuple[ToolSchema, ...] = (
    # Assistants
    ToolSchema(
        name=ToolName.ASSISTANT_CREATE,
        title="Create AI Assistant",
        description=(
            "Create a new AI assistant with custom instructions and capabilities. The "
            "assistant keeps its configuration across conversations and can be equipped "
            "with code_interpreter, file_search or custom function tools. Returns the "
            "assistant object, including its ID for later operations."
        ),
        params=(
            model_param(
                True,
                'The model to use (e.g., "gpt-4", "gpt-4o", "gpt-3.5-turbo").',
            ),
            ASSISTANT_NAME,
            ASSISTANT_DESCRIPTION,
            ASSISTANT_INSTRUCTIONS,
            tools_param(
                "Tools to enable: code_interpreter (run Python), file_search (search "
                "uploaded files), function (custom calls)."
            ),
            tool_resources_param(_check_tool_resources),
            metadata_param("assistant"),
            TEMPERATURE,
            TOP_P,
        ),
    ),
    ToolSchema(
        name=ToolName.ASSISTANT_LIST,
        title="List All Assistants",
        description=(
            "List your assistants, newest first by default. Use after/before with an "
            "assistant ID from a previous page to paginate."
        ),
        params=pagination_params(ResourceKind.ASSISTANT, "assistants"),
        checks=(validate_pagination_params,),
        read_only=True,
    ),
    ToolSchema(
        name=ToolName.ASSISTANT_GET,
        title="Get Assistant Details",
        description="Retrieve an assistant's configuration, tools and metadata.",
        params=(ASSISTANT_ID,),
        read_only=True,
    ),
    ToolSchema(
        name=ToolName.ASSISTANT_UPDATE,
        title="Update Assistant",
        description=(
            "Modify an existing assistant's model, instructions, tools or metadata. "
            "Fields that are not given are left unchanged."
        ),
        params=(
            ASSISTANT_ID,
            model_param(False, "New model for the assistant. Leave out to keep the current one."),
            ASSISTANT_NAME,
            ASSISTANT_DESCRIPTION,
            ASSISTANT_INSTRUCTIONS,
            tools_param("New tools array. Replaces the existing tools when given."),
            tool_resources_param(_check_tool_resources_update),
            metadata_param("assistant"),
            TEMPERATURE,
            TOP_P,
        ),
    ),
    ToolSchema(
        name=ToolName.ASSISTANT_DELETE,
        title="Delete Assistant",
        description="Permanently delete an assistant. This cannot be undone.",
        params=(ASSISTANT_ID,),
        destructive=True,
    ),
    # Threads
    ToolSchema(
        name=ToolName.THREAD_CREATE,
        title="Create Conversation Thread",
        description=(
            "Create a conversation thread that holds messages and runs. Optionally seed "
            "it with initial messages."
        ),
        params=(
            ParamSpec(
                name="messages",
                type=ParamType.ARRAY,
                description='Initial messages, each {"role": "user"|"assistant", "content": "..."}.',
                check=lambda value, _args: validate_thread_messages(value, "messages"),
                items={
                    "type": "object",
                    "properties": {
                        "role": {"type": "string", "enum": list(MESSAGE_ROLES)},
                        "content": {"type": "string"},
                    },
                    "required": ["role", "content"],
                },
            ),
            metadata_param("thread"),
        ),
    ),
    ToolSchema(
        name=ToolName.THREAD_GET,
        title="Get Thread Details",
        description="Retrieve a thread's details and metadata.",
        params=(THREAD_ID,),
        read_only=True,
    ),
    ToolSchema(
        name=ToolName.THREAD_UPDATE,
        title="Update Thread",
        description="Update a thread's metadata.",
        params=(THREAD_ID, metadata_param("thread")),
    ),
    ToolSchema(
        name=ToolName.THREAD_DELETE,
        title="Delete Thread",
        description="Permanently delete a thread with all its messages and runs.",
        params=(THREAD_ID,),
        destructive=True,
    ),
    # Messages
    ToolSchema(
        name=ToolName.MESSAGE_CREATE,
        title="Create Message",
        description="Add a message to a thread. Start a run afterwards to get a reply.",
        params=(
            THREAD_ID,
            ParamSpec(
                name="role",
                type=ParamType.ENUM,
                description='Who the message is from: "user" or "assistant".',
                required=True,
                check=lambda value, _args: validate_message_role(value),
                enum=MESSAGE_ROLES,
            ),
            ParamSpec(
                name="content",
                type=ParamType.STRING,
                description="The text content of the message.",
                required=True,
                check=lambda value, _args: validate_required_string(
                    value,
                    "content",
                    ['"Hello, how can I help you?"', '"Please analyze this data."'],
                ),
            ),
            metadata_param("message"),
        ),
    ),
    ToolSchema(
        name=ToolName.MESSAGE_LIST,
        title="List Thread Messages",
        description="List the messages of a thread, optionally only those produced by one run.",
        params=(
            THREAD_ID,
            *pagination_params(ResourceKind.MESSAGE, "messages"),
            id_param(
                "run_id",
                ResourceKind.RUN,
                'Only list messages created by this run (format: "run_abc123...").',
                required=False,
            ),
        ),
        checks=(validate_pagination_params,),
        read_only=True,
    ),
    ToolSchema(
        name=ToolName.MESSAGE_GET,
        title="Get Message Details",
        description="Retrieve a single message from a thread.",
        params=(THREAD_ID, MESSAGE_ID),
        read_only=True,
    ),
    ToolSchema(
        name=ToolName.MESSAGE_UPDATE,
        title="Update Message",
        description="Update a message's metadata.",
        params=(THREAD_ID, MESSAGE_ID, metadata_param("message")),
    ),
    ToolSchema(
        name=ToolName.MESSAGE_DELETE,
        title="Delete Message",
        description="Permanently delete a message from a thread.",
        params=(THREAD_ID, MESSAGE_ID),
        destructive=True,
    ),
    # Runs
    ToolSchema(
        name=ToolName.RUN_CREATE,
        title="Create Assistant Run",
        description=(
            "Start an assistant run on a thread. The run processes the thread's messages "
            "and may pause in 'requires_action' until tool outputs are submitted."
        ),
        params=(
            THREAD_ID,
            ASSISTANT_ID,
            model_param(False, "Override the assistant's model for this run."),
            string_param("instructions", "Override the assistant's instructions for this run."),
            string_param(
                "additional_instructions",
                "Extra instructions appended to the assistant's instructions for this run.",
            ),
            tools_param("Override the assistant's tools for this run."),
            metadata_param("run"),
        ),
    ),
    ToolSchema(
        name=ToolName.RUN_LIST,
        title="List Thread Runs",
        description="List the runs of a thread.",
        params=(THREAD_ID, *pagination_params(ResourceKind.RUN, "runs")),
        checks=(validate_pagination_params,),
        read_only=True,
    ),
    ToolSchema(
        name=ToolName.RUN_GET,
        title="Get Run Details",
        description="Retrieve a run, including its status and any required action.",
        params=(THREAD_ID, RUN_ID),
        read_only=True,
    ),
    ToolSchema(
        name=ToolName.RUN_UPDATE,
        title="Update Run",
        description="Update a run's metadata.",
        params=(THREAD_ID, RUN_ID, metadata_param("run")),
    ),
    ToolSchema(
        name=ToolName.RUN_CANCEL,
        title="Cancel Run",
        description="Cancel a run that is 'in_progress' or 'requires_action'.",
        params=(THREAD_ID, RUN_ID),
    ),
    ToolSchema(
        name=ToolName.RUN_SUBMIT_TOOL_OUTPUTS,
        title="Submit Tool Outputs",
        description=(
            "Submit the results of function tool calls for a run in 'requires_action' "
            "status so the run can continue."
        ),
        params=(
            THREAD_ID,
            RUN_ID,
            ParamSpec(
                name="tool_outputs",
                type=ParamType.ARRAY,
                description="One {tool_call_id, output} object per tool call in the run's required_action.",
                required=True,
                check=lambda value, _args: validate_tool_outputs(value, "tool_outputs"),
                items={
                    "type": "object",
                    "properties": {
                        "tool_call_id": {"type": "string"},
                        "output": {"type": "string"},
                    },
                    "required": ["tool_call_id", "output"],
                },
            ),
        ),
    ),
    # Run steps
    ToolSchema(
        name=ToolName.RUN_STEP_LIST,
        title="List Run Steps",
        description="List the execution steps of a run (message creation, tool calls).",
        params=(
            THREAD_ID,
            RUN_ID,
            *pagination_params(ResourceKind.STEP, "run steps"),
            ParamSpec(
                name="include",
                type=ParamType.ARRAY,
                description=(
                    "Extra fields to include, e.g. "
                    '["step_details.tool_calls[*].file_search.results[*].content"].'
                ),
                check=lambda value, _args: validate_array(value, "include"),
                items={"type": "string"},
            ),
        ),
        checks=(validate_pagination_params,),
        read_only=True,
    ),
    ToolSchema(
        name=ToolName.RUN_STEP_GET,
        title="Get Run Step Details",
        description="Retrieve a single run step.",
        params=(THREAD_ID, RUN_ID, STEP_ID),
        read_only=True,
    ),
)

SCHEMAS_BY_NAME: dict[ToolName, ToolSchema] = {s.name: s for s in TOOL_SCHEMAS}
EXPECTED_TOOL_NAMES: frozenset[str] = frozenset(t.value for t in ToolName)

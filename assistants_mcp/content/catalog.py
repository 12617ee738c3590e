"""Static resources, prompt templates and argument completion."""

import json
import logging
from functools import lru_cache
from pathlib import Path
from string import Template
from typing import Any

from pydantic import BaseModel, Field

from assistants_mcp.config.loader import get_settings, load_yaml
from assistants_mcp.mcp.errors import INVALID_PARAMS, ErrorCategory, MCPError
from assistants_mcp.mcp.models import CompletionArgument, CompletionRef
from assistants_mcp.mcp.pagination import paginate_array, pagination_summary

logger = logging.getLogger(__name__)

MAX_COMPLETIONS = 100


class Resource(BaseModel):
    """A read-only document. Exactly one of text or data is served."""

    uri: str
    name: str
    description: str = ""
    mimeType: str = "text/plain"
    text: str | None = None
    data: Any = None

    def descriptor(self) -> dict[str, Any]:
        return {
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mimeType,
        }

    def render(self) -> str:
        if self.text is not None:
            return self.text
        return json.dumps(self.data, indent=2)


class PromptArgument(BaseModel):
    name: str
    description: str = ""
    required: bool = False
    default: str | None = None
    suggestions: list[str] = Field(default_factory=list)

    def descriptor(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "required": self.required,
        }


class Prompt(BaseModel):
    """A prompt template whose ${placeholders} are filled from arguments."""

    name: str
    title: str
    description: str = ""
    arguments: list[PromptArgument] = Field(default_factory=list)
    template: str

    def descriptor(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "arguments": [a.descriptor() for a in self.arguments],
        }

    def argument(self, name: str) -> PromptArgument | None:
        return next((a for a in self.arguments if a.name == name), None)

    def render(self, arguments: dict[str, Any]) -> str:
        """
        Fill the template.

        Raises:
            MCPError: INVALID_PARAMS if a required argument is missing or blank.
        """
        values: dict[str, str] = {}
        for arg in self.arguments:
            value = arguments.get(arg.name)
            if value is None or (isinstance(value, str) and not value.strip()):
                if arg.required:
                    raise MCPError(
                        INVALID_PARAMS,
                        f"Missing required argument '{arg.name}' for prompt '{self.name}'. "
                        f"{arg.description}",
                        {
                            "prompt": self.name,
                            "requiredArguments": [a.name for a in self.arguments if a.required],
                        },
                    )
                value = arg.default or ""
            values[arg.name] = str(value)
        return Template(self.template).safe_substitute(values)


class ContentCatalog:
    """
    Resources, prompts and completions served next to the tools.

    Read-only after construction; one instance is shared by all requests.
    """

    def __init__(
        self,
        resources: list[Resource],
        prompts: list[Prompt],
        completions: dict[str, list[str]] | None = None,
    ):
        self._resources = {r.uri: r for r in resources}
        self._prompts = {p.name: p for p in prompts}
        self._completions = completions or {}

    @classmethod
    def load(cls, content_dir: str | Path) -> "ContentCatalog":
        """Load resources.yaml and prompts.yaml from a directory."""
        content_dir = Path(content_dir)
        resource_doc = load_yaml(content_dir / "resources.yaml")
        prompt_doc = load_yaml(content_dir / "prompts.yaml")

        catalog = cls(
            resources=[Resource.model_validate(r) for r in resource_doc.get("resources", [])],
            prompts=[Prompt.model_validate(p) for p in prompt_doc.get("prompts", [])],
            completions={
                name: [str(v) for v in values]
                for name, values in (prompt_doc.get("completions") or {}).items()
            },
        )
        logger.info(
            f"Loaded content catalog: {len(catalog._resources)} resources, "
            f"{len(catalog._prompts)} prompts"
        )
        return catalog

    @property
    def resource_uris(self) -> list[str]:
        return list(self._resources)

    @property
    def prompt_names(self) -> list[str]:
        return list(self._prompts)

    # -------------------------------------------------------------------------
    # Resources
    # -------------------------------------------------------------------------

    def list_resources(self, cursor: str | None = None) -> dict[str, Any]:
        page = paginate_array(
            [r.descriptor() for r in self._resources.values()], cursor=cursor
        )
        logger.debug("Resources pagination: %s", pagination_summary(page, cursor, None))
        result: dict[str, Any] = {"resources": page.items}
        if page.nextCursor:
            result["nextCursor"] = page.nextCursor
        return result

    def read_resource(self, uri: str) -> dict[str, Any]:
        resource = self._resources.get(uri)
        if resource is None:
            raise MCPError.from_category(
                ErrorCategory.NOT_FOUND,
                f"Resource not found: {uri}",
                resourceUri=uri,
                availableResources=self.resource_uris,
            )
        return {
            "contents": [
                {"uri": uri, "mimeType": resource.mimeType, "text": resource.render()}
            ]
        }

    # -------------------------------------------------------------------------
    # Prompts
    # -------------------------------------------------------------------------

    def list_prompts(self, cursor: str | None = None) -> dict[str, Any]:
        page = paginate_array(
            [p.descriptor() for p in self._prompts.values()], cursor=cursor
        )
        logger.debug("Prompts pagination: %s", pagination_summary(page, cursor, None))
        result: dict[str, Any] = {"prompts": page.items}
        if page.nextCursor:
            result["nextCursor"] = page.nextCursor
        return result

    def get_prompt(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        prompt = self._prompts.get(name)
        if prompt is None:
            raise MCPError.from_category(
                ErrorCategory.NOT_FOUND,
                f"Prompt not found: {name}",
                availablePrompts=self.prompt_names,
            )
        text = prompt.render(arguments or {})
        return {
            "description": prompt.description,
            "messages": [{"role": "user", "content": {"type": "text", "text": text}}],
        }

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    def complete(self, ref: CompletionRef, argument: CompletionArgument) -> dict[str, Any]:
        if ref.type == "ref/prompt":
            candidates = self._prompt_candidates(ref.name, argument.name)
        elif ref.type == "ref/resource":
            candidates = self.resource_uris
        else:
            raise MCPError(
                INVALID_PARAMS,
                f"Unsupported reference type: {ref.type}. Use 'ref/prompt' or 'ref/resource'.",
            )

        matches = match_completions(candidates, argument.value)
        return {
            "completion": {
                "values": matches[:MAX_COMPLETIONS],
                "total": len(matches),
                "hasMore": len(matches) > MAX_COMPLETIONS,
            }
        }

    def _prompt_candidates(self, prompt_name: str | None, argument_name: str) -> list[str]:
        prompt = self._prompts.get(prompt_name or "")
        declared = prompt.argument(argument_name) if prompt else None
        if declared and declared.suggestions:
            return declared.suggestions
        return self._completions.get(argument_name, [])


@lru_cache
def get_catalog() -> ContentCatalog:
    """The catalog from the configured content directory, loaded once."""
    return ContentCatalog.load(get_settings().content_dir)


def match_completions(candidates: list[str], value: str) -> list[str]:
    """Case-insensitive prefix matches first, then substring matches."""
    unique = list(dict.fromkeys(candidates))
    if not value:
        return unique
    needle = value.lower()
    prefix = [c for c in unique if c.lower().startswith(needle)]
    substring = [c for c in unique if needle in c.lower() and c not in prefix]
    return prefix + substring

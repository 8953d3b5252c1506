"""Tool and resource registries.

Both registries are filled once at startup and are read-only afterwards.
They are shared by every session over every transport, so each invocation
gets everything it needs (validated arguments and the Jira client) passed in
rather than stored.
"""
import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from mcp.types import Resource, ResourceTemplate, TextContent, Tool
from pydantic import BaseModel, ValidationError

from .errors import ErrorContext, JiraApiError, NotFoundError, UserInputError
from .services.networking import JiraClient

logger = logging.getLogger("jira-mcp.registry")

ToolHandler = Callable[[Any, JiraClient], Awaitable[list[TextContent]]]
ResourceHandler = Callable[[dict, str, JiraClient], Awaitable[Any]]

_ARGS_LOG_LIMIT = 200
_PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    title: str
    description: str
    input_model: type[BaseModel]
    handler: ToolHandler

    def to_tool(self) -> Tool:
        schema = self.input_model.model_json_schema()
        schema.pop("title", None)
        return Tool(
            name=self.name,
            title=self.title,
            description=self.description,
            inputSchema=schema,
        )


def _describe_validation_error(error: dict) -> str:
    kind = error.get("type", "")
    if kind == "missing":
        return "required field missing"
    if kind in ("literal_error", "enum"):
        return "value not in allowed set"
    if kind == "extra_forbidden":
        return "unexpected field"
    if kind.endswith("_type") or kind.endswith("_parsing"):
        return "wrong type"
    return error.get("msg", kind)


def _truncate(arguments: Any) -> str:
    text = json.dumps(arguments, default=str)
    if len(text) > _ARGS_LOG_LIMIT:
        return text[:_ARGS_LOG_LIMIT] + "..."
    return text


class ToolRegistry:
    """Name -> ToolDefinition map with validated invocation."""

    def __init__(self, client: JiraClient):
        self.client = client
        self._tools: dict[str, ToolDefinition] = {}

    def register(self, definition: ToolDefinition) -> None:
        if not definition.name:
            raise ValueError("Tool name must not be empty")
        if not callable(definition.handler):
            raise ValueError(f"Handler for tool '{definition.name}' is not callable")
        if definition.name in self._tools:
            logger.warning(f"Tool '{definition.name}' registered twice; keeping the latest definition")
        self._tools[definition.name] = definition

    def register_tool(
        self,
        name: str,
        title: str,
        description: str,
        input_model: type[BaseModel],
        handler: ToolHandler,
    ) -> None:
        self.register(ToolDefinition(name, title, description, input_model, handler))

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def list_tools(self) -> list[Tool]:
        return [definition.to_tool() for definition in self._tools.values()]

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def validate(self, definition: ToolDefinition, arguments: Optional[dict]) -> BaseModel:
        """Validate raw arguments against the tool's input model.

        Raises UserInputError naming every offending field and the
        constraint it failed.
        """
        try:
            return definition.input_model.model_validate(arguments or {})
        except ValidationError as e:
            problems = []
            for error in e.errors():
                field = ".".join(str(part) for part in error["loc"]) or "<arguments>"
                problems.append({"field": field, "reason": _describe_validation_error(error)})
            summary = "; ".join(f"{p['field']}: {p['reason']}" for p in problems)
            raise UserInputError(
                f"Invalid arguments for tool '{definition.name}': {summary}",
                ErrorContext(request_input={"arguments": arguments, "errors": problems}),
            ) from e

    async def invoke(self, name: str, arguments: Optional[dict]) -> list[TextContent]:
        """Validate arguments and run the tool's handler.

        Unknown tools raise NotFoundError. Handler errors propagate unchanged.
        """
        start = time.perf_counter()
        outcome = "ok"
        try:
            definition = self._tools.get(name)
            if definition is None:
                raise NotFoundError(f"Unknown tool: {name}")
            params = self.validate(definition, arguments)
            return await definition.handler(params, self.client)
        except JiraApiError as e:
            outcome = type(e).__name__
            raise
        except Exception as e:
            outcome = f"unexpected {type(e).__name__}"
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info(
                f"Tool call: {name} args={_truncate(arguments)} outcome={outcome} duration_ms={elapsed_ms:.2f}"
            )


@dataclass(frozen=True)
class ResourceContent:
    uri: str
    text: str
    mime_type: str = "application/json"


@dataclass(frozen=True)
class ResourceDefinition:
    name: str
    uri_template: str
    title: str
    description: str
    handler: ResourceHandler
    mime_type: str = "application/json"

    @property
    def is_template(self) -> bool:
        return bool(_PLACEHOLDER.search(self.uri_template))

    def compile(self) -> re.Pattern:
        """Compile the template to a regex; each placeholder matches one non-empty segment."""
        pattern = ""
        position = 0
        for match in _PLACEHOLDER.finditer(self.uri_template):
            pattern += re.escape(self.uri_template[position:match.start()])
            pattern += f"(?P<{match.group(1)}>[^/]+)"
            position = match.end()
        pattern += re.escape(self.uri_template[position:])
        return re.compile(f"^{pattern}$")


def _split_value(value: str) -> str | list[str]:
    if "," in value:
        return value.split(",")
    return value


class ResourceRegistry:
    """URI-template -> handler map. Templates are tried in registration order."""

    def __init__(self, client: JiraClient):
        self.client = client
        self._resources: dict[str, tuple[ResourceDefinition, re.Pattern]] = {}

    def register(
        self,
        name: str,
        uri_template: str,
        handler: ResourceHandler,
        *,
        title: str = "",
        description: str = "",
        mime_type: str = "application/json",
    ) -> None:
        if not name:
            raise ValueError("Resource name must not be empty")
        if not callable(handler):
            raise ValueError(f"Handler for resource '{name}' is not callable")
        if name in self._resources:
            logger.warning(f"Resource '{name}' registered twice; keeping the latest definition")
        definition = ResourceDefinition(name, uri_template, title, description, handler, mime_type)
        # assigning an existing key keeps its original match position
        self._resources[name] = (definition, definition.compile())

    def match(self, uri: str) -> tuple[ResourceDefinition, dict]:
        """Find the first registered template matching `uri`.

        Returns the definition and its placeholder values; values holding a
        comma become lists.
        """
        normalized = uri.rstrip("/") or uri
        for definition, pattern in self._resources.values():
            found = pattern.match(normalized)
            if found:
                placeholders = {key: _split_value(value) for key, value in found.groupdict().items()}
                return definition, placeholders
        raise NotFoundError(f"Resource not found: {uri}")

    async def read(self, uri: str) -> list[ResourceContent]:
        start = time.perf_counter()
        definition, placeholders = self.match(uri)
        payload = await definition.handler(placeholders, uri, self.client)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"Resource read: {definition.name} uri={uri} duration_ms={elapsed_ms:.2f}")
        return [ResourceContent(uri=uri, text=json.dumps(payload, indent=2, default=str), mime_type=definition.mime_type)]

    def list_resources(self) -> list[Resource]:
        return [
            Resource(
                uri=definition.uri_template,
                name=definition.name,
                title=definition.title or None,
                description=definition.description or None,
                mimeType=definition.mime_type,
            )
            for definition, _ in self._resources.values()
            if not definition.is_template
        ]

    def list_resource_templates(self) -> list[ResourceTemplate]:
        return [
            ResourceTemplate(
                uriTemplate=definition.uri_template,
                name=definition.name,
                title=definition.title or None,
                description=definition.description or None,
                mimeType=definition.mime_type,
            )
            for definition, _ in self._resources.values()
            if definition.is_template
        ]

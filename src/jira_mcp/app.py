"""MCP server binding shared by the stdio and HTTP transports."""
import logging

from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.types import Resource, ResourceTemplate, TextContent, Tool
from pydantic import AnyUrl

from . import __version__
from .errors import JiraApiError
from .registry import ResourceRegistry, ToolRegistry
from .resources import register_resources
from .services.networking import JiraClient
from .tools import register_tools

logger = logging.getLogger("jira-mcp.app")

SERVER_NAME = "jira-mcp-server"


def build_registries(client: JiraClient) -> tuple[ToolRegistry, ResourceRegistry]:
    """Create and fill the tool and resource registries for one Jira client."""
    tool_registry = register_tools(ToolRegistry(client))
    resource_registry = register_resources(ResourceRegistry(client))
    logger.info(f"Registered {len(tool_registry)} tools")
    return tool_registry, resource_registry


def _log_failure(what: str, error: Exception) -> None:
    logger.error(f"{what} failed: {type(error).__name__}: {error}")
    if isinstance(error, JiraApiError) and error.context is not None:
        logger.error(f"  Status: {error.context.status}")
        logger.error(f"  Endpoint: {error.context.endpoint}")
        logger.error(f"  Request input: {error.context.request_input}")
        logger.error(f"  Response body: {error.context.response_body}")


def build_server(tool_registry: ToolRegistry, resource_registry: ResourceRegistry) -> Server:
    """Bind the registries to a low-level MCP server.

    Tool failures are logged and re-raised; the server reports them to the
    client as an error result carrying the translated message. Resource
    failures come back as JSON-RPC errors.
    """
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return tool_registry.list_tools()

    # Arguments are validated by the registry against the pydantic models.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        try:
            return await tool_registry.invoke(name, arguments)
        except Exception as e:
            _log_failure(f"Tool {name}", e)
            raise

    @server.list_resources()
    async def list_resources() -> list[Resource]:
        return resource_registry.list_resources()

    @server.list_resource_templates()
    async def list_resource_templates() -> list[ResourceTemplate]:
        return resource_registry.list_resource_templates()

    @server.read_resource()
    async def read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
        try:
            contents = await resource_registry.read(str(uri))
        except Exception as e:
            _log_failure(f"Resource {uri}", e)
            raise
        return [ReadResourceContents(content=c.text, mime_type=c.mime_type) for c in contents]

    return server

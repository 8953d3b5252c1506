"""End-to-end tests of the MCP server binding over in-memory streams."""
import json

import pytest
from mcp.shared.exceptions import McpError
from mcp.shared.memory import create_connected_server_and_client_session

from jira_mcp.app import build_registries, build_server


@pytest.fixture
def server(client):
    return build_server(*build_registries(client))


class TestServerBinding:
    """Protocol-level behavior shared by every transport."""

    @pytest.mark.asyncio
    async def test_lists_registered_tools(self, server):
        async with create_connected_server_and_client_session(server) as session:
            result = await session.list_tools()
        names = {tool.name for tool in result.tools}
        assert len(names) == len(result.tools) > 30
        assert {"create_board", "update_issue", "estimate_stories_in_project"} <= names

    @pytest.mark.asyncio
    async def test_tool_success(self, server, jira):
        jira.add("GET", "/rest/api/3/myself", json_body={"accountId": "abc", "displayName": "Bot"})

        async with create_connected_server_and_client_session(server) as session:
            result = await session.call_tool("get_current_user", {})

        assert not result.isError
        assert json.loads(result.content[0].text)["displayName"] == "Bot"

    @pytest.mark.asyncio
    async def test_backend_error_becomes_error_result(self, server, jira):
        """Translated backend errors reach the client as an error result with the message."""
        jira.add("GET", "/rest/agile/1.0/board/7", status=401)

        async with create_connected_server_and_client_session(server) as session:
            result = await session.call_tool("get_board_by_id", {"boardId": 7})

        assert result.isError
        assert result.content[0].text == "Authentication failed for getBoardById."

    @pytest.mark.asyncio
    async def test_invalid_arguments_become_error_result(self, server, jira):
        async with create_connected_server_and_client_session(server) as session:
            result = await session.call_tool("get_board_by_id", {})

        assert result.isError
        assert "boardId: required field missing" in result.content[0].text
        assert jira.requests == []

    @pytest.mark.asyncio
    async def test_unknown_tool(self, server):
        async with create_connected_server_and_client_session(server) as session:
            result = await session.call_tool("no_such_tool", {})

        assert result.isError
        assert result.content[0].text == "Unknown tool: no_such_tool"

    @pytest.mark.asyncio
    async def test_read_board_resource(self, server, jira):
        jira.add("GET", "/rest/agile/1.0/board/7", json_body={"id": 7, "name": "Team"})
        jira.add("GET", "/rest/agile/1.0/board/7/backlog", json_body={"issues": [], "total": 0})
        jira.add("GET", "/rest/agile/1.0/board/7/epic", json_body={"values": [], "total": 0})
        jira.add("GET", "/rest/agile/1.0/board/7/sprint", json_body={"values": [], "total": 0})

        async with create_connected_server_and_client_session(server) as session:
            result = await session.read_resource("resource://board/7")

        assert json.loads(result.contents[0].text)["board"]["name"] == "Team"
        assert result.contents[0].mimeType == "application/json"

    @pytest.mark.asyncio
    async def test_unknown_resource_is_protocol_error(self, server):
        async with create_connected_server_and_client_session(server) as session:
            with pytest.raises(McpError, match="Resource not found"):
                await session.read_resource("resource://sprint/1")

    @pytest.mark.asyncio
    async def test_resource_templates_listed(self, server):
        async with create_connected_server_and_client_session(server) as session:
            templates = await session.list_resource_templates()
            resources = await session.list_resources()

        assert [t.uriTemplate for t in templates.resourceTemplates] == ["resource://board/{boardId}"]
        assert [r.name for r in resources.resources] == ["boards"]

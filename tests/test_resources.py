"""Tests for the board resources."""
import json

import pytest

from jira_mcp.errors import NotFoundError, UserInputError
from jira_mcp.registry import ResourceRegistry
from jira_mcp.resources import BOARD_URI_TEMPLATE, register_resources


@pytest.fixture
def resources(client):
    return register_resources(ResourceRegistry(client))


class TestBoardResource:
    """resource://board/{boardId} snapshots."""

    @pytest.mark.asyncio
    async def test_snapshot_combines_board_data(self, resources, jira):
        jira.add("GET", "/rest/agile/1.0/board/7", json_body={"id": 7, "name": "Team"})
        jira.add("GET", "/rest/agile/1.0/board/7/backlog", json_body={"issues": [{"key": "A-1"}], "total": 1})
        jira.add("GET", "/rest/agile/1.0/board/7/epic", json_body={"values": [{"id": 1}], "total": 1})
        jira.add("GET", "/rest/agile/1.0/board/7/sprint", json_body={"values": [{"id": 3}], "total": 4})

        contents = await resources.read("resource://board/7")

        snapshot = json.loads(contents[0].text)
        assert snapshot == {
            "board": {"id": 7, "name": "Team"},
            "backlog": {"issues": [{"key": "A-1"}], "total": 1},
            "epics": {"values": [{"id": 1}], "total": 1},
            "sprints": {"values": [{"id": 3}], "total": 4},
        }
        backlog_request = jira.calls("GET", "/rest/agile/1.0/board/7/backlog")[0]
        assert backlog_request.url.params["maxResults"] == "10"

    @pytest.mark.asyncio
    async def test_empty_sub_objects_still_present(self, resources, jira):
        """Empty backend payloads yield empty lists and zero totals."""
        jira.add("GET", "/rest/agile/1.0/board/7", json_body={"id": 7, "name": "Team"})
        jira.add("GET", "/rest/agile/1.0/board/7/backlog", json_body={})
        jira.add("GET", "/rest/agile/1.0/board/7/epic", json_body={})
        jira.add("GET", "/rest/agile/1.0/board/7/sprint", json_body={})

        snapshot = json.loads((await resources.read("resource://board/7"))[0].text)

        assert snapshot["backlog"] == {"issues": [], "total": 0}
        assert snapshot["epics"] == {"values": [], "total": 0}
        assert snapshot["sprints"] == {"values": [], "total": 0}

    @pytest.mark.asyncio
    async def test_kanban_board_without_sprints(self, resources, jira):
        """Boards that reject the sprint endpoint report no sprints."""
        jira.add("GET", "/rest/agile/1.0/board/8", json_body={"id": 8, "name": "Flow", "type": "kanban"})
        jira.add("GET", "/rest/agile/1.0/board/8/backlog", json_body={"issues": [], "total": 0})
        jira.add("GET", "/rest/agile/1.0/board/8/epic", json_body={"values": [], "total": 0})
        jira.add("GET", "/rest/agile/1.0/board/8/sprint", status=400,
                 json_body={"errorMessages": ["The board does not support sprints"]})

        snapshot = json.loads((await resources.read("resource://board/8"))[0].text)

        assert snapshot["sprints"] == {"values": [], "total": 0}

    @pytest.mark.asyncio
    async def test_missing_board(self, resources, jira):
        jira.add("GET", "/rest/agile/1.0/board/99", status=404)

        with pytest.raises(NotFoundError, match="Board not found."):
            await resources.read("resource://board/99")

    @pytest.mark.asyncio
    async def test_list_value_rejected(self, resources, jira):
        """A comma-separated id is not a single board."""
        with pytest.raises(UserInputError, match="boardId must be a single value, not an array"):
            await resources.read("resource://board/1,2")
        assert jira.requests == []

    @pytest.mark.asyncio
    async def test_non_integer_rejected(self, resources, jira):
        with pytest.raises(UserInputError, match="boardId must be an integer, got 'abc'"):
            await resources.read("resource://board/abc")
        assert jira.requests == []


class TestBoardsResource:

    @pytest.mark.asyncio
    async def test_lists_first_page_of_boards(self, resources, jira):
        jira.add("GET", "/rest/agile/1.0/board", json_body={"values": [{"id": 1}, {"id": 2}], "total": 2})

        contents = await resources.read("resource://boards")

        assert json.loads(contents[0].text)["values"] == [{"id": 1}, {"id": 2}]
        assert jira.requests[0].url.params["maxResults"] == "50"

    def test_advertised(self, resources):
        assert [r.name for r in resources.list_resources()] == ["boards"]
        assert [t.uriTemplate for t in resources.list_resource_templates()] == [BOARD_URI_TEMPLATE]

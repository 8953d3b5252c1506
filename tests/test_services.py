"""Tests for the Jira service layer against a stubbed backend."""
import pytest

from jira_mcp.errors import InternalServerError, NotFoundError, UserInputError
from jira_mcp.services import custom_field as custom_field_service
from jira_mcp.services import estimation as estimation_service
from jira_mcp.services import field_configuration as field_configuration_service
from jira_mcp.services import filter as filter_service
from jira_mcp.services import issue as issue_service
from jira_mcp.services import project as project_service
from jira_mcp.services.issue import STORY_POINTS_FIELD


class TestDefaultFilter:
    """Choosing or creating the filter that backs new boards."""

    @pytest.mark.asyncio
    async def test_reuses_catch_all_filter(self, client, jira):
        """A user filter ordered by something is reused as-is."""
        jira.add("GET", "/rest/api/3/filter/my", json_body=[
            {"id": "10", "name": "Bugs", "jql": "issuetype = Bug"},
            {"id": "11", "name": "Everything", "jql": "ORDER BY Rank ASC"},
        ])

        assert await filter_service.get_or_create_default_filter(client) == 11
        assert jira.calls("POST", "/rest/api/3/filter") == []

    @pytest.mark.asyncio
    async def test_creates_filter_when_none_suitable(self, client, jira):
        """Without a catch-all filter a default one is created."""
        jira.add("GET", "/rest/api/3/filter/my", json_body=[{"id": "10", "jql": "issuetype = Bug"}])
        jira.add("POST", "/rest/api/3/filter", json_body={"id": "42", "name": "MCP Default Board Filter"})

        assert await filter_service.get_or_create_default_filter(client) == 42
        body = jira.last_json("POST", "/rest/api/3/filter")
        assert body["name"] == "MCP Default Board Filter"
        assert body["jql"] == "ORDER BY created DESC"
        assert body["favourite"] is False

    @pytest.mark.asyncio
    async def test_listing_failure_falls_through_to_create(self, client, jira):
        """A failed filter listing does not stop filter creation."""
        jira.add("GET", "/rest/api/3/filter/my", status=500)
        jira.add("POST", "/rest/api/3/filter", json_body={"id": "43", "name": "MCP Default Board Filter"})

        assert await filter_service.get_or_create_default_filter(client) == 43

    @pytest.mark.asyncio
    async def test_creation_failure_is_raised(self, client, jira):
        """No guessed filter id is returned when creation fails."""
        jira.add("GET", "/rest/api/3/filter/my", json_body=[])
        jira.add("POST", "/rest/api/3/filter", status=500)

        with pytest.raises(InternalServerError, match="Internal server error in createFilter."):
            await filter_service.get_or_create_default_filter(client)


class TestProjectWithBoard:

    @pytest.mark.asyncio
    async def test_board_located_in_new_project(self, client, jira):
        """The board is created in the new project using the default filter."""
        jira.add("POST", "/rest/api/3/project", json_body={"id": 10001, "key": "ALPHA"})
        jira.add("GET", "/rest/api/3/filter/my", json_body=[{"id": "5", "jql": ""}])
        jira.add("POST", "/rest/agile/1.0/board", json_body={"id": 9, "name": "Alpha board"})

        result = await project_service.create_project_with_board(
            client, {"key": "ALPHA", "name": "Alpha", "projectTypeKey": "software"}, "Alpha board", "scrum",
        )

        assert result["project"]["key"] == "ALPHA"
        assert result["board"]["id"] == 9
        board_body = jira.last_json("POST", "/rest/agile/1.0/board")
        assert board_body == {
            "name": "Alpha board",
            "type": "scrum",
            "filterId": 5,
            "location": {"type": "project", "projectKeyOrId": "ALPHA"},
        }


class TestCreateIssue:
    """Local validation happens before any backend call."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fields,message", [
        ({"summary": "   ", "project": {"key": "A"}, "issuetype": {"id": "1"}},
         "Summary is required and cannot be empty."),
        ({"summary": "x" * 256, "project": {"key": "A"}, "issuetype": {"id": "1"}},
         "Summary cannot exceed 255 characters."),
        ({"summary": "Fix login", "project": {}, "issuetype": {"id": "1"}},
         "Project key is required."),
        ({"summary": "Fix login", "project": {"key": "A"}},
         "Issue type ID is required."),
    ])
    async def test_rejects_invalid_fields(self, client, jira, fields, message):
        """Each broken payload gets its specific message and no request is sent."""
        with pytest.raises(UserInputError) as exc_info:
            await issue_service.create_issue(client, fields)

        assert str(exc_info.value) == message
        assert jira.requests == []

    @pytest.mark.asyncio
    async def test_description_sent_as_adf(self, client, jira):
        """Plain-text descriptions are wrapped in an ADF document."""
        jira.add("POST", "/rest/api/3/issue", status=201, json_body={"id": "100", "key": "A-1"})

        result = await issue_service.create_issue(client, {
            "summary": "Fix login",
            "project": {"key": "A"},
            "issuetype": {"id": "1"},
            "description": "Users cannot log in",
        })

        assert result["key"] == "A-1"
        description = jira.last_json("POST", "/rest/api/3/issue")["fields"]["description"]
        assert description["type"] == "doc"
        assert description["content"][0]["content"][0]["text"] == "Users cannot log in"

    @pytest.mark.asyncio
    async def test_user_story_requires_story_type(self, client, jira):
        """Missing 'Story' issue type lists the available types in the error context."""
        jira.add("GET", "/rest/api/3/issuetype", json_body=[{"id": "1", "name": "Bug"}, {"id": "2", "name": "Task"}])

        with pytest.raises(UserInputError, match="Story issue type not found in Jira instance.") as exc_info:
            await issue_service.create_user_story(client, "A", "As a user I can log in")

        assert exc_info.value.context.request_input["availableTypes"] == ["Bug", "Task"]

    @pytest.mark.asyncio
    async def test_user_story_sets_story_points(self, client, jira):
        """Story points go into the story points custom field."""
        jira.add("GET", "/rest/api/3/issuetype", json_body=[{"id": "7", "name": "Story"}])
        jira.add("POST", "/rest/api/3/issue", status=201, json_body={"id": "101", "key": "A-2"})

        await issue_service.create_user_story(client, "A", "As a user I can log in", story_points=5)

        fields = jira.last_json("POST", "/rest/api/3/issue")["fields"]
        assert fields["issuetype"] == {"id": "7"}
        assert fields[STORY_POINTS_FIELD] == 5


class TestBuildIssueUpdate:

    def test_nothing_requested_gives_empty_payload(self):
        """An update with no changes produces no payload."""
        assert issue_service.build_issue_update() == {}

    def test_unassign_clears_assignee(self):
        assert issue_service.build_issue_update(unassign=True) == {"fields": {"assignee": None}}

    def test_assign_and_unassign_conflict(self):
        """Assigning and unassigning together is rejected."""
        with pytest.raises(UserInputError):
            issue_service.build_issue_update(unassign=True, assignee_account_id="abc")

    def test_comment_goes_to_update_section(self):
        """Comments are added through the update section in ADF."""
        payload = issue_service.build_issue_update(priority_id="2", comment="Looks good")
        assert payload["fields"] == {"priority": {"id": "2"}}
        body = payload["update"]["comment"][0]["add"]["body"]
        assert body["content"][0]["content"][0]["text"] == "Looks good"

    def test_blank_summary_rejected(self):
        with pytest.raises(UserInputError, match="Summary cannot be empty."):
            issue_service.build_issue_update(summary="  ")


class TestEstimation:
    """Bulk estimation of unestimated stories."""

    @pytest.mark.asyncio
    async def test_estimates_only_unestimated_stories(self, client, jira):
        """Stories with points or the estimation label are skipped; others get defaults."""
        jira.add("GET", "/rest/api/3/project/A", json_body={"id": "1", "key": "A"})
        jira.add("POST", "/rest/api/3/search", json_body={"issues": [
            {"key": "A-1", "fields": {"summary": "Done", STORY_POINTS_FIELD: 5, "labels": []}},
            {"key": "A-2", "fields": {"summary": "Labelled", STORY_POINTS_FIELD: None, "labels": ["ai-estimation"]}},
            {"key": "A-3", "fields": {"summary": "New", STORY_POINTS_FIELD: None, "labels": ["ui"]}},
        ]})
        jira.add("PUT", "/rest/api/3/issue/A-3", status=204)

        result = await estimation_service.estimate_stories_in_project(client, "A")

        assert result["totalStories"] == 3
        assert result["unestimatedStories"] == 1
        assert result["estimatedStories"] == 1
        assert result["failedEstimations"] == 0
        assert result["estimatedIssues"] == [
            {"key": "A-3", "summary": "New", "storyPoints": 3, "labels": ["ui", "ai-estimation"]},
        ]
        update = jira.last_json("PUT", "/rest/api/3/issue/A-3")
        assert update["fields"][STORY_POINTS_FIELD] == 3
        assert "comment" in update["update"]

    @pytest.mark.asyncio
    async def test_per_story_failures_are_collected(self, client, jira):
        """A failed update is reported in failedIssues without aborting the run."""
        jira.add("GET", "/rest/api/3/project/A", json_body={"id": "1", "key": "A"})
        jira.add("POST", "/rest/api/3/search", json_body={"issues": [
            {"key": "A-1", "fields": {"summary": "Locked", "labels": []}},
            {"key": "A-2", "fields": {"summary": "Open", "labels": []}},
        ]})
        jira.add("PUT", "/rest/api/3/issue/A-1", status=403)
        jira.add("PUT", "/rest/api/3/issue/A-2", status=204)

        result = await estimation_service.estimate_stories_in_project(client, "A", default_story_points=8)

        assert result["estimatedStories"] == 1
        assert result["failedEstimations"] == 1
        assert result["failedIssues"][0]["key"] == "A-1"
        assert result["failedIssues"][0]["error"] == "Access forbidden for updateIssue."

    @pytest.mark.asyncio
    async def test_missing_project_is_raised(self, client, jira):
        jira.add("GET", "/rest/api/3/project/NOPE", status=404)

        with pytest.raises(NotFoundError):
            await estimation_service.estimate_stories_in_project(client, "NOPE")

    @pytest.mark.asyncio
    async def test_stats(self, client, jira):
        """Stats count estimated, labelled and average points."""
        jira.add("POST", "/rest/api/3/search", json_body={"issues": [
            {"key": "A-1", "fields": {STORY_POINTS_FIELD: 3, "labels": ["ai-estimation"]}},
            {"key": "A-2", "fields": {STORY_POINTS_FIELD: 2, "labels": []}},
            {"key": "A-3", "fields": {STORY_POINTS_FIELD: 2, "labels": []}},
            {"key": "A-4", "fields": {"labels": []}},
        ]})

        stats = await estimation_service.get_project_estimation_stats(client, "A")

        assert stats == {
            "projectKey": "A",
            "totalStories": 4,
            "estimatedStories": 3,
            "unestimatedStories": 1,
            "aiEstimatedStories": 1,
            "averageStoryPoints": 2.33,
        }


class TestCustomFields:

    @pytest.mark.asyncio
    async def test_find_by_name_is_case_insensitive(self, client, jira):
        jira.add("GET", "/rest/api/3/field", json_body=[
            {"id": "summary", "name": "Summary", "custom": False},
            {"id": "customfield_10020", "name": "Team", "custom": True},
        ])

        field = await custom_field_service.find_custom_field_by_name(client, "team")

        assert field["id"] == "customfield_10020"

    @pytest.mark.asyncio
    async def test_find_returns_none_on_failure(self, client, jira):
        """Lookup failures are reported as 'not found'."""
        jira.add("GET", "/rest/api/3/field", status=500)
        assert await custom_field_service.find_custom_field_by_name(client, "Team") is None

    @pytest.mark.asyncio
    async def test_ensure_story_points_prefers_software_field(self, client, jira):
        """The Jira Software story points field is used when no name matches."""
        jira.add("GET", "/rest/api/3/field", json_body=[
            {"id": "customfield_10016", "name": "Story point estimate", "custom": True,
             "schema": {"custom": "com.pyxis.greenhopper.jira:jsw-story-points"}},
        ])

        assert await custom_field_service.ensure_story_points_field(client) == "customfield_10016"
        assert jira.calls("POST", "/rest/api/3/field") == []

    @pytest.mark.asyncio
    async def test_ensure_story_points_creates_number_field(self, client, jira):
        """With no candidate a numeric field with its default searcher is created."""
        jira.add("GET", "/rest/api/3/field", json_body=[{"id": "summary", "name": "Summary", "custom": False}])
        jira.add("POST", "/rest/api/3/field", status=201, json_body={"id": "customfield_10100", "name": "Story Points"})

        assert await custom_field_service.ensure_story_points_field(client) == "customfield_10100"
        body = jira.last_json("POST", "/rest/api/3/field")
        assert body["type"] == "com.atlassian.jira.plugin.system.customfieldtypes:float"
        assert body["searcherKey"] == "com.atlassian.jira.plugin.system.customfieldtypes:exactnumber"


class TestFieldConfiguration:

    def _stub_project(self, jira):
        jira.add("GET", "/rest/api/3/project/A", json_body={"id": "10000", "key": "A"})
        jira.add("GET", "/rest/api/3/fieldconfigurationscheme/project", json_body={
            "values": [{"projectIds": ["10000"], "fieldConfigurationScheme": {"id": "30", "name": "Scheme"}}],
        })
        jira.add("GET", "/rest/api/3/fieldconfigurationscheme/mapping", json_body={
            "values": [{"fieldConfigurationSchemeId": "30", "issueTypeId": "default", "fieldConfigurationId": "40"}],
        })

    @pytest.mark.asyncio
    async def test_schemes_for_project(self, client, jira):
        """Schemes are looked up by the project's numeric id."""
        self._stub_project(jira)

        schemes = await field_configuration_service.get_project_field_configuration_schemes(client, "A")

        assert schemes == [{"id": "30", "name": "Scheme"}]
        request = jira.calls("GET", "/rest/api/3/fieldconfigurationscheme/project")[0]
        assert request.url.params["projectId"] == "10000"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("hidden,expected", [(False, True), (True, False)])
    async def test_field_enabled_unless_hidden(self, client, jira, hidden, expected):
        self._stub_project(jira)
        jira.add("GET", "/rest/api/3/fieldconfiguration/40/fields", json_body={
            "values": [{"id": "customfield_10016", "isHidden": hidden}],
        })

        enabled = await field_configuration_service.is_field_enabled_in_project(client, "A", "customfield_10016")

        assert enabled is expected

    @pytest.mark.asyncio
    async def test_field_check_failure_is_false(self, client, jira):
        """Lookup errors make the check answer False rather than raise."""
        jira.add("GET", "/rest/api/3/project/A", status=403)

        assert await field_configuration_service.is_field_enabled_in_project(client, "A", "customfield_10016") is False

"""MCP tool handlers.

All handlers follow a consistent pattern:
- Accept: the validated input model and the shared JiraClient
- Return: list[TextContent]
- Let translated JiraApiError exceptions propagate to the caller

Handlers never see raw argument dicts; validation happens in the registry.
"""
import logging

from mcp.types import TextContent

from . import formatters
from . import schemas
from .errors import UserInputError
from .services import backlog as backlog_service
from .services import board as board_service
from .services import custom_field as custom_field_service
from .services import estimation as estimation_service
from .services import field_configuration as field_configuration_service
from .services import filter as filter_service
from .services import issue as issue_service
from .services import project as project_service
from .services.networking import JiraClient

logger = logging.getLogger("jira-mcp.handlers")


def _rank_body(params: schemas.RankedIssuesInput) -> dict:
    return params.model_dump(
        include={"issues", "rankAfterIssue", "rankBeforeIssue", "rankCustomFieldId"},
        exclude_none=True,
    )


# ============================================================================
# Board Handlers
# ============================================================================

async def handle_get_all_boards(params: schemas.GetAllBoardsInput, client: JiraClient) -> list[TextContent]:
    """List boards with pagination and filtering."""
    result = await board_service.get_all_boards(client, params.model_dump(exclude_none=True))
    logger.info(f"Retrieved {len(result.get('values', []))} boards")
    return formatters.json_result(result)


async def handle_create_board(params: schemas.CreateBoardInput, client: JiraClient) -> list[TextContent]:
    result = await board_service.create_board(client, params.model_dump(exclude_none=True))
    logger.info(f"Created board: {result.get('name')} (ID: {result.get('id')})")
    return formatters.json_result(result)


async def handle_get_board_by_id(params: schemas.BoardIdInput, client: JiraClient) -> list[TextContent]:
    result = await board_service.get_board_by_id(client, params.boardId)
    return formatters.json_result(result)


async def handle_delete_board(params: schemas.BoardIdInput, client: JiraClient) -> list[TextContent]:
    await board_service.delete_board(client, params.boardId)
    logger.info(f"Deleted board {params.boardId}")
    return formatters.text_result(f"Successfully deleted board {params.boardId}")


async def handle_get_board_by_filter_id(params: schemas.FilterIdInput, client: JiraClient) -> list[TextContent]:
    result = await board_service.get_board_by_filter_id(client, params.filterId)
    return formatters.json_result(result)


async def handle_get_board_configuration(params: schemas.BoardIdInput, client: JiraClient) -> list[TextContent]:
    result = await board_service.get_board_configuration(client, params.boardId)
    return formatters.json_result(result)


async def handle_get_board_backlog(params: schemas.BoardPageInput, client: JiraClient) -> list[TextContent]:
    result = await board_service.get_board_backlog(
        client, params.boardId, params.model_dump(exclude={"boardId"}, exclude_none=True)
    )
    return formatters.json_result(result)


async def handle_get_board_epics(params: schemas.BoardPageInput, client: JiraClient) -> list[TextContent]:
    result = await board_service.get_board_epics(
        client, params.boardId, params.model_dump(exclude={"boardId"}, exclude_none=True)
    )
    return formatters.json_result(result)


async def handle_get_board_sprints(params: schemas.BoardSprintsInput, client: JiraClient) -> list[TextContent]:
    result = await board_service.get_board_sprints(
        client, params.boardId, params.model_dump(exclude={"boardId"}, exclude_none=True)
    )
    return formatters.json_result(result)


async def handle_get_board_issues(params: schemas.BoardPageInput, client: JiraClient) -> list[TextContent]:
    result = await board_service.get_board_issues(
        client, params.boardId, params.model_dump(exclude={"boardId"}, exclude_none=True)
    )
    return formatters.json_result(result)


async def handle_move_issues_to_board(params: schemas.MoveIssuesToBoardInput, client: JiraClient) -> list[TextContent]:
    await board_service.move_issues_to_board(client, params.boardId, _rank_body(params))
    logger.info(f"Moved {len(params.issues)} issues to board {params.boardId}")
    return formatters.text_result(formatters.format_moved_issues(params.issues, f"board {params.boardId}"))


# ============================================================================
# Backlog Handlers
# ============================================================================

async def handle_move_issues_to_backlog(params: schemas.MoveIssuesToBacklogInput, client: JiraClient) -> list[TextContent]:
    """Move issues to the backlog (remove from sprints). The backend caps this at 50 issues."""
    await backlog_service.move_issues_to_backlog(client, params.issues)
    logger.info(f"Moved {len(params.issues)} issues to backlog")
    return formatters.text_result(formatters.format_moved_issues(params.issues, "backlog"))


async def handle_move_issues_to_backlog_for_board(
    params: schemas.MoveIssuesToBoardInput,
    client: JiraClient
) -> list[TextContent]:
    await backlog_service.move_issues_to_backlog_for_board(client, params.boardId, _rank_body(params))
    logger.info(f"Moved {len(params.issues)} issues to backlog for board {params.boardId}")
    return formatters.text_result(
        formatters.format_moved_issues(params.issues, f"backlog for board {params.boardId}")
    )


# ============================================================================
# Filter Handlers
# ============================================================================

async def handle_get_my_filters(params: schemas.EmptyInput, client: JiraClient) -> list[TextContent]:
    return formatters.json_result(await filter_service.get_my_filters(client))


async def handle_get_favourite_filters(params: schemas.EmptyInput, client: JiraClient) -> list[TextContent]:
    return formatters.json_result(await filter_service.get_favourite_filters(client))


async def handle_get_filter(params: schemas.FilterIdInput, client: JiraClient) -> list[TextContent]:
    return formatters.json_result(await filter_service.get_filter(client, str(params.filterId)))


async def handle_search_filters(params: schemas.SearchFiltersInput, client: JiraClient) -> list[TextContent]:
    result = await filter_service.search_filters(client, params.model_dump(exclude_none=True))
    return formatters.json_result(result)


async def handle_create_filter(params: schemas.CreateFilterInput, client: JiraClient) -> list[TextContent]:
    result = await filter_service.create_filter(client, params.model_dump(exclude_none=True))
    logger.info(f"Created filter: {result.get('name')} (ID: {result.get('id')})")
    return formatters.json_result(result)


# ============================================================================
# Project Handlers
# ============================================================================

async def handle_create_project(params: schemas.CreateProjectInput, client: JiraClient) -> list[TextContent]:
    result = await project_service.create_project(client, params.model_dump(exclude_none=True))
    logger.info(f"Created project {params.key} (ID: {result.get('id')})")
    return formatters.json_result(result)


async def handle_get_all_projects(params: schemas.GetAllProjectsInput, client: JiraClient) -> list[TextContent]:
    result = await project_service.get_all_projects(client, params.model_dump(exclude_none=True))
    return formatters.json_result(result)


async def handle_get_project(params: schemas.GetProjectInput, client: JiraClient) -> list[TextContent]:
    result = await project_service.get_project(client, params.projectIdOrKey, params.expand)
    return formatters.json_result(result)


async def handle_update_project(params: schemas.UpdateProjectInput, client: JiraClient) -> list[TextContent]:
    changes = params.model_dump(exclude={"projectIdOrKey"}, exclude_none=True)
    if not changes:
        raise UserInputError("No project changes were provided.")
    result = await project_service.update_project(client, params.projectIdOrKey, changes)
    return formatters.json_result(result)


async def handle_delete_project(params: schemas.ProjectIdOrKeyInput, client: JiraClient) -> list[TextContent]:
    await project_service.delete_project(client, params.projectIdOrKey)
    logger.info(f"Deleted project {params.projectIdOrKey}")
    return formatters.text_result(f"Successfully deleted project {params.projectIdOrKey}")


async def handle_create_project_with_board(
    params: schemas.CreateProjectWithBoardInput,
    client: JiraClient
) -> list[TextContent]:
    """Create a project and a board located in it."""
    project = params.model_dump(exclude={"boardName", "boardType"}, exclude_none=True)
    result = await project_service.create_project_with_board(
        client, project, params.boardName, params.boardType
    )
    return formatters.text_result(formatters.format_project_with_board(result))


async def handle_get_current_user(params: schemas.EmptyInput, client: JiraClient) -> list[TextContent]:
    return formatters.json_result(await project_service.get_current_user(client))


# ============================================================================
# Issue Handlers
# ============================================================================

async def handle_get_issue_types(params: schemas.EmptyInput, client: JiraClient) -> list[TextContent]:
    return formatters.json_result(await issue_service.get_issue_types(client))


async def handle_create_issue(params: schemas.CreateIssueInput, client: JiraClient) -> list[TextContent]:
    """Create an issue. Summary and project/type are checked before calling Jira."""
    fields = {
        "project": {"key": params.projectKey},
        "summary": params.summary,
        "issuetype": {"id": params.issueTypeId},
    }
    if params.description:
        fields["description"] = params.description
    if params.assigneeAccountId:
        fields["assignee"] = {"accountId": params.assigneeAccountId}
    if params.priority:
        fields["priority"] = {"name": params.priority}
    if params.components:
        fields["components"] = [{"name": name} for name in params.components]
    if params.fixVersions:
        fields["fixVersions"] = [{"name": name} for name in params.fixVersions]
    if params.labels:
        fields["labels"] = params.labels

    result = await issue_service.create_issue(client, fields)
    return formatters.json_result(result)


async def handle_get_issue(params: schemas.GetIssueInput, client: JiraClient) -> list[TextContent]:
    result = await issue_service.get_issue(client, params.issueKeyOrId, params.expand)
    return formatters.json_result(result)


async def handle_search_issues(params: schemas.SearchIssuesInput, client: JiraClient) -> list[TextContent]:
    result = await issue_service.search_issues(client, params.model_dump(exclude_none=True))
    logger.info(f"Search returned {len(result.get('issues', []))} of {result.get('total')} issues")
    return formatters.json_result(result)


async def handle_update_issue(params: schemas.UpdateIssueInput, client: JiraClient) -> list[TextContent]:
    """Apply field edits and a comment in one call, then an optional transition.

    Rejects requests that change nothing.
    """
    payload = issue_service.build_issue_update(
        assignee_account_id=params.assigneeAccountId,
        unassign=params.unassign,
        priority_id=params.priorityId,
        summary=params.summary,
        description=params.description,
        comment=params.comment,
    )
    if not payload and not params.transitionId:
        raise UserInputError("No changes requested for updateIssue.")

    if payload:
        await issue_service.update_issue(client, params.issueKeyOrId, payload)
    if params.transitionId:
        await issue_service.transition_issue(client, params.issueKeyOrId, params.transitionId)

    changed = list(payload.get("fields", {}))
    if "update" in payload:
        changed.append("comment")
    return formatters.text_result(
        formatters.format_issue_update(params.issueKeyOrId, changed, params.transitionId)
    )


async def handle_create_user_story(params: schemas.CreateUserStoryInput, client: JiraClient) -> list[TextContent]:
    result = await issue_service.create_user_story(
        client,
        params.projectKey,
        params.summary,
        description=params.description,
        assignee_account_id=params.assigneeAccountId,
        story_points=params.storyPoints,
        labels=params.labels,
    )
    return formatters.json_result(result)


async def handle_create_bug(params: schemas.CreateBugInput, client: JiraClient) -> list[TextContent]:
    result = await issue_service.create_bug(
        client,
        params.projectKey,
        params.summary,
        description=params.description,
        assignee_account_id=params.assigneeAccountId,
        priority=params.priority,
        labels=params.labels,
    )
    return formatters.json_result(result)


# ============================================================================
# Estimation Handlers
# ============================================================================

async def handle_estimate_stories_in_project(
    params: schemas.EstimateStoriesInput,
    client: JiraClient
) -> list[TextContent]:
    result = await estimation_service.estimate_stories_in_project(
        client,
        params.projectKey,
        default_story_points=params.defaultStoryPoints,
        estimation_label=params.estimationLabel,
        max_results=params.maxResults,
    )
    return formatters.text_result(formatters.format_estimation_result(result))


async def handle_get_project_estimation_stats(params: schemas.ProjectKeyInput, client: JiraClient) -> list[TextContent]:
    result = await estimation_service.get_project_estimation_stats(client, params.projectKey)
    return formatters.json_result(result)


# ============================================================================
# Field Handlers
# ============================================================================

async def handle_get_fields(params: schemas.EmptyInput, client: JiraClient) -> list[TextContent]:
    return formatters.json_result(await custom_field_service.get_fields(client))


async def handle_find_custom_field(params: schemas.FieldNameInput, client: JiraClient) -> list[TextContent]:
    """Best-effort: reports a miss instead of failing."""
    field = await custom_field_service.find_custom_field_by_name(client, params.fieldName)
    if field is None:
        return formatters.text_result(f"Custom field not found: {params.fieldName}")
    return formatters.json_result(field)


async def handle_ensure_story_points_field(
    params: schemas.StoryPointsFieldInput,
    client: JiraClient
) -> list[TextContent]:
    field_id = await custom_field_service.ensure_story_points_field(client, params.fieldName)
    return formatters.json_result({"fieldName": params.fieldName, "fieldId": field_id})


async def handle_get_project_field_configuration_schemes(
    params: schemas.ProjectKeyInput,
    client: JiraClient
) -> list[TextContent]:
    result = await field_configuration_service.get_project_field_configuration_schemes(client, params.projectKey)
    return formatters.json_result(result)


async def handle_is_field_enabled_in_project(
    params: schemas.FieldEnabledInput,
    client: JiraClient
) -> list[TextContent]:
    enabled = await field_configuration_service.is_field_enabled_in_project(
        client, params.projectKey, params.fieldId
    )
    return formatters.json_result({"projectKey": params.projectKey, "fieldId": params.fieldId, "enabled": enabled})

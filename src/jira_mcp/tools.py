"""MCP tool definitions for Jira.

This module provides the definitive list of tools. Both the stdio and the
HTTP transports serve the same registry built from it, so every transport
exposes identical functionality.
"""
from . import handlers
from . import schemas
from .registry import ToolDefinition, ToolRegistry


def get_tool_definitions() -> list[ToolDefinition]:
    """Get the list of all Jira MCP tools."""
    return [
        # ============================================================================
        # Board Tools
        # ============================================================================
        ToolDefinition(
            name="get_all_boards",
            title="Get All Boards",
            description="Retrieve all boards visible to the user with optional filtering by type, name or project. "
                        "Use get_board_by_id() for details of a single board.",
            input_model=schemas.GetAllBoardsInput,
            handler=handlers.handle_get_all_boards,
        ),
        ToolDefinition(
            name="create_board",
            title="Create Board",
            description="Create a new scrum or kanban board backed by an existing filter. "
                        "Errors: 400 (invalid filter or location), 403 (no permission).",
            input_model=schemas.CreateBoardInput,
            handler=handlers.handle_create_board,
        ),
        ToolDefinition(
            name="get_board_by_id",
            title="Get Board by ID",
            description="Retrieve board details by board ID.",
            input_model=schemas.BoardIdInput,
            handler=handlers.handle_get_board_by_id,
        ),
        ToolDefinition(
            name="delete_board",
            title="Delete Board",
            description="Delete a board. The board's filter and issues are not affected.",
            input_model=schemas.BoardIdInput,
            handler=handlers.handle_delete_board,
        ),
        ToolDefinition(
            name="get_board_by_filter_id",
            title="Get Board by Filter ID",
            description="Find the board that uses a given filter.",
            input_model=schemas.FilterIdInput,
            handler=handlers.handle_get_board_by_filter_id,
        ),
        ToolDefinition(
            name="get_board_configuration",
            title="Get Board Configuration",
            description="Retrieve a board's column, estimation and ranking configuration.",
            input_model=schemas.BoardIdInput,
            handler=handlers.handle_get_board_configuration,
        ),
        ToolDefinition(
            name="get_board_backlog",
            title="Get Board Backlog",
            description="Retrieve issues in a board's backlog with pagination.",
            input_model=schemas.BoardPageInput,
            handler=handlers.handle_get_board_backlog,
        ),
        ToolDefinition(
            name="get_board_epics",
            title="Get Board Epics",
            description="Retrieve epics of a board with pagination.",
            input_model=schemas.BoardPageInput,
            handler=handlers.handle_get_board_epics,
        ),
        ToolDefinition(
            name="get_board_sprints",
            title="Get Board Sprints",
            description="Retrieve sprints of a scrum board, optionally filtered by state. "
                        "Kanban boards have no sprints and return 400.",
            input_model=schemas.BoardSprintsInput,
            handler=handlers.handle_get_board_sprints,
        ),
        ToolDefinition(
            name="get_board_issues",
            title="Get Board Issues",
            description="Retrieve all issues on a board with pagination.",
            input_model=schemas.BoardPageInput,
            handler=handlers.handle_get_board_issues,
        ),
        ToolDefinition(
            name="move_issues_to_board",
            title="Move Issues to Board",
            description="Move issues to a board with optional ranking relative to another issue.",
            input_model=schemas.MoveIssuesToBoardInput,
            handler=handlers.handle_move_issues_to_board,
        ),
        # ============================================================================
        # Backlog Tools
        # ============================================================================
        ToolDefinition(
            name="move_issues_to_backlog",
            title="Move Issues to Backlog",
            description="Move issues to the backlog (remove them from sprints). At most 50 issues per call.",
            input_model=schemas.MoveIssuesToBacklogInput,
            handler=handlers.handle_move_issues_to_backlog,
        ),
        ToolDefinition(
            name="move_issues_to_backlog_for_board",
            title="Move Issues to Backlog for Board",
            description="Move issues to the backlog of a specific board with optional ranking.",
            input_model=schemas.MoveIssuesToBoardInput,
            handler=handlers.handle_move_issues_to_backlog_for_board,
        ),
        # ============================================================================
        # Filter Tools
        # ============================================================================
        ToolDefinition(
            name="get_my_filters",
            title="Get My Filters",
            description="List filters owned by the current user.",
            input_model=schemas.EmptyInput,
            handler=handlers.handle_get_my_filters,
        ),
        ToolDefinition(
            name="get_favourite_filters",
            title="Get Favourite Filters",
            description="List filters the current user marked as favourite.",
            input_model=schemas.EmptyInput,
            handler=handlers.handle_get_favourite_filters,
        ),
        ToolDefinition(
            name="get_filter",
            title="Get Filter",
            description="Retrieve a filter, including its JQL, by ID.",
            input_model=schemas.FilterIdInput,
            handler=handlers.handle_get_filter,
        ),
        ToolDefinition(
            name="search_filters",
            title="Search Filters",
            description="Search filters by name, owner, group or project with pagination.",
            input_model=schemas.SearchFiltersInput,
            handler=handlers.handle_search_filters,
        ),
        ToolDefinition(
            name="create_filter",
            title="Create Filter",
            description="Create a filter from a JQL query. Filters back boards: create_filter() → create_board(filterId=...).",
            input_model=schemas.CreateFilterInput,
            handler=handlers.handle_create_filter,
        ),
        # ============================================================================
        # Project Tools
        # ============================================================================
        ToolDefinition(
            name="create_project",
            title="Create Project",
            description="Create a project. Use get_current_user() to find an accountId for leadAccountId.",
            input_model=schemas.CreateProjectInput,
            handler=handlers.handle_create_project,
        ),
        ToolDefinition(
            name="get_all_projects",
            title="Get All Projects",
            description="Search projects visible to the user with pagination.",
            input_model=schemas.GetAllProjectsInput,
            handler=handlers.handle_get_all_projects,
        ),
        ToolDefinition(
            name="get_project",
            title="Get Project",
            description="Retrieve project details by ID or key.",
            input_model=schemas.GetProjectInput,
            handler=handlers.handle_get_project,
        ),
        ToolDefinition(
            name="update_project",
            title="Update Project",
            description="Update a project's key, name, description, lead, URL or default assignee.",
            input_model=schemas.UpdateProjectInput,
            handler=handlers.handle_update_project,
        ),
        ToolDefinition(
            name="delete_project",
            title="Delete Project",
            description="Delete a project (moved to the Jira trash).",
            input_model=schemas.ProjectIdOrKeyInput,
            handler=handlers.handle_delete_project,
        ),
        ToolDefinition(
            name="create_project_with_board",
            title="Create Project with Board",
            description="Create a project and a board located in it, backed by a default catch-all filter.",
            input_model=schemas.CreateProjectWithBoardInput,
            handler=handlers.handle_create_project_with_board,
        ),
        ToolDefinition(
            name="get_current_user",
            title="Get Current User",
            description="Retrieve the account the server authenticates as.",
            input_model=schemas.EmptyInput,
            handler=handlers.handle_get_current_user,
        ),
        # ============================================================================
        # Issue Tools
        # ============================================================================
        ToolDefinition(
            name="get_issue_types",
            title="Get Issue Types",
            description="List issue types available to the user. Use the id with create_issue(issueTypeId=...).",
            input_model=schemas.EmptyInput,
            handler=handlers.handle_get_issue_types,
        ),
        ToolDefinition(
            name="create_issue",
            title="Create Issue",
            description="Create an issue. Summary must be non-empty and at most 255 characters; "
                        "a plain-text description is converted to Atlassian Document Format.",
            input_model=schemas.CreateIssueInput,
            handler=handlers.handle_create_issue,
        ),
        ToolDefinition(
            name="get_issue",
            title="Get Issue",
            description="Retrieve an issue by key or ID.",
            input_model=schemas.GetIssueInput,
            handler=handlers.handle_get_issue,
        ),
        ToolDefinition(
            name="search_issues",
            title="Search Issues",
            description="Search issues with JQL, e.g. jql='project = ABC AND status = \"In Progress\"'.",
            input_model=schemas.SearchIssuesInput,
            handler=handlers.handle_search_issues,
        ),
        ToolDefinition(
            name="update_issue",
            title="Update Issue",
            description="Update assignee, priority, summary or description, add a comment, "
                        "and/or apply a workflow transition. At least one change is required.",
            input_model=schemas.UpdateIssueInput,
            handler=handlers.handle_update_issue,
        ),
        ToolDefinition(
            name="create_user_story",
            title="Create User Story",
            description="Create a Story issue, optionally with story points and labels.",
            input_model=schemas.CreateUserStoryInput,
            handler=handlers.handle_create_user_story,
        ),
        ToolDefinition(
            name="create_bug",
            title="Create Bug",
            description="Create a Bug issue, optionally with priority and labels.",
            input_model=schemas.CreateBugInput,
            handler=handlers.handle_create_bug,
        ),
        # ============================================================================
        # Estimation Tools
        # ============================================================================
        ToolDefinition(
            name="estimate_stories_in_project",
            title="Estimate Stories in Project",
            description="Give every unestimated story in a project a default story point value, "
                        "tag it with the estimation label and add a review comment.",
            input_model=schemas.EstimateStoriesInput,
            handler=handlers.handle_estimate_stories_in_project,
        ),
        ToolDefinition(
            name="get_project_estimation_stats",
            title="Get Project Estimation Stats",
            description="Count estimated and unestimated stories in a project and average their story points.",
            input_model=schemas.ProjectKeyInput,
            handler=handlers.handle_get_project_estimation_stats,
        ),
        # ============================================================================
        # Field Tools
        # ============================================================================
        ToolDefinition(
            name="get_fields",
            title="Get Fields",
            description="List all system and custom fields.",
            input_model=schemas.EmptyInput,
            handler=handlers.handle_get_fields,
        ),
        ToolDefinition(
            name="find_custom_field",
            title="Find Custom Field",
            description="Find a custom field by name (case-insensitive).",
            input_model=schemas.FieldNameInput,
            handler=handlers.handle_find_custom_field,
        ),
        ToolDefinition(
            name="ensure_story_points_field",
            title="Ensure Story Points Field",
            description="Return the id of the story points field, creating a numeric custom field if none exists.",
            input_model=schemas.StoryPointsFieldInput,
            handler=handlers.handle_ensure_story_points_field,
        ),
        ToolDefinition(
            name="get_project_field_configuration_schemes",
            title="Get Project Field Configuration Schemes",
            description="List field configuration schemes assigned to a project.",
            input_model=schemas.ProjectKeyInput,
            handler=handlers.handle_get_project_field_configuration_schemes,
        ),
        ToolDefinition(
            name="is_field_enabled_in_project",
            title="Is Field Enabled in Project",
            description="Check whether a field is visible in the project's field configurations.",
            input_model=schemas.FieldEnabledInput,
            handler=handlers.handle_is_field_enabled_in_project,
        ),
    ]


def register_tools(registry: ToolRegistry) -> ToolRegistry:
    for definition in get_tool_definitions():
        registry.register(definition)
    return registry

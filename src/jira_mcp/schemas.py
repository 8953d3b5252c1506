"""Pydantic schemas for MCP tool input validation.

Field names follow the Jira REST API (camelCase) so validated models can be
dumped straight into request bodies and query strings. Each model's JSON
schema is what clients see as the tool's inputSchema.
"""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


BoardType = Literal["scrum", "kanban"]
ProjectTypeKey = Literal["software", "service_desk", "business"]
AssigneeType = Literal["PROJECT_LEAD", "UNASSIGNED"]


class ToolInput(BaseModel):
    """Base for tool inputs. Numeric ids sent where strings are expected are accepted."""

    model_config = ConfigDict(coerce_numbers_to_str=True)


class EmptyInput(ToolInput):
    pass


# Board Schemas

class GetAllBoardsInput(ToolInput):
    startAt: Optional[int] = Field(None, ge=0, description="Index of the first board to return")
    maxResults: Optional[int] = Field(None, ge=1, description="Maximum number of boards to return")
    type: Optional[BoardType] = Field(None, description="Filter by board type")
    name: Optional[str] = Field(None, description="Filter by boards whose name contains this value")
    projectKeyOrId: Optional[str] = Field(None, description="Filter by project key or id")


class BoardLocation(ToolInput):
    type: Literal["project", "user"]
    projectKeyOrId: Optional[str] = None


class CreateBoardInput(ToolInput):
    name: str = Field(..., min_length=1, description="Board name")
    type: BoardType
    filterId: int = Field(..., description="Id of the filter that selects the board's issues")
    location: Optional[BoardLocation] = None


class BoardIdInput(ToolInput):
    boardId: int = Field(..., description="Board id")


class FilterIdInput(ToolInput):
    filterId: int = Field(..., description="Filter id")


class BoardPageInput(BoardIdInput):
    startAt: Optional[int] = Field(None, ge=0)
    maxResults: Optional[int] = Field(None, ge=1)


class BoardSprintsInput(BoardPageInput):
    state: Optional[str] = Field(
        None,
        description="Comma-separated sprint states to include: future, active, closed",
    )


class RankedIssuesInput(ToolInput):
    issues: list[str] = Field(..., min_length=1, description="Issue keys or ids")
    rankAfterIssue: Optional[str] = None
    rankBeforeIssue: Optional[str] = None
    rankCustomFieldId: Optional[int] = None


class MoveIssuesToBoardInput(RankedIssuesInput):
    boardId: int = Field(..., description="Board id")


# Backlog Schemas

class MoveIssuesToBacklogInput(ToolInput):
    issues: list[str] = Field(
        ...,
        min_length=1,
        description="Issue keys or ids to move to the backlog (at most 50 per call)",
    )


# Filter Schemas

class SearchFiltersInput(ToolInput):
    filterName: Optional[str] = None
    accountId: Optional[str] = None
    owner: Optional[str] = Field(None, description="Owner account id")
    groupname: Optional[str] = None
    projectId: Optional[int] = None
    id: Optional[list[int]] = Field(None, description="Filter ids to return")
    orderBy: Optional[str] = None
    startAt: Optional[int] = Field(None, ge=0)
    maxResults: Optional[int] = Field(None, ge=1)
    expand: Optional[str] = None


class CreateFilterInput(ToolInput):
    name: str = Field(..., min_length=1)
    jql: str = Field(..., description="JQL query the filter runs")
    description: Optional[str] = None
    favourite: Optional[bool] = None


# Project Schemas

class CreateProjectInput(ToolInput):
    key: str = Field(
        ...,
        pattern=r"^[A-Z][A-Z0-9]{1,9}$",
        description="Project key: 2-10 uppercase letters or digits, starting with a letter",
    )
    name: str = Field(..., min_length=1)
    projectTypeKey: ProjectTypeKey
    projectTemplateKey: Optional[str] = None
    description: Optional[str] = None
    leadAccountId: Optional[str] = None
    url: Optional[str] = None
    assigneeType: Optional[AssigneeType] = None


class GetAllProjectsInput(ToolInput):
    startAt: Optional[int] = Field(None, ge=0)
    maxResults: Optional[int] = Field(None, ge=1)
    orderBy: Optional[str] = None
    query: Optional[str] = Field(None, description="Match against project key or name")
    typeKey: Optional[str] = None
    status: Optional[list[Literal["live", "archived", "deleted"]]] = None


class ProjectIdOrKeyInput(ToolInput):
    projectIdOrKey: str = Field(..., min_length=1)


class GetProjectInput(ProjectIdOrKeyInput):
    expand: Optional[str] = None


class UpdateProjectInput(ProjectIdOrKeyInput):
    key: Optional[str] = Field(None, pattern=r"^[A-Z][A-Z0-9]{1,9}$")
    name: Optional[str] = None
    description: Optional[str] = None
    leadAccountId: Optional[str] = None
    url: Optional[str] = None
    assigneeType: Optional[AssigneeType] = None


class CreateProjectWithBoardInput(CreateProjectInput):
    boardName: str = Field(..., min_length=1)
    boardType: BoardType


class ProjectKeyInput(ToolInput):
    projectKey: str = Field(..., min_length=1)


# Issue Schemas

class CreateIssueInput(ToolInput):
    projectKey: str
    summary: str = Field(..., description="Issue summary, at most 255 characters")
    issueTypeId: str
    description: Optional[str] = Field(None, description="Plain text, converted to Atlassian Document Format")
    assigneeAccountId: Optional[str] = None
    priority: Optional[str] = Field(None, description="Priority name, e.g. High")
    components: Optional[list[str]] = Field(None, description="Component names")
    fixVersions: Optional[list[str]] = Field(None, description="Version names")
    labels: Optional[list[str]] = None


class GetIssueInput(ToolInput):
    issueKeyOrId: str = Field(..., min_length=1)
    expand: Optional[str] = None


class SearchIssuesInput(ToolInput):
    jql: Optional[str] = None
    startAt: Optional[int] = Field(None, ge=0)
    maxResults: Optional[int] = Field(None, ge=1)
    fields: Optional[list[str]] = None
    expand: Optional[list[str]] = None


class UpdateIssueInput(ToolInput):
    issueKeyOrId: str = Field(..., min_length=1)
    assigneeAccountId: Optional[str] = None
    priorityId: Optional[str] = None
    transitionId: Optional[str] = None
    comment: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    unassign: bool = Field(False, description="Clear the assignee")


class CreateUserStoryInput(ToolInput):
    projectKey: str
    summary: str
    description: Optional[str] = None
    assigneeAccountId: Optional[str] = None
    storyPoints: Optional[float] = Field(None, ge=0)
    labels: Optional[list[str]] = None


class CreateBugInput(ToolInput):
    projectKey: str
    summary: str
    description: Optional[str] = None
    assigneeAccountId: Optional[str] = None
    priority: Optional[str] = None
    labels: Optional[list[str]] = None


# Estimation Schemas

class EstimateStoriesInput(ProjectKeyInput):
    defaultStoryPoints: float = Field(3, gt=0)
    estimationLabel: str = Field("ai-estimation", min_length=1)
    maxResults: int = Field(100, ge=1)


# Field Schemas

class FieldNameInput(ToolInput):
    fieldName: str = Field(..., min_length=1)


class StoryPointsFieldInput(ToolInput):
    fieldName: str = Field("Story Points", min_length=1)


class FieldEnabledInput(ProjectKeyInput):
    fieldId: str = Field(..., min_length=1, description="Field id, e.g. customfield_10016 or timeoriginalestimate")

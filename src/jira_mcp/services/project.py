"""Jira project and current-user operations."""
import logging
from typing import Optional

from . import board as board_service
from . import filter as filter_service
from .networking import JiraClient, endpoint

logger = logging.getLogger("jira-mcp.services.project")


async def create_project(client: JiraClient, project: dict) -> dict:
    return await client.call(
        "createProject", "POST", endpoint("project.create"),
        json=project, not_found_message="Resource not found for createProject.",
    )


async def get_all_projects(client: JiraClient, params: Optional[dict] = None) -> dict:
    """Paginated project search (`/project/search`)."""
    return await client.call(
        "getAllProjects", "GET", endpoint("project.search"),
        params=params or {}, not_found_message="Projects not found.",
    )


async def get_project(client: JiraClient, project_id_or_key: str, expand: Optional[str] = None) -> dict:
    return await client.call(
        "getProject", "GET", endpoint("project.get", project=project_id_or_key),
        params={"expand": expand},
        request_input={"projectIdOrKey": project_id_or_key, "expand": expand},
        not_found_message="Project not found.",
    )


async def update_project(client: JiraClient, project_id_or_key: str, changes: dict) -> dict:
    return await client.call(
        "updateProject", "PUT", endpoint("project.update", project=project_id_or_key),
        json=changes, not_found_message="Project not found for updateProject.",
    )


async def delete_project(client: JiraClient, project_id_or_key: str) -> None:
    await client.call(
        "deleteProject", "DELETE", endpoint("project.delete", project=project_id_or_key),
        request_input={"projectIdOrKey": project_id_or_key},
        not_found_message="Project not found for deleteProject.",
    )


async def create_project_with_board(
    client: JiraClient,
    project: dict,
    board_name: str,
    board_type: str,
) -> dict:
    """Create a project, then a board located in it backed by the default filter.

    Returns {"project": ..., "board": ...}. If board creation fails the
    project is left in place and the board error is raised.
    """
    created = await create_project(client, project)
    logger.info(f"Created project {created.get('key', project.get('key'))} (ID: {created.get('id')})")

    filter_id = await filter_service.get_or_create_default_filter(client)
    board = await board_service.create_board(client, {
        "name": board_name,
        "type": board_type,
        "filterId": filter_id,
        "location": {
            "type": "project",
            "projectKeyOrId": str(created.get("key") or created.get("id")),
        },
    })
    logger.info(f"Created board {board.get('name')} (ID: {board.get('id')}) for project {created.get('key')}")
    return {"project": created, "board": board}


async def get_current_user(client: JiraClient) -> dict:
    return await client.call(
        "getCurrentUser", "GET", endpoint("user.current"),
        not_found_message="User not found.",
    )

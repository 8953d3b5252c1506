"""Jira Agile board operations."""
from typing import Any, Optional

from .networking import JiraClient, endpoint


async def get_all_boards(client: JiraClient, params: Optional[dict] = None) -> dict:
    """List boards visible to the user, optionally filtered by type, name or project."""
    return await client.call(
        "getAllBoards", "GET", endpoint("board.list"),
        params=params or {}, not_found_message="Boards not found.",
    )


async def create_board(client: JiraClient, board: dict) -> dict:
    return await client.call(
        "createBoard", "POST", endpoint("board.create"),
        json=board, not_found_message="Resource not found for createBoard.",
    )


async def get_board_by_id(client: JiraClient, board_id: int) -> dict:
    return await client.call(
        "getBoardById", "GET", endpoint("board.get", board_id=board_id),
        request_input={"boardId": board_id}, not_found_message="Board not found.",
    )


async def delete_board(client: JiraClient, board_id: int) -> None:
    await client.call(
        "deleteBoard", "DELETE", endpoint("board.delete", board_id=board_id),
        request_input={"boardId": board_id}, not_found_message="Board not found for deleteBoard.",
    )


async def get_board_by_filter_id(client: JiraClient, filter_id: int) -> dict:
    return await client.call(
        "getBoardByFilterId", "GET", endpoint("board.by_filter", filter_id=filter_id),
        request_input={"filterId": filter_id}, not_found_message="Board not found for getBoardByFilterId.",
    )


async def get_board_configuration(client: JiraClient, board_id: int) -> dict:
    return await client.call(
        "getBoardConfiguration", "GET", endpoint("board.configuration", board_id=board_id),
        request_input={"boardId": board_id}, not_found_message="Board not found for getBoardConfiguration.",
    )


async def get_board_backlog(client: JiraClient, board_id: int, params: Optional[dict] = None) -> dict:
    return await client.call(
        "getBoardBacklog", "GET", endpoint("board.backlog", board_id=board_id),
        params=params or {}, not_found_message="Board not found for getBoardBacklog.",
    )


async def get_board_epics(client: JiraClient, board_id: int, params: Optional[dict] = None) -> dict:
    return await client.call(
        "getBoardEpics", "GET", endpoint("board.epics", board_id=board_id),
        params=params or {}, not_found_message="Board not found for getBoardEpics.",
    )


async def get_board_sprints(client: JiraClient, board_id: int, params: Optional[dict] = None) -> dict:
    """List sprints of a scrum board. Kanban boards answer 400 here."""
    return await client.call(
        "getBoardSprints", "GET", endpoint("board.sprints", board_id=board_id),
        params=params or {}, not_found_message="Board not found for getBoardSprints.",
    )


async def get_board_issues(client: JiraClient, board_id: int, params: Optional[dict] = None) -> dict:
    return await client.call(
        "getBoardIssues", "GET", endpoint("board.issues", board_id=board_id),
        params=params or {}, not_found_message="Board not found for getBoardIssues.",
    )


async def move_issues_to_board(client: JiraClient, board_id: int, body: dict[str, Any]) -> None:
    """Move issues onto a board, optionally ranking them relative to another issue."""
    await client.call(
        "moveIssuesToBoard", "POST", endpoint("board.issues", board_id=board_id),
        json=body, not_found_message="Board not found for moveIssuesToBoard.",
    )

"""Jira Agile backlog operations.

Both calls accept at most 50 issues; the backend enforces the limit.
"""
from typing import Any

from .networking import JiraClient, endpoint


async def move_issues_to_backlog(client: JiraClient, issues: list[str]) -> None:
    """Move issues to the backlog, removing them from any sprint."""
    await client.call(
        "moveIssuesToBacklog", "POST", endpoint("backlog.move_issues"),
        json={"issues": issues},
        not_found_message="Resource not found when moving issues to backlog.",
    )


async def move_issues_to_backlog_for_board(client: JiraClient, board_id: int, body: dict[str, Any]) -> None:
    await client.call(
        "moveIssuesToBacklogForBoard", "POST",
        endpoint("backlog.move_issues_for_board", board_id=board_id),
        json=body,
        request_input={"boardId": board_id, **body},
        not_found_message=f"Board {board_id} not found when moving issues to backlog.",
    )

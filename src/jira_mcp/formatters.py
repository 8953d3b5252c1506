"""Shared formatting functions for MCP responses.

Entity payloads are returned as pretty-printed JSON so clients get the full
backend data; mutations without a body get a one-line confirmation.
"""
import json
from typing import Any

from mcp.types import TextContent


def format_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, default=str)


def text_result(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


def json_result(payload: Any) -> list[TextContent]:
    return text_result(format_json(payload))


def format_moved_issues(issues: list[str], destination: str) -> str:
    """Confirmation for a successful move, e.g. 'Successfully moved 2 issues to board 7'."""
    noun = "issue" if len(issues) == 1 else "issues"
    return f"Successfully moved {len(issues)} {noun} to {destination}: {', '.join(issues)}"


def format_issue_update(issue_key: str, changed_fields: list[str], transition_id: str | None) -> str:
    parts = []
    if changed_fields:
        parts.append(f"updated {', '.join(changed_fields)}")
    if transition_id:
        parts.append(f"applied transition {transition_id}")
    return f"Issue {issue_key}: {' and '.join(parts)}"


def format_estimation_result(result: dict) -> str:
    """Summary header followed by the full JSON result."""
    summary = (f"Estimation for project {result['projectKey']}\n"
               f"Total stories: {result['totalStories']}\n"
               f"Unestimated stories: {result['unestimatedStories']}\n"
               f"Successfully estimated: {result['estimatedStories']}\n"
               f"Failed estimations: {result['failedEstimations']}")
    return f"{summary}\n\n{format_json(result)}"


def format_project_with_board(result: dict) -> str:
    project = result["project"]
    board = result["board"]
    return (f"Created project {project.get('key')} (ID: {project.get('id')}) "
            f"with board {board.get('name')} (ID: {board.get('id')})\n\n"
            f"Full details:\n{format_json(result)}")

"""MCP resource definitions for Jira boards."""
import logging
from typing import Any

from .errors import UserInputError
from .registry import ResourceRegistry
from .services import board as board_service
from .services.networking import JiraClient

logger = logging.getLogger("jira-mcp.resources")

BOARD_URI_TEMPLATE = "resource://board/{boardId}"
BOARDS_URI = "resource://boards"

SNAPSHOT_PAGE_SIZE = 10
BOARDS_PAGE_SIZE = 50


def _single_int(placeholders: dict, name: str) -> int:
    """Extract one integer placeholder value, rejecting empty or multi-valued input."""
    value: Any = placeholders.get(name)
    if value is None or value == "":
        raise UserInputError(f"{name} is required")
    if isinstance(value, list):
        raise UserInputError(f"{name} must be a single value, not an array")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise UserInputError(f"{name} must be an integer, got '{value}'")


async def read_board(placeholders: dict, uri: str, client: JiraClient) -> dict:
    """Composite board snapshot: board details plus the first page of backlog, epics and sprints.

    Sub-objects are always present, even when the backend returns nothing.
    """
    board_id = _single_int(placeholders, "boardId")
    page = {"maxResults": SNAPSHOT_PAGE_SIZE}

    board = await board_service.get_board_by_id(client, board_id)
    backlog = await board_service.get_board_backlog(client, board_id, page) or {}
    epics = await board_service.get_board_epics(client, board_id, page) or {}
    try:
        sprints = await board_service.get_board_sprints(client, board_id, page) or {}
    except UserInputError:
        # kanban boards reject the sprint endpoint with 400
        logger.info(f"Board {board_id} does not support sprints")
        sprints = {}

    logger.info(f"Generated board resource for board: {board.get('name', 'Unknown')}")
    return {
        "board": board,
        "backlog": {"issues": backlog.get("issues", []), "total": backlog.get("total", 0)},
        "epics": {"values": epics.get("values", []), "total": epics.get("total", 0)},
        "sprints": {"values": sprints.get("values", []), "total": sprints.get("total", 0)},
    }


async def read_boards(placeholders: dict, uri: str, client: JiraClient) -> dict:
    boards = await board_service.get_all_boards(client, {"maxResults": BOARDS_PAGE_SIZE})
    logger.info(f"Generated boards resource with {len(boards.get('values', []))} boards")
    return boards


def register_resources(registry: ResourceRegistry) -> ResourceRegistry:
    registry.register(
        "board",
        BOARD_URI_TEMPLATE,
        read_board,
        title="Jira Board Resource",
        description="Board details with the first page of backlog issues, epics and sprints",
    )
    registry.register(
        "boards",
        BOARDS_URI,
        read_boards,
        title="Jira Boards List Resource",
        description="The first 50 boards visible to the user",
    )
    return registry

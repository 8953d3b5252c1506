"""Jira filter operations, including the default filter used for new boards."""
import logging
from typing import Optional

from ..errors import JiraApiError
from .networking import JiraClient, endpoint

logger = logging.getLogger("jira-mcp.services.filter")

DEFAULT_FILTER_NAME = "MCP Default Board Filter"
DEFAULT_FILTER_JQL = "ORDER BY created DESC"


async def get_my_filters(client: JiraClient) -> list[dict]:
    return await client.call(
        "getMyFilters", "GET", endpoint("filter.my"),
        not_found_message="Filters not found.",
    )


async def get_favourite_filters(client: JiraClient) -> list[dict]:
    return await client.call(
        "getFavouriteFilters", "GET", endpoint("filter.favourite"),
        not_found_message="Favourite filters not found.",
    )


async def get_filter(client: JiraClient, filter_id: str) -> dict:
    return await client.call(
        "getFilter", "GET", endpoint("filter.get", filter_id=filter_id),
        request_input={"filterId": filter_id}, not_found_message="Filter not found.",
    )


async def search_filters(client: JiraClient, params: Optional[dict] = None) -> dict:
    return await client.call(
        "searchFilters", "GET", endpoint("filter.search"),
        params=params or {}, not_found_message="Filters not found.",
    )


async def create_filter(client: JiraClient, filter_input: dict) -> dict:
    return await client.call(
        "createFilter", "POST", endpoint("filter.create"),
        json=filter_input, not_found_message="Resource not found for createFilter.",
    )


def _is_catch_all(jira_filter: dict) -> bool:
    jql = (jira_filter.get("jql") or "").lower()
    return jql == "" or "order by" in jql or "rank" in jql


async def get_or_create_default_filter(client: JiraClient) -> int:
    """Return the id of a filter suitable for backing a new board.

    Reuses one of the user's filters when its JQL looks like a catch-all,
    otherwise creates one. When neither works the translated error is
    raised; there is no guessed fallback id.
    """
    try:
        my_filters = await get_my_filters(client)
    except JiraApiError as e:
        logger.warning(f"Could not list user filters, creating a default filter instead: {e}")
        my_filters = []

    if not isinstance(my_filters, list):
        logger.warning(f"Unexpected filter list payload of type {type(my_filters).__name__}")
        my_filters = []

    logger.info(f"Found {len(my_filters)} user filters")
    for jira_filter in my_filters:
        if _is_catch_all(jira_filter):
            logger.info(f"Using existing default filter: {jira_filter.get('name')} (ID: {jira_filter['id']})")
            return int(jira_filter["id"])

    created = await create_filter(client, {
        "name": DEFAULT_FILTER_NAME,
        "description": "Default filter created by the MCP server for board creation",
        "jql": DEFAULT_FILTER_JQL,
        "favourite": False,
    })
    logger.info(f"Created default filter: {created.get('name')} (ID: {created['id']})")
    return int(created["id"])

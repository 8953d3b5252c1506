"""Jira field discovery and custom field creation."""
import logging
from typing import Optional

from ..errors import JiraApiError
from .networking import JiraClient, endpoint

logger = logging.getLogger("jira-mcp.services.custom_field")

_TYPE_PREFIX = "com.atlassian.jira.plugin.system.customfieldtypes:"

# Default searcher for each custom field type
FIELD_TYPE_SEARCHER_MAP = {
    f"{_TYPE_PREFIX}float": f"{_TYPE_PREFIX}exactnumber",
    f"{_TYPE_PREFIX}number": f"{_TYPE_PREFIX}exactnumber",
    f"{_TYPE_PREFIX}textfield": f"{_TYPE_PREFIX}textsearcher",
    f"{_TYPE_PREFIX}textarea": f"{_TYPE_PREFIX}textsearcher",
    f"{_TYPE_PREFIX}select": f"{_TYPE_PREFIX}multiselectsearcher",
    f"{_TYPE_PREFIX}multiselect": f"{_TYPE_PREFIX}multiselectsearcher",
    f"{_TYPE_PREFIX}datepicker": f"{_TYPE_PREFIX}daterange",
    f"{_TYPE_PREFIX}datetime": f"{_TYPE_PREFIX}datetimerange",
    f"{_TYPE_PREFIX}labels": f"{_TYPE_PREFIX}labelsearcher",
    f"{_TYPE_PREFIX}url": f"{_TYPE_PREFIX}exacttextsearcher",
    f"{_TYPE_PREFIX}userpicker": f"{_TYPE_PREFIX}userpickergroupsearcher",
}

NUMBER_FIELD_TYPE = f"{_TYPE_PREFIX}float"
STORY_POINTS_SCHEMA = "com.pyxis.greenhopper.jira:jsw-story-points"
COMMON_STORY_POINT_NAMES = ["Story Points", "StoryPoints", "Points", "SP", "Story Point"]


async def get_fields(client: JiraClient) -> list[dict]:
    return await client.call("getFields", "GET", endpoint("field.list"))


async def create_custom_field(
    client: JiraClient,
    name: str,
    field_type: str,
    description: Optional[str] = None,
    searcher_key: Optional[str] = None,
) -> dict:
    payload = {"name": name, "type": field_type}
    if description:
        payload["description"] = description
    searcher = searcher_key or FIELD_TYPE_SEARCHER_MAP.get(field_type)
    if searcher:
        payload["searcherKey"] = searcher

    field = await client.call("createCustomField", "POST", endpoint("field.create"), json=payload)
    logger.info(f"Created custom field: {field.get('name')} (ID: {field.get('id')})")
    return field


def _match_by_name(fields: list[dict], field_name: str) -> Optional[dict]:
    wanted = field_name.lower()
    for field in fields:
        if field.get("custom") and (field.get("name") or "").lower() == wanted:
            return field
    return None


async def find_custom_field_by_name(client: JiraClient, field_name: str) -> Optional[dict]:
    """Best-effort lookup: returns None when the field is missing or lookup fails."""
    try:
        fields = await get_fields(client)
    except JiraApiError as e:
        logger.error(f"Error finding custom field '{field_name}': {e}")
        return None
    field = _match_by_name(fields, field_name)
    if field is None:
        logger.info(f"Custom field not found: {field_name}")
    return field


async def ensure_story_points_field(client: JiraClient, field_name: str = "Story Points") -> str:
    """Return the id of a story points field, creating one if none exists.

    Looks for, in order: the requested name, common story point names, the
    Jira Software story points field, any custom field named like story
    points. Only then tries to create a numeric field.
    """
    fields = await get_fields(client)

    for name in [field_name, *COMMON_STORY_POINT_NAMES]:
        match = _match_by_name(fields, name)
        if match is not None:
            logger.info(f"Using existing story points field: {match['name']} (ID: {match['id']})")
            return match["id"]

    for field in fields:
        if field.get("custom") and (field.get("schema") or {}).get("custom") == STORY_POINTS_SCHEMA:
            logger.info(f"Using Jira Software story points field: {field['name']} (ID: {field['id']})")
            return field["id"]

    for field in fields:
        name = (field.get("name") or "").lower()
        if field.get("custom") and "story" in name and "point" in name:
            logger.info(f"Using story points-like field: {field['name']} (ID: {field['id']})")
            return field["id"]

    logger.info(f"No story points field found, creating: {field_name}")
    created = await create_custom_field(
        client,
        field_name,
        NUMBER_FIELD_TYPE,
        description="Story points for agile estimation",
    )
    return created["id"]

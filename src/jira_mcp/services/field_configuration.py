"""Field configuration lookups for projects."""
import logging

from ..errors import JiraApiError
from . import project as project_service
from .networking import JiraClient, endpoint

logger = logging.getLogger("jira-mcp.services.field_configuration")


async def get_project_field_configuration_schemes(client: JiraClient, project_key: str) -> list[dict]:
    """Field configuration schemes assigned to a project.

    Projects on the default configuration have no scheme and yield an
    empty list.
    """
    project = await project_service.get_project(client, project_key)
    result = await client.call(
        "getProjectFieldConfigurationSchemes", "GET",
        endpoint("field_configuration.schemes_for_project"),
        params={"projectId": project["id"]},
        request_input={"projectKey": project_key},
        not_found_message="Project not found.",
    )
    return [
        entry["fieldConfigurationScheme"]
        for entry in result.get("values", [])
        if entry.get("fieldConfigurationScheme")
    ]


async def _configuration_ids(client: JiraClient, scheme_id: str) -> list[str]:
    mapping = await client.call(
        "getFieldConfigurationSchemeMapping", "GET",
        endpoint("field_configuration.scheme_mapping"),
        params={"fieldConfigurationSchemeId": scheme_id},
    )
    return list(dict.fromkeys(str(m["fieldConfigurationId"]) for m in mapping.get("values", [])))


async def _configuration_fields(client: JiraClient, configuration_id: str) -> list[dict]:
    result = await client.call(
        "getFieldConfigurationItems", "GET",
        endpoint("field_configuration.fields", configuration_id=configuration_id),
    )
    return result.get("values", [])


async def is_field_enabled_in_project(client: JiraClient, project_key: str, field_id: str) -> bool:
    """Best-effort check that a field is visible in one of the project's configurations.

    Returns False when the project has no scheme or when any lookup fails.
    """
    try:
        schemes = await get_project_field_configuration_schemes(client, project_key)
        if not schemes:
            logger.warning(f"No field configuration schemes found for project {project_key}")
            return False

        for scheme in schemes:
            for configuration_id in await _configuration_ids(client, scheme["id"]):
                for field in await _configuration_fields(client, configuration_id):
                    if field.get("id") == field_id and not field.get("isHidden", False):
                        logger.info(f"Field '{field_id}' enabled in configuration {configuration_id}")
                        return True
    except JiraApiError as e:
        logger.error(f"Error checking field '{field_id}' in project {project_key}: {e}")
        return False

    logger.warning(f"Field '{field_id}' not found in any field configuration for project {project_key}")
    return False

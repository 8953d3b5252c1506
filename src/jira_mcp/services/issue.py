"""Jira issue operations.

Descriptions and comments are sent as Atlassian Document Format (ADF), which
REST API v3 requires; plain strings are wrapped into a single paragraph.
"""
import logging
from typing import Any, Optional

from ..errors import ErrorContext, UserInputError
from .networking import JiraClient, endpoint

logger = logging.getLogger("jira-mcp.services.issue")

MAX_SUMMARY_LENGTH = 255
STORY_POINTS_FIELD = "customfield_10016"


def to_adf(text: Any) -> Any:
    """Wrap plain text as an ADF document; ADF dicts pass through unchanged."""
    if not isinstance(text, str):
        return text
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {
                "type": "paragraph",
                "content": [{"type": "text", "text": text}],
            }
        ],
    }


async def get_issue_types(client: JiraClient) -> list[dict]:
    return await client.call("getIssueTypes", "GET", endpoint("issue.types"))


def _validate_new_issue(fields: dict) -> None:
    summary = (fields.get("summary") or "").strip()
    if not summary:
        raise UserInputError("Summary is required and cannot be empty.")
    if len(summary) > MAX_SUMMARY_LENGTH:
        raise UserInputError(f"Summary cannot exceed {MAX_SUMMARY_LENGTH} characters.")
    if not (fields.get("project") or {}).get("key"):
        raise UserInputError("Project key is required.")
    if not (fields.get("issuetype") or {}).get("id"):
        raise UserInputError("Issue type ID is required.")


async def create_issue(client: JiraClient, fields: dict, operation: str = "createIssue") -> dict:
    """Create an issue from a Jira `fields` payload.

    Validates summary, project key and issue type locally so obviously
    broken requests never reach the backend.
    """
    _validate_new_issue(fields)
    fields = dict(fields)
    if "description" in fields:
        fields["description"] = to_adf(fields["description"])

    result = await client.call(
        operation, "POST", endpoint("issue.create"),
        json={"fields": fields}, not_found_message=f"Resource not found for {operation}.",
    )
    logger.info(f"Created issue {result.get('key')} (ID: {result.get('id')})")
    return result


async def get_issue(client: JiraClient, issue_key_or_id: str, expand: Optional[str] = None) -> dict:
    return await client.call(
        "getIssue", "GET", endpoint("issue.get", issue=issue_key_or_id),
        params={"expand": expand},
        request_input={"issueKeyOrId": issue_key_or_id, "expand": expand},
        not_found_message="Issue not found for getIssue.",
    )


async def search_issues(client: JiraClient, query: dict) -> dict:
    """Run a JQL search. `query` is the POST body of `/rest/api/3/search`."""
    body = {k: v for k, v in query.items() if v is not None}
    return await client.call(
        "searchIssues", "POST", endpoint("issue.search"),
        json=body, not_found_message="Resource not found for searchIssues.",
    )


async def update_issue(client: JiraClient, issue_key_or_id: str, payload: dict) -> None:
    """Apply a raw edit payload (`fields` and/or `update`) to an issue."""
    await client.call(
        "updateIssue", "PUT", endpoint("issue.update", issue=issue_key_or_id),
        json=payload,
        request_input={"issueKeyOrId": issue_key_or_id, **payload},
        not_found_message="Issue not found for updateIssue.",
    )


async def transition_issue(client: JiraClient, issue_key_or_id: str, transition_id: str) -> None:
    await client.call(
        "transitionIssue", "POST", endpoint("issue.transitions", issue=issue_key_or_id),
        json={"transition": {"id": transition_id}},
        not_found_message="Issue not found for transitionIssue.",
    )


def build_issue_update(
    *,
    assignee_account_id: Optional[str] = None,
    unassign: bool = False,
    priority_id: Optional[str] = None,
    summary: Optional[str] = None,
    description: Optional[str] = None,
    comment: Optional[str] = None,
) -> dict:
    """Build the edit payload for update_issue from individual changes.

    Returns an empty dict when nothing but a transition was requested.
    """
    if unassign and assignee_account_id:
        raise UserInputError("Cannot both assign and unassign an issue in one update.")
    if summary is not None:
        summary = summary.strip()
        if not summary:
            raise UserInputError("Summary cannot be empty.")
        if len(summary) > MAX_SUMMARY_LENGTH:
            raise UserInputError(f"Summary cannot exceed {MAX_SUMMARY_LENGTH} characters.")

    fields: dict[str, Any] = {}
    if unassign:
        fields["assignee"] = None
    elif assignee_account_id:
        fields["assignee"] = {"accountId": assignee_account_id}
    if priority_id:
        fields["priority"] = {"id": priority_id}
    if summary is not None:
        fields["summary"] = summary
    if description is not None:
        fields["description"] = to_adf(description)

    payload: dict[str, Any] = {}
    if fields:
        payload["fields"] = fields
    if comment:
        payload["update"] = {"comment": [{"add": {"body": to_adf(comment)}}]}
    return payload


async def find_issue_type(client: JiraClient, type_name: str, operation: str) -> dict:
    """Look up an issue type by (case-insensitive) name."""
    issue_types = await get_issue_types(client)
    for issue_type in issue_types:
        if (issue_type.get("name") or "").lower() == type_name.lower():
            return issue_type
    raise UserInputError(
        f"{type_name.capitalize()} issue type not found in Jira instance.",
        ErrorContext(
            request_input={"operation": operation, "availableTypes": [t.get("name") for t in issue_types]},
            endpoint=endpoint("issue.types"),
        ),
    )


async def create_user_story(
    client: JiraClient,
    project_key: str,
    summary: str,
    description: Optional[str] = None,
    assignee_account_id: Optional[str] = None,
    story_points: Optional[float] = None,
    labels: Optional[list[str]] = None,
) -> dict:
    story_type = await find_issue_type(client, "story", "createUserStory")
    fields: dict[str, Any] = {
        "project": {"key": project_key},
        "summary": summary,
        "issuetype": {"id": story_type["id"]},
    }
    if description:
        fields["description"] = description
    if assignee_account_id:
        fields["assignee"] = {"accountId": assignee_account_id}
    if story_points is not None:
        fields[STORY_POINTS_FIELD] = story_points
    if labels:
        fields["labels"] = labels
    return await create_issue(client, fields, operation="createUserStory")


async def create_bug(
    client: JiraClient,
    project_key: str,
    summary: str,
    description: Optional[str] = None,
    assignee_account_id: Optional[str] = None,
    priority: Optional[str] = None,
    labels: Optional[list[str]] = None,
) -> dict:
    bug_type = await find_issue_type(client, "bug", "createBug")
    fields: dict[str, Any] = {
        "project": {"key": project_key},
        "summary": summary,
        "issuetype": {"id": bug_type["id"]},
    }
    if description:
        fields["description"] = description
    if assignee_account_id:
        fields["assignee"] = {"accountId": assignee_account_id}
    if priority:
        fields["priority"] = {"name": priority}
    if labels:
        fields["labels"] = labels
    return await create_issue(client, fields, operation="createBug")

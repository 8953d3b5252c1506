"""Bulk story estimation for a project.

Stories without story points and without the estimation label are given a
default estimate, tagged with the label and commented so the team can
review the automatic estimate.
"""
import logging
import time

from ..errors import JiraApiError
from . import issue as issue_service
from . import project as project_service
from .issue import STORY_POINTS_FIELD
from .networking import JiraClient

logger = logging.getLogger("jira-mcp.services.estimation")

DEFAULT_STORY_POINTS = 3
DEFAULT_ESTIMATION_LABEL = "ai-estimation"


def _estimation_comment(story_points: float) -> str:
    return (
        "AI Estimation Applied\n\n"
        f"Story points set to {story_points} by automatic estimation system.\n\n"
        "This estimation was applied automatically and may need review by the development team."
    )


async def estimate_stories_in_project(
    client: JiraClient,
    project_key: str,
    default_story_points: float = DEFAULT_STORY_POINTS,
    estimation_label: str = DEFAULT_ESTIMATION_LABEL,
    max_results: int = 100,
) -> dict:
    """Estimate every unestimated story in a project.

    Failures on individual stories are collected in `failedIssues` rather
    than aborting the run. A missing project or failed search is raised.
    """
    start = time.perf_counter()
    result = {
        "projectKey": project_key,
        "totalStories": 0,
        "unestimatedStories": 0,
        "estimatedStories": 0,
        "failedEstimations": 0,
        "estimatedIssues": [],
        "failedIssues": [],
    }

    await project_service.get_project(client, project_key)

    search = await issue_service.search_issues(client, {
        "jql": f"project = {project_key} AND issuetype = Story ORDER BY created DESC",
        "maxResults": max_results,
        "fields": ["summary", "description", "labels", STORY_POINTS_FIELD],
    })
    stories = search.get("issues", [])
    result["totalStories"] = len(stories)

    unestimated = [
        story for story in stories
        if not story["fields"].get(STORY_POINTS_FIELD)
        and estimation_label not in (story["fields"].get("labels") or [])
    ]
    result["unestimatedStories"] = len(unestimated)
    logger.info(f"Project {project_key}: {len(stories)} stories, {len(unestimated)} unestimated")

    for story in unestimated:
        labels = [*(story["fields"].get("labels") or []), estimation_label]
        payload = {
            "fields": {
                STORY_POINTS_FIELD: default_story_points,
                "labels": labels,
            },
            "update": {
                "comment": [{"add": {"body": issue_service.to_adf(_estimation_comment(default_story_points))}}],
            },
        }
        try:
            await issue_service.update_issue(client, story["key"], payload)
        except JiraApiError as e:
            logger.error(f"Failed to estimate story {story['key']}: {e}")
            result["failedIssues"].append({
                "key": story["key"],
                "summary": story["fields"].get("summary"),
                "error": str(e),
            })
            result["failedEstimations"] += 1
            continue

        result["estimatedIssues"].append({
            "key": story["key"],
            "summary": story["fields"].get("summary"),
            "storyPoints": default_story_points,
            "labels": labels,
        })
        result["estimatedStories"] += 1

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        f"Story estimation for {project_key} completed in {elapsed_ms:.2f}ms: "
        f"{result['estimatedStories']} estimated, {result['failedEstimations']} failed"
    )
    return result


async def get_project_estimation_stats(client: JiraClient, project_key: str) -> dict:
    search = await issue_service.search_issues(client, {
        "jql": f"project = {project_key} AND issuetype = Story",
        "maxResults": 1000,
        "fields": ["summary", "labels", STORY_POINTS_FIELD],
    })
    stories = search.get("issues", [])

    estimated = 0
    ai_estimated = 0
    total_points = 0.0
    for story in stories:
        points = story["fields"].get(STORY_POINTS_FIELD)
        if not points:
            continue
        estimated += 1
        total_points += points
        if DEFAULT_ESTIMATION_LABEL in (story["fields"].get("labels") or []):
            ai_estimated += 1

    return {
        "projectKey": project_key,
        "totalStories": len(stories),
        "estimatedStories": estimated,
        "unestimatedStories": len(stories) - estimated,
        "aiEstimatedStories": ai_estimated,
        "averageStoryPoints": round(total_points / estimated, 2) if estimated else 0,
    }

"""HTTP client for the Jira Cloud REST API.

One JiraClient is shared by every session. Each call is timed, logged, and
any failure is translated into the error taxonomy before it leaves this
module, so callers only ever see JiraApiError subclasses.
"""
import logging
import time
from typing import Any, Optional

import httpx

from ..errors import translate_error

logger = logging.getLogger("jira-mcp.networking")


JIRA_API_ENDPOINTS = {
    # Agile API
    "backlog.move_issues": "/rest/agile/1.0/backlog/issue",
    "backlog.move_issues_for_board": "/rest/agile/1.0/backlog/{board_id}/issue",
    "board.list": "/rest/agile/1.0/board",
    "board.create": "/rest/agile/1.0/board",
    "board.get": "/rest/agile/1.0/board/{board_id}",
    "board.delete": "/rest/agile/1.0/board/{board_id}",
    "board.by_filter": "/rest/agile/1.0/board/filter/{filter_id}",
    "board.backlog": "/rest/agile/1.0/board/{board_id}/backlog",
    "board.configuration": "/rest/agile/1.0/board/{board_id}/configuration",
    "board.epics": "/rest/agile/1.0/board/{board_id}/epic",
    "board.issues": "/rest/agile/1.0/board/{board_id}/issue",
    "board.sprints": "/rest/agile/1.0/board/{board_id}/sprint",
    # Platform API v3
    "filter.my": "/rest/api/3/filter/my",
    "filter.favourite": "/rest/api/3/filter/favourite",
    "filter.get": "/rest/api/3/filter/{filter_id}",
    "filter.search": "/rest/api/3/filter/search",
    "filter.create": "/rest/api/3/filter",
    "project.create": "/rest/api/3/project",
    "project.search": "/rest/api/3/project/search",
    "project.get": "/rest/api/3/project/{project}",
    "project.update": "/rest/api/3/project/{project}",
    "project.delete": "/rest/api/3/project/{project}",
    "user.current": "/rest/api/3/myself",
    "issue.types": "/rest/api/3/issuetype",
    "issue.create": "/rest/api/3/issue",
    "issue.get": "/rest/api/3/issue/{issue}",
    "issue.update": "/rest/api/3/issue/{issue}",
    "issue.transitions": "/rest/api/3/issue/{issue}/transitions",
    "issue.search": "/rest/api/3/search",
    "field.list": "/rest/api/3/field",
    "field.create": "/rest/api/3/field",
    "field_configuration.schemes_for_project": "/rest/api/3/fieldconfigurationscheme/project",
    "field_configuration.scheme_mapping": "/rest/api/3/fieldconfigurationscheme/mapping",
    "field_configuration.fields": "/rest/api/3/fieldconfiguration/{configuration_id}/fields",
}


def endpoint(key: str, **path_params: Any) -> str:
    """Resolve an endpoint template with its path parameters."""
    return JIRA_API_ENDPOINTS[key].format(**path_params)


class JiraClient:
    """Thin async wrapper around httpx.AsyncClient with Jira basic auth."""

    def __init__(
        self,
        base_url: str,
        email: str,
        api_token: str,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            auth=(email, api_token),
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> "JiraClient":
        return cls(
            settings.jira_base,
            settings.jira_email,
            settings.jira_api_token.get_secret_value(),
            timeout=settings.jira_request_timeout,
            transport=transport,
        )

    async def call(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Any = None,
        request_input: Any = None,
        not_found_message: Optional[str] = None,
    ) -> Any:
        """Perform one backend request and return the decoded JSON body.

        Returns None for empty responses (204 and friends). Query parameters
        whose value is None are dropped. Any failure is raised as the
        translated JiraApiError, chained to the original exception.
        """
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        start = time.perf_counter()
        try:
            response = await self._http.request(method, path, params=params or None, json=json)
            response.raise_for_status()
            result = response.json() if response.content else None
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            translated = translate_error(
                e,
                operation,
                request_input=request_input if request_input is not None else (json or params),
                endpoint=path,
                not_found_message=not_found_message,
            )
            logger.error(
                f"{operation} failed after {elapsed_ms:.2f}ms: {type(translated).__name__}: {translated} "
                f"(status={translated.context.status if translated.context else None}, endpoint={path})"
            )
            if translated.context is not None and translated.context.response_body is not None:
                logger.debug(f"  Response body: {translated.context.response_body}")
            raise translated from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{operation} executed in {elapsed_ms:.2f}ms")
        return result

    async def aclose(self) -> None:
        await self._http.aclose()

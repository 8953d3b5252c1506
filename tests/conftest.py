"""Shared fixtures: a stubbed Jira backend behind httpx.MockTransport."""
import json

import httpx
import pytest

from jira_mcp.config import Settings
from jira_mcp.services.networking import JiraClient

BASE_URL = "https://example.atlassian.net"


class JiraStub:
    """Canned Jira responses keyed by (method, path), with a request log."""

    def __init__(self):
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, json_body=None):
        self.routes[(method, path)] = (status, json_body)

    def fail(self, method: str, path: str, error: Exception):
        self.routes[(method, path)] = error

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"errorMessages": [f"No stub for {request.method} {request.url.path}"]})
        if isinstance(route, Exception):
            raise route
        status, body = route
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def last_json(self, method: str, path: str):
        return json.loads(self.calls(method, path)[-1].content)


@pytest.fixture
def jira():
    return JiraStub()


@pytest.fixture
def client(jira):
    return JiraClient(BASE_URL, "bot@example.com", "secret-token", transport=httpx.MockTransport(jira))


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        jira_base_url=BASE_URL,
        jira_email="bot@example.com",
        jira_api_token="secret-token",
        openai_api_key="sk-test",
    )

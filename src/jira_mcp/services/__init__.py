"""Jira REST API wrappers, one module per backend area."""
from .networking import JiraClient, JIRA_API_ENDPOINTS

__all__ = ["JiraClient", "JIRA_API_ENDPOINTS"]

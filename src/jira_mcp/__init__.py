"""Jira MCP Server - Model Context Protocol integration for Jira Cloud.

This package exposes Jira boards, backlogs, filters, projects and issues to
AI assistants as MCP tools and resources.

Modules:
- server: stdio runner and command-line entry point
- app: MCP server binding shared by every transport
- config: pydantic-settings configuration and logging setup
- errors: backend error taxonomy
- http_server: HTTP listener serving the event-stream and streamable transports
- sessions: session managers for both HTTP transports
- registry: tool and resource registries
- tools: MCP tool definitions
- schemas: Tool input models
- handlers: Tool implementation handlers
- resources: MCP resource definitions
- formatters: Response formatting utilities
- services: Jira REST API wrappers
"""

__version__ = "1.0.0"

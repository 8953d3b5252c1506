"""HTTP listener for the Jira MCP server.

Routes:
    /mcp, /mcp/...   streamable HTTP transport (session header keyed)
    /sse, /          event-stream transport (sessionId query parameter keyed)
    /health          liveness probe
    anything else    404

Every response carries permissive CORS headers, and OPTIONS on any path is
answered directly with 200 and an empty body.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from starlette.datastructures import MutableHeaders
from starlette.responses import Response
from starlette.routing import Route
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from . import __version__
from .app import build_registries, build_server
from .config import Settings
from .services.networking import JiraClient
from .sessions import EventStreamSessionManager, StreamableSessionManager

logger = logging.getLogger("jira-mcp.http")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, mcp-session-id, x-session-id, mcp-protocol-version",
    "Access-Control-Expose-Headers": "mcp-session-id",
}


class CorsPreflightMiddleware:
    """Answers every OPTIONS request with 200 and an empty body, and adds the
    CORS headers to the start of every other response without buffering it.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        if scope["method"] == "OPTIONS":
            await Response(status_code=200, headers=CORS_HEADERS)(scope, receive, send)
            return

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for key, value in CORS_HEADERS.items():
                    headers[key] = value
            await send(message)

        await self.app(scope, receive, send_with_cors)


def create_app(settings: Settings, *, client: Optional[JiraClient] = None) -> FastAPI:
    """Build the HTTP app with its own session managers and registries.

    A client passed in is left open on shutdown; one created here is closed.
    """
    owns_client = client is None
    if client is None:
        client = JiraClient.from_settings(settings)

    server = build_server(*build_registries(client))
    event_stream = EventStreamSessionManager(server)
    streamable = StreamableSessionManager(server, json_response=settings.mcp_json_response)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting Jira MCP HTTP server for {settings.jira_base}")
        async with streamable.run():
            try:
                yield
            finally:
                if owns_client:
                    await client.aclose()
        logger.info("Jira MCP HTTP server stopped")

    app = FastAPI(
        title="Jira MCP Server",
        description="Jira Cloud exposed over the Model Context Protocol",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    app.state.jira_client = client
    app.state.event_stream = event_stream
    app.state.streamable = streamable

    app.add_middleware(CorsPreflightMiddleware)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "sessions": {
                "sse": len(event_stream.sessions),
                "streamable": len(streamable.sessions),
            },
        }

    app.router.routes.extend([
        Route("/mcp", endpoint=streamable),
        Route("/mcp/{path:path}", endpoint=streamable),
        Route("/sse", endpoint=event_stream),
        Route("/", endpoint=event_stream),
    ])
    return app


async def serve(settings: Settings, host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Run the HTTP listener until interrupted."""
    host = host or settings.mcp_http_host
    port = port or settings.mcp_http_port
    app = create_app(settings)
    config = uvicorn.Config(app, host=host, port=port, log_config=None)
    logger.info(f"Jira MCP HTTP server listening on http://{host}:{port}")
    logger.info(f"  SSE endpoint: http://{host}:{port}/sse")
    logger.info(f"  Streamable HTTP endpoint: http://{host}:{port}/mcp")
    await uvicorn.Server(config).serve()

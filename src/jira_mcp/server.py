"""Jira MCP Server - Expose Jira Cloud to AI assistants.

Run over stdio (default, for local assistants) or over HTTP:

    jira-mcp
    jira-mcp --transport http --port 3001
"""
import argparse
import asyncio
import logging
import sys

from mcp.server.stdio import stdio_server
from pydantic import ValidationError

from . import http_server
from .app import build_registries, build_server
from .config import Settings, configure_logging, get_settings
from .services.networking import JiraClient

logger = logging.getLogger("jira-mcp")


def _stop_on_unhandled(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    """Treat an exception nobody awaited as fatal rather than logging and carrying on."""
    exception = context.get("exception")
    logger.error(f"Unhandled exception in event loop: {context.get('message')}", exc_info=exception)
    loop.stop()


async def run_stdio(settings: Settings) -> None:
    """Run the MCP server over stdin/stdout."""
    asyncio.get_running_loop().set_exception_handler(_stop_on_unhandled)
    client = JiraClient.from_settings(settings)
    server = build_server(*build_registries(client))
    logger.info(f"Jira MCP server starting on stdio for {settings.jira_base}")
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await client.aclose()


async def run_http(settings: Settings, host: str | None, port: int | None) -> None:
    asyncio.get_running_loop().set_exception_handler(_stop_on_unhandled)
    await http_server.serve(settings, host, port)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Jira MCP server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="stdio for local assistants, http for the SSE and streamable HTTP listener",
    )
    parser.add_argument("--host", default=None, help="HTTP bind host (default: MCP_HTTP_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="HTTP port (default: MCP_HTTP_PORT or 3001)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Console entry point. Exits with status 1 on bad configuration or any fatal error."""
    args = parse_args(argv)
    configure_logging()

    try:
        settings = get_settings()
    except ValidationError as e:
        logger.error(f"Invalid configuration:\n{e}")
        sys.exit(1)

    configure_logging(settings.log_level)

    try:
        if args.transport == "http":
            asyncio.run(run_http(settings, args.host, args.port))
        else:
            asyncio.run(run_stdio(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception:
        logger.exception("Fatal error, shutting down")
        sys.exit(1)


if __name__ == "__main__":
    main()

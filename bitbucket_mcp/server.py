"""MCP stdio server exposing the read-only Bitbucket tools."""

import asyncio
import logging
import sys

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from .models import VERSION
from .settings import Settings, get_settings, validate_authentication
from .tools import call_tool, list_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "bitbucket-mcp"


def create_server() -> Server:
    server = Server(SERVER_NAME, version=VERSION)

    @server.list_tools()
    async def _list_tools() -> list[types.Tool]:
        return list_tools()

    @server.call_tool()
    async def _call_tool(name: str, arguments: dict) -> types.CallToolResult:
        result = await call_tool(name, arguments)
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=result.text)],
            isError=result.is_error,
        )

    return server


def configure_logging(settings: Settings) -> None:
    # stdout carries the MCP stream
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if settings.bitbucket_debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def log_startup(settings: Settings) -> None:
    auth = validate_authentication(settings)
    if auth.warning:
        logger.warning(auth.warning)
    logger.info("Mode: READ-ONLY")
    logger.info("Auth: %s", auth.method.upper())

    if settings.bitbucket_debug:
        token = settings.bitbucket_api_token
        logger.debug("Debug mode enabled")
        logger.debug("BITBUCKET_API_TOKEN: %s", f"SET (length: {len(token)})" if token else "NOT SET")
        logger.debug("BITBUCKET_EMAIL: %s", settings.bitbucket_email or "NOT SET")


async def run() -> None:
    server = create_server()
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Bitbucket MCP server running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main():
    settings = get_settings()
    configure_logging(settings)
    log_startup(settings)
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()

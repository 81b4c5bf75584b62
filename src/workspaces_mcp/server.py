"""MCP stdio server entrypoint for Workspaces MCP.

The server runs over standard input/output using the Model Context Protocol.
It exposes workspaces and instructions as resources and registers the
built-in tools that clients can invoke to manage them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from mcp import types
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from .app import Application, build_application
from .config import Config
from .constants import SERVER_VERSION
from .result import ErrorKind
from .telemetry.logger import configure_logging

logger = logging.getLogger(__name__)

_INVALID_PARAMS_KINDS = {
    ErrorKind.INVALID_URI,
    ErrorKind.UNSUPPORTED_SCHEME,
    ErrorKind.EMPTY_PATH,
    ErrorKind.INVALID_INSTRUCTION_PATH,
    ErrorKind.INVALID_NAME,
}


def create_server(app: Application) -> Server:
    """Build a low-level MCP server bound to ``app``."""
    server: Server = Server(app.config.server_name, version=SERVER_VERSION)

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        entries = await app.resources.list_resources()
        return [
            types.Resource(
                uri=entry.uri,  # type: ignore[arg-type]
                name=entry.name,
                description=entry.description,
                mimeType=entry.mime_type,
            )
            for entry in entries
        ]

    @server.read_resource()
    async def read_resource(uri: Any) -> list[ReadResourceContents]:
        result = await app.resources.read_resource(str(uri))
        if not result.is_ok:
            failure = result.error
            code = types.INVALID_PARAMS if failure.kind in _INVALID_PARAMS_KINDS else types.INTERNAL_ERROR
            raise McpError(types.ErrorData(code=code, message=failure.message, data={"kind": failure.kind.value}))
        content = result.value
        return [ReadResourceContents(content=content.text, mime_type=content.mime_type)]

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(name=tool["name"], description=tool["description"], inputSchema=tool["inputSchema"])
            for tool in app.tools.list_tools()
        ]

    # Arguments are validated by the registry so failures come back as tool results.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
        result = await app.tools.call_tool(name, arguments)
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=result.text)],
            isError=result.is_error,
        )

    return server


async def serve(app: Application) -> None:
    server = create_server(app)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """Entrypoint for the Workspaces MCP server."""
    config = Config.load_from_env()
    # Logging goes to stderr; stdout is used for the MCP protocol.
    configure_logging(config.log_level)
    logger.info("Starting %s %s", config.server_name, SERVER_VERSION)

    app = build_application(config)
    asyncio.run(serve(app))


if __name__ == "__main__":
    main()

"""Connecting to MCP servers and listing their tools.

``list_tools_from_server`` is the only place that performs I/O. It opens a
FastMCP client for the configured transport, walks every page of the
``tools/list`` response and turns any failure into a ``ServerError`` so the
search orchestrator can decide whether to carry on.
"""

import asyncio
from typing import Any

import mcp
from fastmcp import Client
from fastmcp.client.transports import (
    ClientTransport,
    SSETransport,
    StdioTransport,
    StreamableHttpTransport,
)

from mcp_toolsearch.errors import ServerError, ServerValidationError
from mcp_toolsearch.logging import get_logger
from mcp_toolsearch.models.server_config import (
    RemoteTransportConfig,
    ServerConfig,
    StdioTransportConfig,
)

logger = get_logger("server_client")

_URL_SCHEMES = ("http://", "https://")


def validate_server(server: ServerConfig) -> None:
    """Check a server configuration without contacting the server.

    Raises:
        ServerValidationError: If the name is empty, a stdio command is
            empty, or a remote URL is empty or not http(s).
    """
    if not server.name:
        raise ServerValidationError("Server name cannot be empty", server.name)

    transport = server.transport
    if isinstance(transport, StdioTransportConfig):
        if not transport.command:
            raise ServerValidationError(
                f"Command cannot be empty for server: {server.name}", server.name
            )
    elif isinstance(transport, RemoteTransportConfig):
        if not transport.url:
            raise ServerValidationError(
                f"URL cannot be empty for server: {server.name}", server.name
            )
        if not transport.url.startswith(_URL_SCHEMES):
            raise ServerValidationError(
                f"Invalid URL format for server {server.name}: {transport.url}", server.name
            )


def build_transport(server: ServerConfig) -> ClientTransport:
    transport = server.transport
    if isinstance(transport, StdioTransportConfig):
        return StdioTransport(
            command=transport.command,
            args=list(transport.args),
            env={key: str(value) for key, value in transport.env.items()} or None,
            cwd=transport.cwd,
        )

    if isinstance(transport, RemoteTransportConfig):
        if transport.type == "sse":
            return SSETransport(transport.url, headers=dict(transport.headers))
        return StreamableHttpTransport(transport.url, headers=dict(transport.headers))

    raise ServerError(
        f"Unsupported transport for server {server.name}: {type(transport).__name__}",
        server.name,
        "unsupported",
    )


def build_client(server: ServerConfig) -> Client[Any]:
    return Client(build_transport(server))


async def _fetch_all_tools(server: ServerConfig) -> list[mcp.Tool]:
    client = build_client(server)
    tools: list[mcp.Tool] = []

    async with client:
        cursor: str | None = None
        page = 0
        while True:
            result = await client.session.list_tools(cursor=cursor)
            page += 1
            tools.extend(result.tools)
            logger.debug(
                f"Server {server.name}: page {page} returned {len(result.tools)} tools"
            )
            cursor = result.nextCursor
            if not cursor:
                break

    return tools


async def list_tools_from_server(
    server: ServerConfig,
    timeout: float | None = None,
) -> list[mcp.Tool]:
    """List every tool a server exposes.

    Args:
        server: The server to query.
        timeout: Seconds allowed for the whole operation, covering connection
            and every page of the listing. ``None`` waits indefinitely.

    Returns:
        All tools across all pages, in the order the server returned them.

    Raises:
        ServerError: On timeout, connection failure or MCP protocol error.
    """
    logger.debug(f"Listing tools from server {server.name} ({server.address})")
    try:
        if timeout is None:
            return await _fetch_all_tools(server)
        return await asyncio.wait_for(_fetch_all_tools(server), timeout)
    except ServerError:
        raise
    except asyncio.TimeoutError as e:
        raise ServerError(
            f"Timed out after {timeout}s listing tools from server: {server.name}",
            server.name,
            "timeout",
        ) from e
    except mcp.McpError as e:
        raise ServerError(f"MCP protocol error: {e}", server.name, "protocol") from e
    except Exception as e:
        raise ServerError(
            f"Failed to connect to server {server.name}: {e}", server.name, "connection"
        ) from e

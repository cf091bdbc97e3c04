"""Shared pytest fixtures."""

import asyncio
from typing import Any
from unittest.mock import AsyncMock

import mcp
import pytest

from mcp_toolsearch.errors import ServerError
from mcp_toolsearch.models.server_config import (
    RemoteTransportConfig,
    ServerConfig,
    StdioTransportConfig,
)


def make_tool(
    name: str,
    description: str | None = None,
    title: str | None = None,
    input_schema: dict[str, Any] | None = None,
) -> mcp.Tool:
    """Create an mcp.Tool with minimal required fields."""
    return mcp.Tool(
        name=name,
        title=title,
        description=description,
        inputSchema=input_schema or {"type": "object", "properties": {}},
    )


def stdio_server(name: str, command: str = "mcp-server") -> ServerConfig:
    return ServerConfig(name=name, transport=StdioTransportConfig(command=command))


def remote_server(name: str, url: str = "https://example.com/sse") -> ServerConfig:
    return ServerConfig(name=name, transport=RemoteTransportConfig(url=url))


class FakeToolLister:
    """Stand-in for list_tools_from_server.

    Each server name maps to a list of tools or an exception to raise. A
    per-server delay simulates slow servers and honours the timeout the
    same way the real implementation does.
    """

    def __init__(
        self,
        responses: dict[str, list[mcp.Tool] | Exception],
        delays: dict[str, float] | None = None,
    ):
        self.responses = responses
        self.delays = delays or {}
        self.calls: list[tuple[str, float | None]] = []
        self.completed: list[str] = []

    async def _respond(self, server: ServerConfig) -> list[mcp.Tool]:
        await asyncio.sleep(self.delays.get(server.name, 0))
        response = self.responses.get(server.name, [])
        if isinstance(response, Exception):
            raise response
        self.completed.append(server.name)
        return list(response)

    async def __call__(self, server: ServerConfig, timeout: float | None) -> list[mcp.Tool]:
        self.calls.append((server.name, timeout))
        try:
            return await asyncio.wait_for(self._respond(server), timeout)
        except asyncio.TimeoutError as e:
            raise ServerError(
                f"Timed out after {timeout}s listing tools from server: {server.name}",
                server.name,
                "timeout",
            ) from e


@pytest.fixture
def mock_client():
    """Create a mock FastMCP client with async context manager support."""
    client = AsyncMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    return client


@pytest.fixture
def sample_tools() -> dict[str, list[mcp.Tool]]:
    """Tools spread across three servers."""
    return {
        "files": [
            make_tool("read_file", "Read the contents of a file", title="Read File"),
            make_tool("write_file", "Write content to a file"),
            make_tool("list_directory", "List entries in a directory"),
        ],
        "database": [
            make_tool("query", "Run a SQL query against the database"),
            make_tool("read_table", "Read rows from a table"),
        ],
        "web": [
            make_tool("fetch", "Fetch a URL and return its content"),
        ],
    }


@pytest.fixture
def sample_servers() -> list[ServerConfig]:
    return [stdio_server("web"), stdio_server("files"), stdio_server("database")]


@pytest.fixture
def sample_config_data() -> dict[str, Any]:
    """Sample configuration data in the server list layout."""
    return {
        "servers": [
            {
                "name": "files",
                "transport": {"type": "stdio", "command": "mcp-file-server", "args": ["--verbose"]},
            },
            {
                "name": "remote",
                "transport": {"type": "sse", "url": "https://example.com/sse"},
            },
        ],
        "search": {"timeout": 10, "max_results": 20},
    }

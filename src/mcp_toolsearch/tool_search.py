"""Searching for tools across many MCP servers at once.

Every search queries all configured servers concurrently, one task per server,
and waits for all of them before filtering, sorting and truncating. Each
server has its own timeout and a slow or broken server only removes its own
tools from the result. Nothing is cached between searches.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterator, Sequence
from dataclasses import dataclass, field

import mcp

from mcp_toolsearch.errors import SearchError, ServerError, ServerValidationError
from mcp_toolsearch.logging import get_logger
from mcp_toolsearch.models.search_options import SearchOptions, SortOrder
from mcp_toolsearch.models.server_config import ServerConfig
from mcp_toolsearch.search_criteria import SearchCriteria
from mcp_toolsearch.server_client import list_tools_from_server, validate_server

logger = get_logger("tool_search")

ToolLister = Callable[[ServerConfig, float | None], Awaitable[list[mcp.Tool]]]


@dataclass(frozen=True, slots=True)
class ToolMatch:
    """A tool that matched a search, with the server it came from."""

    server_name: str
    tool: mcp.Tool

    @property
    def tool_name(self) -> str:
        return self.tool.name


@dataclass(slots=True)
class SearchResult:
    """Matches from a search plus the problems met along the way.

    Attributes:
        matches: Sorted and truncated matching tools.
        errors: One message per server that could not be queried.
        warnings: One message per server skipped for invalid configuration.
    """

    matches: list[ToolMatch] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __iter__(self) -> Iterator[ToolMatch]:
        return iter(self.matches)

    def __len__(self) -> int:
        return len(self.matches)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors or self.warnings)


@dataclass(slots=True)
class ServerQueryOutcome:
    """Result of querying one server: its tools, or the error it raised."""

    server_name: str
    tools: list[mcp.Tool] = field(default_factory=list)
    error: ServerError | None = None


async def _query_server(
    server: ServerConfig,
    timeout: float | None,
    list_tools: ToolLister,
) -> ServerQueryOutcome:
    try:
        tools = await list_tools(server, timeout)
    except ServerError as e:
        return ServerQueryOutcome(server.name, error=e)
    except Exception as e:
        return ServerQueryOutcome(
            server.name, error=ServerError(str(e), server.name, "connection")
        )

    logger.debug(f"Server {server.name} returned {len(tools)} tools")
    return ServerQueryOutcome(server.name, tools=tools)


def sort_matches(matches: list[ToolMatch], sort_order: SortOrder) -> None:
    """Sort matches in place."""
    if sort_order is SortOrder.SERVER_THEN_TOOL:
        matches.sort(key=lambda m: (m.server_name, m.tool_name))
    elif sort_order is SortOrder.TOOL_THEN_SERVER:
        matches.sort(key=lambda m: (m.tool_name, m.server_name))


def _validated_servers(
    servers: Sequence[ServerConfig],
    options: SearchOptions,
    warnings: list[str],
) -> list[ServerConfig]:
    valid: list[ServerConfig] = []
    for server in servers:
        try:
            validate_server(server)
        except ServerValidationError as e:
            if not options.continue_on_error:
                raise SearchError(f"Invalid server configuration: {e}") from e
            message = f"Invalid server configuration {server.name!r}: {e}"
            logger.warning(message)
            warnings.append(message)
            continue
        valid.append(server)
    return valid


async def search_tools_with_options(
    servers: Sequence[ServerConfig],
    criteria: SearchCriteria,
    options: SearchOptions | None = None,
    *,
    list_tools: ToolLister | None = None,
) -> SearchResult:
    """Search for tools across servers.

    Args:
        servers: Servers to query. Invalid entries are skipped or abort the
            search depending on ``options.continue_on_error``.
        criteria: Which tools to keep.
        options: Timeout, ordering, error policy and result limit.
        list_tools: Coroutine function used to fetch one server's tools.
            Defaults to ``list_tools_from_server``.

    Returns:
        The matches together with any recoverable errors and warnings.

    Raises:
        SearchError: If ``continue_on_error`` is False and any server is
            invalid or fails. Results from other servers are discarded.
    """
    options = options or SearchOptions()
    list_tools = list_tools or list_tools_from_server
    result = SearchResult()

    valid_servers = _validated_servers(servers, options, result.warnings)

    if criteria.pattern_error is not None:
        logger.warning(f"{criteria.pattern_error}; no tools will match")

    outcomes = await asyncio.gather(
        *(_query_server(server, options.timeout, list_tools) for server in valid_servers)
    )

    for outcome in outcomes:
        if outcome.error is not None:
            message = f"Error connecting to server {outcome.server_name}: {outcome.error}"
            if not options.continue_on_error:
                raise SearchError(message) from outcome.error
            logger.warning(message)
            result.errors.append(message)
            continue

        for tool in outcome.tools:
            if criteria.matches(tool):
                result.matches.append(ToolMatch(outcome.server_name, tool))

    sort_matches(result.matches, options.sort_order)

    if options.max_results is not None:
        del result.matches[options.max_results :]

    logger.info(
        f"Found {len(result.matches)} matching tools across {len(valid_servers)} servers"
        + (f" ({len(result.errors)} unreachable)" if result.errors else "")
    )
    return result


async def search_tools(
    servers: Sequence[ServerConfig],
    criteria: SearchCriteria,
    options: SearchOptions | None = None,
) -> list[ToolMatch]:
    """Search for tools, returning only the matches.

    Recoverable errors are logged as warnings by the orchestrator.
    """
    result = await search_tools_with_options(servers, criteria, options)
    return result.matches


async def list_all_tools(
    servers: Sequence[ServerConfig],
    options: SearchOptions | None = None,
) -> list[ToolMatch]:
    """List every tool from every server without filtering."""
    return await search_tools(servers, SearchCriteria.match_all(), options)


async def search_tools_with_query(
    servers: Sequence[ServerConfig],
    query: str,
    options: SearchOptions | None = None,
) -> list[ToolMatch]:
    return await search_tools(servers, SearchCriteria.with_query(query), options)


async def search_tools_with_regex(
    servers: Sequence[ServerConfig],
    pattern: str,
    options: SearchOptions | None = None,
) -> list[ToolMatch]:
    return await search_tools(servers, SearchCriteria.with_regex(pattern), options)


async def search_tools_with_keywords(
    servers: Sequence[ServerConfig],
    keywords: Sequence[str],
    options: SearchOptions | None = None,
) -> list[ToolMatch]:
    """Search for tools containing all of the keywords."""
    return await search_tools(servers, SearchCriteria.with_keywords(keywords), options)

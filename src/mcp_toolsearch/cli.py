import asyncio
import gc
import json
import os
import warnings
from typing import Any

import typer
import uvicorn
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mcp_toolsearch.errors import ConfigError, SearchError, ServerValidationError
from mcp_toolsearch.logging import configure_logging
from mcp_toolsearch.models.config import Config
from mcp_toolsearch.search_builder import SearchBuilder
from mcp_toolsearch.search_criteria import SearchFields
from mcp_toolsearch.server_client import validate_server
from mcp_toolsearch.tool_search import SearchResult, ToolMatch
from mcp_toolsearch.utils import default_config_path, load_config, load_servers

load_dotenv()

app = typer.Typer(help="Search tools across MCP servers")
console = Console()
err_console = Console(stderr=True)

_DESCRIPTION_WIDTH = 50

ConfigOption = typer.Option(None, "--config", "-c", help="Path to the server configuration file")
FormatOption = typer.Option("text", "--format", "-f", help="Output format: text, json or table")
LimitOption = typer.Option(None, "--limit", "-l", help="Maximum number of results")
SortByToolOption = typer.Option(False, "--sort-by-tool", help="Sort by tool name, then server")
TimeoutOption = typer.Option(None, "--timeout", help="Per-server timeout in seconds")


@app.callback()
def main(log_level: str = typer.Option(os.getenv("LOG_LEVEL", "WARNING"), "--log-level")) -> None:
    configure_logging(log_level.upper())


def run_async_with_cleanup(coro: Any) -> Any:
    """Run a search to completion from synchronous CLI code.

    A search spawns one stdio subprocess per local server. Their transports
    can still be finalising when ``asyncio.run`` closes the loop, so the
    resulting "Event loop is closed" warnings are silenced and a collection
    is forced afterwards. Ctrl-C exits with status 130 instead of a traceback.
    """
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message="Event loop is closed")
        warnings.filterwarnings("ignore", category=ResourceWarning)
        try:
            return asyncio.run(coro)
        except KeyboardInterrupt:
            err_console.print("[yellow]Search interrupted[/yellow]")
            raise typer.Exit(code=130)
        finally:
            gc.collect()


def _load(config_path: str | None) -> Config:
    path = config_path or default_config_path()
    try:
        return load_config(path)
    except (FileNotFoundError, ConfigError) as e:
        err_console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)


def _truncate(text: str | None, width: int = _DESCRIPTION_WIDTH) -> str:
    if not text:
        return "N/A"
    if len(text) > width:
        return text[: width - 3] + "..."
    return text


def _match_to_dict(match: ToolMatch) -> dict[str, Any]:
    return {
        "server_name": match.server_name,
        "tool": match.tool.model_dump(mode="json", exclude_none=True),
    }


def print_results(result: SearchResult, output_format: str, header: str) -> None:
    """Print search results as text, json or a table.

    Tool text and the header come from servers and users, so they are
    escaped before reaching rich's markup parser.
    """
    if output_format == "json":
        console.print_json(json.dumps([_match_to_dict(m) for m in result.matches]))
    elif not result.matches:
        console.print("No results found")
    elif output_format == "table":
        table = Table("Server", "Tool", "Description", title=escape(header))
        for match in result.matches:
            table.add_row(
                escape(match.server_name),
                escape(match.tool_name),
                escape(_truncate(match.tool.description)),
            )
        console.print(table)
    else:
        console.print(f"{escape(header)}\n")
        for match in result.matches:
            console.print(f"[bold]Server:[/bold] {escape(match.server_name)}")
            console.print(f"  Name: {escape(match.tool_name)}")
            if match.tool.description:
                console.print(f"  Description: {escape(match.tool.description)}")
            if match.tool.title:
                console.print(f"  Title: {escape(match.tool.title)}")
            console.print()

    for message in [*result.warnings, *result.errors]:
        err_console.print(f"[yellow]{escape(message)}[/yellow]")


def _run_search(builder: SearchBuilder) -> SearchResult:
    try:
        return run_async_with_cleanup(builder.run())
    except SearchError as e:
        err_console.print(f"[red]Search failed: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)


def _configure_builder(
    config: Config,
    limit: int | None,
    sort_by_tool: bool,
    timeout: float | None,
) -> SearchBuilder:
    builder = SearchBuilder(config.servers, config.search)
    try:
        if limit is not None:
            builder = builder.limit(limit)
        if timeout is not None:
            builder = builder.timeout(timeout)
    except ValidationError as e:
        messages = "; ".join(f"{err['loc'][0]}: {err['msg']}" for err in e.errors())
        err_console.print(f"[red]Invalid search options: {escape(messages)}[/red]")
        raise typer.Exit(code=1)
    if sort_by_tool:
        builder = builder.sort_by_tool()
    return builder


@app.command()
def search(
    query: str = typer.Argument(
        ..., help="Search query (regex if it contains ^$*+?|[(, keywords if comma separated)"
    ),
    config: str | None = ConfigOption,
    output_format: str = FormatOption,
    limit: int | None = LimitOption,
    sort_by_tool: bool = SortByToolOption,
    timeout: float | None = TimeoutOption,
    case_sensitive: bool = typer.Option(False, "--case-sensitive", help="Match case exactly"),
    schema: bool = typer.Option(False, "--schema", help="Also search input schemas"),
) -> None:
    """
    Search for tools matching a query
    """
    cfg = _load(config)
    builder = _configure_builder(cfg, limit, sort_by_tool, timeout).query(query)
    if case_sensitive:
        builder = builder.case_sensitive()
    if schema:
        builder = builder.fields(SearchFields(input_schema=True))

    result = _run_search(builder)
    print_results(result, output_format, f"Found {len(result)} tool(s) matching '{query}'")


@app.command("list")
def list_tools(
    config: str | None = ConfigOption,
    output_format: str = FormatOption,
    limit: int | None = LimitOption,
    sort_by_tool: bool = SortByToolOption,
    timeout: float | None = TimeoutOption,
) -> None:
    """
    List all tools from all servers
    """
    cfg = _load(config)
    result = _run_search(_configure_builder(cfg, limit, sort_by_tool, timeout))
    print_results(result, output_format, f"Found {len(result)} tool(s) across all servers")


@app.command()
def validate(config: str | None = ConfigOption) -> None:
    """
    Validate the server configuration file
    """
    path = config or default_config_path()
    try:
        loaded = load_servers(path)
    except (FileNotFoundError, ConfigError, ServerValidationError) as e:
        err_console.print(f"[red]✗ Configuration error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    console.print("[green]✓ Configuration file is valid![/green]")
    console.print(f"[green]✓ Found {len(loaded)} server(s)[/green]")
    for server in loaded:
        console.print(f"  - {escape(server.name)}")


@app.command()
def servers(config: str | None = ConfigOption) -> None:
    """
    Return a table of all configured servers
    """
    cfg = _load(config)
    table = Table("Name", "Type", "Command / Url", "Status")

    for server in cfg.servers:
        try:
            validate_server(server)
            status = "ok"
        except ServerValidationError as e:
            status = f"[red]{escape(str(e))}[/red]"
        table.add_row(escape(server.name), server.transport.type, escape(server.address), status)

    console.print(table)


@app.command()
def serve(host: str = "127.0.0.1", port: int = 8000, reload: bool = False) -> None:
    """
    Start the tool search HTTP API.
    """
    uvicorn.run("mcp_toolsearch.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()

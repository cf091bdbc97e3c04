"""Tests for the toolsearch CLI commands."""

import json
from unittest.mock import patch

import pytest
import typer
from conftest import make_tool, remote_server, stdio_server
from rich.console import Console

from mcp_toolsearch.cli import (
    list_tools,
    print_results,
    run_async_with_cleanup,
    search,
    servers,
    validate,
)
from mcp_toolsearch.errors import ConfigError, SearchError, ServerValidationError
from mcp_toolsearch.models.config import Config
from mcp_toolsearch.models.search_options import SearchOptions, SortOrder
from mcp_toolsearch.search_builder import SearchBuilder
from mcp_toolsearch.tool_search import SearchResult, ToolMatch


def _result(*matches: ToolMatch, errors=(), warnings=()) -> SearchResult:
    return SearchResult(matches=list(matches), errors=list(errors), warnings=list(warnings))


def _config() -> Config:
    return Config(
        servers=[stdio_server("files"), remote_server("remote")],
        search=SearchOptions(timeout=10),
    )


def _runner(result: SearchResult):
    """Build a run_async_with_cleanup stand-in returning a canned result."""

    def run(coro):
        coro.close()
        return result

    return run


def _search_args(**overrides):
    args = dict(
        config=None,
        output_format="text",
        limit=None,
        sort_by_tool=False,
        timeout=None,
        case_sensitive=False,
        schema=False,
    )
    args.update(overrides)
    return args


READ_FILE = ToolMatch("files", make_tool("read_file", "Read a file", title="Read File"))


class TestSearchCommand:
    def test_text_output(self) -> None:
        with (
            patch("mcp_toolsearch.cli.load_config", return_value=_config()),
            patch(
                "mcp_toolsearch.cli.run_async_with_cleanup",
                side_effect=_runner(_result(READ_FILE)),
            ),
            patch("mcp_toolsearch.cli.console") as mock_console,
        ):
            search("read", **_search_args())

        printed = [str(c.args[0]) for c in mock_console.print.call_args_list if c.args]
        assert "Found 1 tool(s) matching 'read'\n" in printed
        assert "  Name: read_file" in printed
        assert "  Description: Read a file" in printed
        assert "  Title: Read File" in printed

    def test_options_reach_builder(self) -> None:
        with (
            patch("mcp_toolsearch.cli.load_config", return_value=_config()),
            patch("mcp_toolsearch.cli._run_search", return_value=_result()) as mock_run,
            patch("mcp_toolsearch.cli.console"),
        ):
            search(
                "^read",
                **_search_args(
                    limit=3, sort_by_tool=True, timeout=1.5, case_sensitive=True, schema=True
                ),
            )

        builder: SearchBuilder = mock_run.call_args[0][0]
        assert builder.options.max_results == 3
        assert builder.options.sort_order is SortOrder.TOOL_THEN_SERVER
        assert builder.options.timeout == 1.5
        criteria = builder.criteria()
        assert criteria.case_sensitive
        assert criteria.fields.input_schema
        assert criteria.query == "^read"

    def test_json_output(self) -> None:
        with (
            patch("mcp_toolsearch.cli.load_config", return_value=_config()),
            patch(
                "mcp_toolsearch.cli.run_async_with_cleanup",
                side_effect=_runner(_result(READ_FILE)),
            ),
            patch("mcp_toolsearch.cli.console") as mock_console,
        ):
            search("read", **_search_args(output_format="json"))

        payload = json.loads(mock_console.print_json.call_args[0][0])
        assert payload[0]["server_name"] == "files"
        assert payload[0]["tool"]["name"] == "read_file"

    def test_table_output(self) -> None:
        with (
            patch("mcp_toolsearch.cli.load_config", return_value=_config()),
            patch(
                "mcp_toolsearch.cli.run_async_with_cleanup",
                side_effect=_runner(_result(READ_FILE)),
            ),
            patch("mcp_toolsearch.cli.console") as mock_console,
        ):
            search("read", **_search_args(output_format="table"))

        table = mock_console.print.call_args[0][0]
        assert [c.header for c in table.columns] == ["Server", "Tool", "Description"]
        assert list(table.columns[1].cells) == ["read_file"]

    def test_search_error_exits(self) -> None:
        def fail(coro):
            coro.close()
            raise SearchError("Error connecting to server files: boom")

        with (
            patch("mcp_toolsearch.cli.load_config", return_value=_config()),
            patch("mcp_toolsearch.cli.run_async_with_cleanup", side_effect=fail),
            patch("mcp_toolsearch.cli.err_console") as mock_err,
        ):
            with pytest.raises(typer.Exit) as exc_info:
                search("read", **_search_args())

        assert exc_info.value.exit_code == 1
        assert "boom" in mock_err.print.call_args[0][0]

    def test_missing_config_exits(self) -> None:
        with (
            patch("mcp_toolsearch.cli.load_config", side_effect=FileNotFoundError("nope")),
            patch("mcp_toolsearch.cli.err_console"),
        ):
            with pytest.raises(typer.Exit):
                search("read", **_search_args())


class TestListCommand:
    def test_lists_every_tool(self) -> None:
        matches = [
            READ_FILE,
            ToolMatch("remote", make_tool("fetch", "Fetch a URL")),
        ]
        with (
            patch("mcp_toolsearch.cli.load_config", return_value=_config()),
            patch("mcp_toolsearch.cli._run_search", return_value=_result(*matches)) as mock_run,
            patch("mcp_toolsearch.cli.console") as mock_console,
        ):
            list_tools(
                config=None,
                output_format="table",
                limit=None,
                sort_by_tool=False,
                timeout=None,
            )

        assert mock_run.call_args[0][0].criteria().is_match_all
        table = mock_console.print.call_args[0][0]
        assert table.title == "Found 2 tool(s) across all servers"
        assert list(table.columns[0].cells) == ["files", "remote"]


class TestPrintResults:
    def test_no_results(self) -> None:
        with patch("mcp_toolsearch.cli.console") as mock_console:
            print_results(_result(), "text", "header")
        mock_console.print.assert_called_once_with("No results found")

    def test_errors_and_warnings_go_to_stderr(self) -> None:
        result = _result(
            READ_FILE,
            errors=["Error connecting to server remote: timed out"],
            warnings=["Invalid server configuration 'bad': Command cannot be empty"],
        )
        with (
            patch("mcp_toolsearch.cli.console"),
            patch("mcp_toolsearch.cli.err_console") as mock_err,
        ):
            print_results(result, "text", "header")

        printed = " ".join(c.args[0] for c in mock_err.print.call_args_list)
        assert "timed out" in printed
        assert "Command cannot be empty" in printed

    def test_long_descriptions_truncated_in_table(self) -> None:
        long = ToolMatch("files", make_tool("x", "d" * 80))
        with patch("mcp_toolsearch.cli.console") as mock_console:
            print_results(_result(long), "table", "header")

        cell = list(mock_console.print.call_args[0][0].columns[2].cells)[0]
        assert len(cell) == 50
        assert cell.endswith("...")


class TestValidateCommand:
    def test_valid(self) -> None:
        with (
            patch("mcp_toolsearch.cli.load_servers", return_value=_config().servers),
            patch("mcp_toolsearch.cli.console") as mock_console,
        ):
            validate(config="servers.json")

        printed = [c.args[0] for c in mock_console.print.call_args_list]
        assert "[green]✓ Found 2 server(s)[/green]" in printed
        assert "  - files" in printed

    @pytest.mark.parametrize(
        "error",
        [
            FileNotFoundError("Config file not found"),
            ConfigError("Invalid config"),
            ServerValidationError("Command cannot be empty", "files"),
        ],
    )
    def test_invalid(self, error) -> None:
        with (
            patch("mcp_toolsearch.cli.load_servers", side_effect=error),
            patch("mcp_toolsearch.cli.err_console") as mock_err,
        ):
            with pytest.raises(typer.Exit) as exc_info:
                validate(config="servers.json")

        assert exc_info.value.exit_code == 1
        assert "✗ Configuration error" in mock_err.print.call_args[0][0]


class TestServersCommand:
    def test_table(self) -> None:
        config = Config(servers=[stdio_server("files", "fs-server"), stdio_server("broken", "")])
        with (
            patch("mcp_toolsearch.cli.load_config", return_value=config),
            patch("mcp_toolsearch.cli.console") as mock_console,
        ):
            servers(config=None)

        table = mock_console.print.call_args[0][0]
        assert [c.header for c in table.columns] == ["Name", "Type", "Command / Url", "Status"]
        assert list(table.columns[0].cells) == ["files", "broken"]
        statuses = list(table.columns[3].cells)
        assert statuses[0] == "ok"
        assert "Command cannot be empty" in statuses[1]


class TestMarkupInResults:
    """Server and query text is printed literally, never parsed as rich markup."""

    @pytest.fixture
    def recording_console(self):
        return Console(record=True, width=200, color_system=None)

    def test_bracketed_tool_text_in_text_output(self, recording_console) -> None:
        match = ToolMatch(
            "files",
            make_tool("get[data]", "Reads [/path] from disk", title="Get [bold]data"),
        )
        with patch("mcp_toolsearch.cli.console", recording_console):
            print_results(_result(match), "text", "Found 1 tool(s) matching '^get[_-]data'")

        output = recording_console.export_text()
        assert "Found 1 tool(s) matching '^get[_-]data'" in output
        assert "Name: get[data]" in output
        assert "Description: Reads [/path] from disk" in output
        assert "Title: Get [bold]data" in output

    def test_bracketed_tool_text_in_table(self, recording_console) -> None:
        match = ToolMatch("files", make_tool("get[data]", "Reads [/path] from disk"))
        with patch("mcp_toolsearch.cli.console", recording_console):
            print_results(_result(match), "table", "matching '^read[_-]file$'")

        output = recording_console.export_text()
        assert "matching '^read[_-]file$'" in output
        assert "get[data]" in output
        assert "Reads [/path] from disk" in output

    def test_search_command_with_bracketed_query(self, recording_console) -> None:
        match = ToolMatch("files", make_tool("read_file", "Reads [/path] from disk"))
        with (
            patch("mcp_toolsearch.cli.load_config", return_value=_config()),
            patch(
                "mcp_toolsearch.cli.run_async_with_cleanup",
                side_effect=_runner(_result(match)),
            ),
            patch("mcp_toolsearch.cli.console", recording_console),
        ):
            search("^read[_-]file$", **_search_args())

        output = recording_console.export_text()
        assert "matching '^read[_-]file$'" in output
        assert "Reads [/path] from disk" in output


class TestInvalidSearchOptions:
    @pytest.mark.parametrize("overrides", [{"limit": -1}, {"timeout": 0}])
    def test_search_rejects_out_of_range_options(self, overrides) -> None:
        with (
            patch("mcp_toolsearch.cli.load_config", return_value=_config()),
            patch("mcp_toolsearch.cli.run_async_with_cleanup") as mock_run,
            patch("mcp_toolsearch.cli.err_console") as mock_err,
        ):
            with pytest.raises(typer.Exit) as exc_info:
                search("read", **_search_args(**overrides))

        assert exc_info.value.exit_code == 1
        assert "Invalid search options" in mock_err.print.call_args[0][0]
        mock_run.assert_not_called()

    def test_list_rejects_negative_limit(self) -> None:
        with (
            patch("mcp_toolsearch.cli.load_config", return_value=_config()),
            patch("mcp_toolsearch.cli.run_async_with_cleanup") as mock_run,
            patch("mcp_toolsearch.cli.err_console"),
        ):
            with pytest.raises(typer.Exit):
                list_tools(
                    config=None,
                    output_format="text",
                    limit=-1,
                    sort_by_tool=False,
                    timeout=None,
                )

        mock_run.assert_not_called()


class TestRunAsyncWithCleanup:
    def test_returns_result(self) -> None:
        async def answer():
            return 42

        assert run_async_with_cleanup(answer()) == 42

    def test_interrupt_exits_130(self) -> None:
        async def interrupted():
            raise KeyboardInterrupt

        with patch("mcp_toolsearch.cli.err_console"):
            with pytest.raises(typer.Exit) as exc_info:
                run_async_with_cleanup(interrupted())

        assert exc_info.value.exit_code == 130

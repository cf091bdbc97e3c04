"""
Example: Search with explicit options.

Uses search_tools_with_options to control the per-server timeout, ordering
and result limit, and shows the errors and warnings collected from servers
that could not be queried.
"""

import asyncio
import os

from dotenv import load_dotenv

from mcp_toolsearch import (
    SearchCriteria,
    SearchFields,
    SearchOptions,
    SortOrder,
    load_config,
    search_tools_with_options,
)
from mcp_toolsearch.logging import configure_logging

load_dotenv()
configure_logging()

CONFIG_PATH = os.getenv("TOOLSEARCH_CONFIG", "examples/servers.json")


async def main():
    config = load_config(CONFIG_PATH)

    criteria = (
        SearchCriteria.with_keywords(["url", "fetch"])
        .with_fields(SearchFields(input_schema=True))
        .with_min_description_length(10)
    )
    options = SearchOptions(
        timeout=5,
        sort_order=SortOrder.TOOL_THEN_SERVER,
        continue_on_error=True,
        max_results=10,
    )

    result = await search_tools_with_options(config.servers, criteria, options)

    print(f"Found {len(result)} tool(s)\n")
    for match in result:
        print(f"  {match.tool_name:<30} {match.server_name}")

    if result.has_errors:
        print("\nProblems:")
        for message in [*result.warnings, *result.errors]:
            print(f"  - {message}")


if __name__ == "__main__":
    asyncio.run(main())

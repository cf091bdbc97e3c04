"""
Example: Free-form queries with the fluent builder.

simple_search guesses the search mode from the query: regex metacharacters
make it a regex, commas split it into keywords, anything else is a substring.
SearchBuilder exposes the same detection with extra options.
"""

import asyncio
import os
import sys

from dotenv import load_dotenv

from mcp_toolsearch import SearchBuilder, load_servers, simple_search
from mcp_toolsearch.logging import configure_logging

load_dotenv()
configure_logging()

CONFIG_PATH = os.getenv("TOOLSEARCH_CONFIG", "examples/servers.json")


async def main():
    servers = load_servers(CONFIG_PATH)
    query = sys.argv[1] if len(sys.argv) > 1 else "read,file"

    matches = await simple_search(servers, query)
    print(f"simple_search({query!r}): {[m.tool_name for m in matches]}")

    result = await (
        SearchBuilder(servers)
        .query(query)
        .sort_by_tool()
        .limit(5)
        .timeout(5)
        .run()
    )
    print(f"\nTop {len(result)} by tool name:")
    for match in result:
        print(f"  {match.tool_name} ({match.server_name})")
    for message in result.errors:
        print(f"  ! {message}")


if __name__ == "__main__":
    asyncio.run(main())

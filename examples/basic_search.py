"""
Example: Basic tool search.

Searches every server in ``examples/servers.json`` for tools whose name,
title or description contains "file".
"""

import asyncio
import os

from dotenv import load_dotenv

from mcp_toolsearch import SearchCriteria, load_servers, search_tools
from mcp_toolsearch.logging import configure_logging

load_dotenv()
configure_logging()

CONFIG_PATH = os.getenv("TOOLSEARCH_CONFIG", "examples/servers.json")


async def main():
    servers = load_servers(CONFIG_PATH)
    print(f"Searching {len(servers)} servers for 'file'\n")

    matches = await search_tools(servers, SearchCriteria.with_query("file"))

    for match in matches:
        print(f"[{match.server_name}] {match.tool_name}")
        if match.tool.description:
            print(f"    {match.tool.description.splitlines()[0]}")

    print(f"\n{len(matches)} tool(s) found")


if __name__ == "__main__":
    asyncio.run(main())

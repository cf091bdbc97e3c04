"""
Example: List every tool from every server.
"""

import asyncio
import os

from dotenv import load_dotenv

from mcp_toolsearch import SearchOptions, list_all_tools, load_servers
from mcp_toolsearch.logging import configure_logging

load_dotenv()
configure_logging()

CONFIG_PATH = os.getenv("TOOLSEARCH_CONFIG", "examples/servers.json")


async def main():
    servers = load_servers(CONFIG_PATH)
    matches = await list_all_tools(servers, SearchOptions(timeout=10))

    current = None
    for match in matches:
        if match.server_name != current:
            current = match.server_name
            print(f"\n{current}")
        print(f"  - {match.tool_name}")


if __name__ == "__main__":
    asyncio.run(main())

"""
Example: Comparing search modes.

Runs the same servers through each search mode to show how substring,
regex, keyword and word boundary matching differ.
"""

import asyncio
import os

from dotenv import load_dotenv

from mcp_toolsearch import SearchCriteria, SearchMode, load_servers, search_tools
from mcp_toolsearch.logging import configure_logging

load_dotenv()
configure_logging()

CONFIG_PATH = os.getenv("TOOLSEARCH_CONFIG", "examples/servers.json")

SEARCHES = {
    "substring 'read'": SearchCriteria.with_query("read"),
    "regex '^(get|read)_'": SearchCriteria.with_regex("^(get|read)_"),
    "keywords ['file', 'directory']": SearchCriteria.with_keywords(["file", "directory"]),
    "word boundary 'time'": SearchCriteria.with_query("time").with_mode(SearchMode.WORD_BOUNDARY),
    "exact name 'fetch'": SearchCriteria.with_name("fetch"),
}


async def main():
    servers = load_servers(CONFIG_PATH)

    for label, criteria in SEARCHES.items():
        matches = await search_tools(servers, criteria)
        names = ", ".join(f"{m.server_name}/{m.tool_name}" for m in matches) or "-"
        print(f"{label}:\n  {names}\n")


if __name__ == "__main__":
    asyncio.run(main())

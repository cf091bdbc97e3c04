"""Free-form query handling and a fluent search API.

``build_criteria`` turns a single query string into ``SearchCriteria`` by
guessing what the user meant:

- a query containing regex metacharacters (``^ $ * + ? | [ (``) is a regex,
- a comma separated query is a list of keywords that must all match,
- anything else is a case-insensitive substring search.

``SearchBuilder`` wraps that in an immutable fluent interface::

    results = await (
        SearchBuilder(servers)
        .query("read,file")
        .limit(10)
        .sort_by_tool()
        .search()
    )
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from mcp_toolsearch.models.search_options import SearchOptions, SortOrder
from mcp_toolsearch.models.server_config import ServerConfig
from mcp_toolsearch.search_criteria import SearchCriteria, SearchFields
from mcp_toolsearch.tool_search import (
    SearchResult,
    ToolLister,
    ToolMatch,
    search_tools_with_options,
)

_REGEX_CHARS = frozenset("^$*+?|[(")


def is_likely_regex(query: str) -> bool:
    """Return True if the query contains characters typical of a regex."""
    return any(char in _REGEX_CHARS for char in query)


def split_keywords(query: str) -> list[str]:
    return [part.strip() for part in query.split(",") if part.strip()]


def build_criteria(
    query: str | None = None,
    keywords: Sequence[str] | None = None,
) -> SearchCriteria:
    """Build search criteria from a free-form query.

    Explicit ``keywords`` take precedence over ``query`` and always select
    keyword matching. With neither, the criteria match every tool.
    """
    if keywords is not None:
        return SearchCriteria.with_keywords(keywords)

    if query is None:
        return SearchCriteria.match_all()

    if is_likely_regex(query):
        return SearchCriteria.with_regex(query)

    if "," in query:
        return SearchCriteria.with_keywords(split_keywords(query))

    return SearchCriteria.with_query(query)


class SearchBuilder:
    """Fluent search configuration; every method returns a new builder."""

    def __init__(
        self,
        servers: Sequence[ServerConfig],
        options: SearchOptions | None = None,
        *,
        query: str | None = None,
        keywords: Sequence[str] | None = None,
        case_sensitive: bool = False,
        fields: SearchFields | None = None,
    ) -> None:
        self._servers = tuple(servers)
        self._options = options or SearchOptions()
        self._query = query
        self._keywords = tuple(keywords) if keywords is not None else None
        self._case_sensitive = case_sensitive
        self._fields = fields

    def _copy(self, **changes: Any) -> SearchBuilder:
        params: dict[str, Any] = {
            "options": self._options,
            "query": self._query,
            "keywords": self._keywords,
            "case_sensitive": self._case_sensitive,
            "fields": self._fields,
        }
        params.update(changes)
        return SearchBuilder(self._servers, **params)

    def _with_options(self, **changes: Any) -> SearchBuilder:
        options = SearchOptions.model_validate({**self._options.model_dump(), **changes})
        return self._copy(options=options)

    @property
    def servers(self) -> tuple[ServerConfig, ...]:
        return self._servers

    @property
    def options(self) -> SearchOptions:
        return self._options

    def query(self, query: str) -> SearchBuilder:
        """Set the query; the search mode is detected from its contents."""
        return self._copy(query=query)

    def keywords(self, keywords: Sequence[str]) -> SearchBuilder:
        """Match tools containing all keywords. Clears any query."""
        return self._copy(keywords=keywords, query=None)

    def limit(self, max_results: int) -> SearchBuilder:
        return self._with_options(max_results=max_results)

    def timeout(self, seconds: float | None) -> SearchBuilder:
        return self._with_options(timeout=seconds)

    def sort_by_tool(self) -> SearchBuilder:
        return self._with_options(sort_order=SortOrder.TOOL_THEN_SERVER)

    def sort_by_server(self) -> SearchBuilder:
        return self._with_options(sort_order=SortOrder.SERVER_THEN_TOOL)

    def continue_on_error(self, enabled: bool = True) -> SearchBuilder:
        return self._with_options(continue_on_error=enabled)

    def case_sensitive(self, enabled: bool = True) -> SearchBuilder:
        return self._copy(case_sensitive=enabled)

    def fields(self, fields: SearchFields) -> SearchBuilder:
        return self._copy(fields=fields)

    def criteria(self) -> SearchCriteria:
        criteria = build_criteria(self._query, self._keywords)
        if self._case_sensitive:
            criteria = criteria.with_case_sensitive()
        if self._fields is not None:
            criteria = criteria.with_fields(self._fields)
        return criteria

    async def run(self, list_tools: ToolLister | None = None) -> SearchResult:
        """Execute the search, returning matches together with errors."""
        return await search_tools_with_options(
            self.servers, self.criteria(), self.options, list_tools=list_tools
        )

    async def search(self, list_tools: ToolLister | None = None) -> list[ToolMatch]:
        """Execute the search and return the matches."""
        result = await self.run(list_tools)
        return result.matches


async def simple_search(servers: Sequence[ServerConfig], query: str) -> list[ToolMatch]:
    """Search with an auto-detected mode and default options."""
    return await SearchBuilder(servers).query(query).search()

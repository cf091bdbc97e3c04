"""Options controlling how a search is run across servers."""

from enum import Enum

from pydantic import BaseModel, Field


class SortOrder(str, Enum):
    """Ordering applied to search results."""

    SERVER_THEN_TOOL = "server_then_tool"
    TOOL_THEN_SERVER = "tool_then_server"
    NONE = "none"


class SearchOptions(BaseModel):
    """Options for a search across multiple servers.

    Attributes:
        timeout: Seconds allowed for each server to connect and list its
            tools. Applies to every server independently; ``None`` waits
            forever.
        sort_order: How to order the combined results.
        continue_on_error: When True, unreachable or misconfigured servers are
            reported and skipped. When False, the first failure aborts the
            search.
        max_results: Cap on the number of results, applied after sorting.
    """

    timeout: float | None = Field(
        default=30.0,
        gt=0,
        description="Per-server timeout in seconds",
    )
    sort_order: SortOrder = Field(
        default=SortOrder.SERVER_THEN_TOOL,
        description="Ordering of the combined results",
    )
    continue_on_error: bool = Field(
        default=True,
        description="Skip failing servers instead of aborting the search",
    )
    max_results: int | None = Field(
        default=None,
        ge=0,
        description="Maximum number of results returned",
    )

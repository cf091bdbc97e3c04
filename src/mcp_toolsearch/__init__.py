from . import models
from .errors import (
    ConfigError,
    PatternError,
    SearchError,
    ServerError,
    ServerValidationError,
    ToolSearchError,
)
from .models import SearchOptions, ServerConfig, SortOrder
from .search_builder import SearchBuilder, build_criteria, simple_search
from .search_criteria import SearchCriteria, SearchFields, SearchMode, extract_schema_text
from .server_client import list_tools_from_server, validate_server
from .tool_search import (
    SearchResult,
    ToolMatch,
    list_all_tools,
    search_tools,
    search_tools_with_keywords,
    search_tools_with_options,
    search_tools_with_query,
    search_tools_with_regex,
)
from .utils import load_config, load_servers

__all__ = [
    "SearchBuilder",
    "SearchCriteria",
    "SearchFields",
    "SearchMode",
    "SearchOptions",
    "SearchResult",
    "ServerConfig",
    "SortOrder",
    "ToolMatch",
    "build_criteria",
    "extract_schema_text",
    "list_all_tools",
    "list_tools_from_server",
    "load_config",
    "load_servers",
    "search_tools",
    "search_tools_with_keywords",
    "search_tools_with_options",
    "search_tools_with_query",
    "search_tools_with_regex",
    "simple_search",
    "validate_server",
    "ConfigError",
    "PatternError",
    "SearchError",
    "ServerError",
    "ServerValidationError",
    "ToolSearchError",
    "models",
]

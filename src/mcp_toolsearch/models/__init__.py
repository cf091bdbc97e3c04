from .config import Config
from .search_options import SearchOptions, SortOrder
from .server_config import (
    RemoteTransportConfig,
    ServerConfig,
    StdioTransportConfig,
    TransportConfig,
)

__all__ = [
    "Config",
    "SearchOptions",
    "SortOrder",
    "ServerConfig",
    "StdioTransportConfig",
    "RemoteTransportConfig",
    "TransportConfig",
]

from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, model_validator

from mcp_toolsearch.models.search_options import SearchOptions
from mcp_toolsearch.models.server_config import ServerConfig


def _infer_remote_type(url: str) -> str:
    path = urlparse(url).path.rstrip("/")
    return "sse" if path.endswith("/sse") else "streamable-http"


def _server_from_mapping_entry(name: str, entry: Any) -> Any:
    """Convert an mcpServers-style ``{name: {...}}`` entry into a server dict."""
    if not isinstance(entry, dict):
        return entry

    if isinstance(entry.get("transport"), dict):
        return {"name": name, "transport": entry["transport"]}

    transport = {k: v for k, v in entry.items() if k != "transport"}
    declared = entry.get("type") or entry.get("transport")

    if "url" in entry:
        transport["type"] = declared or _infer_remote_type(str(entry["url"]))
    else:
        transport["type"] = declared or "stdio"

    return {"name": name, "transport": transport}


class Config(BaseModel):
    """Search configuration file.

    Holds the servers to search and the default search options used by the
    CLI and the HTTP API.
    """

    servers: list[ServerConfig] = Field(default_factory=list)
    search: SearchOptions = Field(default_factory=SearchOptions)

    @model_validator(mode="before")
    @classmethod
    def normalise_layout(cls, data: Any) -> Any:
        """Accept a bare server list or an mcpServers-style mapping."""
        if isinstance(data, list):
            return {"servers": data}

        if not isinstance(data, dict):
            return data

        if "servers" not in data and "mcpServers" in data:
            data = {**data, "servers": data["mcpServers"]}
            del data["mcpServers"]

        servers = data.get("servers")
        if isinstance(servers, dict):
            data = {
                **data,
                "servers": [
                    _server_from_mapping_entry(name, entry) for name, entry in servers.items()
                ],
            }

        return data

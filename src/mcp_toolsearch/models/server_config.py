"""MCP server configuration models.

A server is a name plus a transport. Stdio servers are spawned as a child
process; remote servers are reached over SSE or streamable HTTP. The models
accept incomplete values (empty command, malformed URL) so that a bad entry
can be reported and skipped at search time instead of failing the whole file.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field


class StdioTransportConfig(BaseModel):
    """Transport for an MCP server started as a subprocess.

    Attributes:
        command: The command to run (e.g. ``"npx"``).
        args: Command-line arguments passed to the server process.
        env: Environment variables set for the server process.
        cwd: Working directory for the server process.
    """

    type: Literal["stdio"] = "stdio"
    command: str
    args: list[str] = Field(default_factory=list)
    env: dict[str, Any] = Field(default_factory=dict)
    cwd: str | None = None


class RemoteTransportConfig(BaseModel):
    """Transport for an MCP server accessed over HTTP.

    Attributes:
        type: ``"sse"`` for the legacy Server-Sent Events transport,
            ``"streamable-http"`` (or its alias ``"http"``) for the
            streamable HTTP transport.
        url: The server endpoint.
        headers: HTTP headers sent with every request.
    """

    type: Literal["sse", "streamable-http", "http"] = "sse"
    url: str
    headers: dict[str, str] = Field(default_factory=dict)


TransportConfig = Annotated[
    StdioTransportConfig | RemoteTransportConfig,
    Field(discriminator="type"),
]


class ServerConfig(BaseModel):
    """A named MCP server to search.

    Names are not required to be unique; results from two servers sharing a
    name simply carry the same server name.
    """

    name: str
    transport: TransportConfig

    @property
    def is_remote(self) -> bool:
        return isinstance(self.transport, RemoteTransportConfig)

    @property
    def address(self) -> str:
        """The command line or URL used to reach the server."""
        if isinstance(self.transport, RemoteTransportConfig):
            return self.transport.url
        return " ".join([self.transport.command, *self.transport.args]).strip()

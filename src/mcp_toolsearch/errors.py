"""Exception types raised by the tool search engine.

Failures talking to a single server (``ServerError``) are normally collected
and reported alongside the results. Only when a search runs with
``continue_on_error=False`` does a failure escalate into a ``SearchError``
that aborts the whole call.
"""

from typing import Literal

ServerErrorKind = Literal["timeout", "connection", "protocol", "unsupported"]


class ToolSearchError(Exception):
    """Base class for all tool search errors."""

    pass


class ServerValidationError(ToolSearchError):
    """Raised when a server configuration is malformed."""

    def __init__(self, message: str, server_name: str = ""):
        super().__init__(message)
        self.server_name = server_name


class ServerError(ToolSearchError):
    """Raised when listing tools from one server fails."""

    def __init__(
        self,
        message: str,
        server_name: str = "",
        kind: ServerErrorKind = "connection",
    ):
        super().__init__(message)
        self.server_name = server_name
        self.kind = kind


class PatternError(ToolSearchError):
    """An invalid regular expression was supplied as a search pattern."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid search pattern '{pattern}': {reason}")
        self.pattern = pattern
        self.reason = reason


class SearchError(ToolSearchError):
    """Raised when a search is aborted because a server failed."""

    pass


class ConfigError(ToolSearchError, ValueError):
    """Raised when a configuration file cannot be parsed or validated."""

    pass

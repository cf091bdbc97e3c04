import logging
import os

from rich.console import Console
from rich.logging import RichHandler

_ROOT = "mcp_toolsearch"

DEFAULT_LOG_LEVEL = "WARNING"


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{_ROOT}.{name}")


class _ComponentFilter(logging.Filter):
    """Expose the logger name without the package prefix as ``component``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.component = record.name.removeprefix(f"{_ROOT}.")
        return True


def configure_logging(
    level: str | int | None = None,
    logger: logging.Logger | None = None,
) -> None:
    """Send tool search logs to stderr through rich.

    Args:
        level: Log level name or number. Defaults to ``LOG_LEVEL`` from the
            environment, then ``WARNING``.
        logger: Logger to configure. Defaults to the package logger.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)
    if isinstance(level, str):
        level = level.upper()

    if logger is None:
        logger = logging.getLogger(_ROOT)

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        markup=False,
    )
    handler.addFilter(_ComponentFilter())
    handler.setFormatter(logging.Formatter("[%(component)s] %(message)s"))

    logger.setLevel(level)

    for hdlr in logger.handlers[:]:
        logger.removeHandler(hdlr)

    logger.addHandler(handler)

    # One search opens a connection per server; FastMCP and the MCP SDK follow
    # our level, while per-request HTTP lines stay hidden below WARNING
    logging.getLogger("fastmcp").setLevel(level)
    logging.getLogger("mcp").setLevel(level)
    logging.getLogger("httpx").setLevel(max(logger.level, logging.WARNING))

    logger.debug("Logging configured at %s", logging.getLevelName(logger.level))

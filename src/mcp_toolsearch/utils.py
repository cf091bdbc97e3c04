import json
import os
from pathlib import Path

from pydantic import ValidationError

from mcp_toolsearch.errors import ConfigError, ServerValidationError
from mcp_toolsearch.logging import get_logger
from mcp_toolsearch.models.config import Config
from mcp_toolsearch.models.server_config import ServerConfig
from mcp_toolsearch.server_client import validate_server

logger = get_logger("utils")

DEFAULT_CONFIG_PATH = "servers.json"


def default_config_path() -> str:
    return os.getenv("TOOLSEARCH_CONFIG", DEFAULT_CONFIG_PATH)


def load_config(path: str | Path) -> Config:
    """Load a search configuration file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigError: If the file is not valid JSON or does not describe a
            valid configuration.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Could not parse config JSON: {e}") from e

    try:
        config = Config.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config: {e}") from e

    timeout = os.getenv("TOOLSEARCH_TIMEOUT")
    if timeout:
        try:
            config.search.timeout = float(timeout) if float(timeout) > 0 else None
        except ValueError:
            logger.warning(f"Ignoring invalid TOOLSEARCH_TIMEOUT value '{timeout}'")

    logger.debug(f"Loaded {len(config.servers)} servers from {path}")
    return config


def load_servers(path: str | Path) -> list[ServerConfig]:
    """Load servers from a config file and validate each of them.

    Raises:
        ServerValidationError: Naming the first invalid server.
    """
    config = load_config(path)
    for server in config.servers:
        try:
            validate_server(server)
        except ServerValidationError as e:
            raise ServerValidationError(
                f"Invalid server configuration '{server.name}': {e}", server.name
            ) from e
    return config.servers

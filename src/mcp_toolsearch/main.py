import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from mcp_toolsearch.errors import SearchError, ServerValidationError
from mcp_toolsearch.logging import configure_logging, get_logger
from mcp_toolsearch.models.config import Config
from mcp_toolsearch.models.search_options import SearchOptions, SortOrder
from mcp_toolsearch.search_builder import build_criteria, split_keywords
from mcp_toolsearch.search_criteria import SearchCriteria, SearchFields, SearchMode
from mcp_toolsearch.server_client import validate_server
from mcp_toolsearch.tool_search import SearchResult, search_tools_with_options
from mcp_toolsearch.utils import default_config_path, load_config

# Load environment variables
load_dotenv()

# Configure logging
configure_logging(os.getenv("LOG_LEVEL", "INFO"))
logger = get_logger("main")


class AppState:
    """Holds application-wide state initialised during the lifespan."""

    config: Config


state = AppState()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load the server configuration on startup."""
    state.config = load_config(default_config_path())
    logger.info(f"Application started with {len(state.config.servers)} servers")
    yield
    logger.info("Application shut down")


app = FastAPI(lifespan=lifespan)


class FieldsRequest(BaseModel):
    name: bool = True
    title: bool = True
    description: bool = True
    input_schema: bool = False


class SearchRequest(BaseModel):
    query: str | None = Field(default=None, title="Search query; mode is auto-detected")
    keywords: list[str] | None = Field(default=None, title="Keywords that must all match")
    name: str | None = Field(default=None, title="Exact tool name")
    mode: SearchMode | None = Field(default=None, title="Force a search mode")
    case_sensitive: bool = Field(default=False)
    fields: FieldsRequest | None = Field(default=None, title="Fields to search")
    min_description_length: int | None = Field(default=None, ge=0)
    limit: int | None = Field(default=None, ge=0, title="Maximum number of results")
    sort_by_tool: bool = Field(default=False, title="Sort by tool name, then server")
    timeout: float | None = Field(default=None, gt=0, title="Per-server timeout in seconds")
    continue_on_error: bool = Field(default=True)


def build_request_criteria(req: SearchRequest) -> SearchCriteria:
    if req.name is not None:
        criteria = SearchCriteria.with_name(req.name)
    elif req.mode is SearchMode.KEYWORDS:
        if req.keywords is not None:
            keywords = req.keywords
        else:
            keywords = split_keywords(req.query or "")
        criteria = SearchCriteria.with_keywords(keywords)
    elif req.mode is not None:
        criteria = SearchCriteria(query=req.query, mode=req.mode)
    else:
        criteria = build_criteria(req.query, req.keywords)

    if req.fields is not None:
        criteria = criteria.with_fields(SearchFields(**req.fields.model_dump()))
    if req.case_sensitive:
        criteria = criteria.with_case_sensitive()
    if req.min_description_length is not None:
        criteria = criteria.with_min_description_length(req.min_description_length)
    return criteria


def build_request_options(req: SearchRequest) -> SearchOptions:
    update: dict[str, Any] = {"continue_on_error": req.continue_on_error}
    if req.limit is not None:
        update["max_results"] = req.limit
    if req.timeout is not None:
        update["timeout"] = req.timeout
    if req.sort_by_tool:
        update["sort_order"] = SortOrder.TOOL_THEN_SERVER
    return SearchOptions.model_validate({**state.config.search.model_dump(), **update})


def _serialise(result: SearchResult) -> dict[str, Any]:
    return {
        "matches": [
            {
                "server_name": match.server_name,
                "tool": match.tool.model_dump(mode="json", exclude_none=True),
            }
            for match in result.matches
        ],
        "errors": result.errors,
        "warnings": result.warnings,
    }


@app.post("/search")
async def search(req: SearchRequest) -> dict[str, Any]:
    criteria = build_request_criteria(req)
    if criteria.pattern_error is not None:
        raise HTTPException(status_code=400, detail=str(criteria.pattern_error))

    try:
        result = await search_tools_with_options(
            state.config.servers, criteria, build_request_options(req)
        )
    except SearchError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return _serialise(result)


@app.get("/tools")
async def list_tools() -> dict[str, Any]:
    """List every tool from every configured server."""
    try:
        result = await search_tools_with_options(
            state.config.servers, SearchCriteria.match_all(), state.config.search
        )
    except SearchError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _serialise(result)


@app.get("/servers")
async def list_servers() -> list[dict[str, Any]]:
    """List configured servers and whether their configuration is valid."""
    servers: list[dict[str, Any]] = []
    for server in state.config.servers:
        entry: dict[str, Any] = {
            "name": server.name,
            "type": server.transport.type,
            "address": server.address,
            "valid": True,
        }
        try:
            validate_server(server)
        except ServerValidationError as e:
            entry["valid"] = False
            entry["error"] = str(e)
        servers.append(entry)
    return servers

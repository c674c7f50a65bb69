"""HTTP routes served next to the MCP endpoint in streamable-http mode."""

from starlette.requests import Request
from starlette.responses import JSONResponse

from tabelog_mcp.admin.service import get_current_config, get_stats


async def health_check(request: Request) -> JSONResponse:
    """Liveness check. Does not touch the browser."""
    return JSONResponse({"status": "healthy"})


async def api_stats(request: Request) -> JSONResponse:
    """Tool call counters, recent calls and errors, and browser session state."""
    return JSONResponse(get_stats())


async def api_config_get(request: Request) -> JSONResponse:
    """Effective configuration as resolved from the environment at startup."""
    return JSONResponse(get_current_config())

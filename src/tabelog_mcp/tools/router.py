"""MCP tool definitions and call routing for the Tabelog tools."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from mcp.server.lowlevel import Server
from mcp.types import CallToolResult, Tool

from tabelog_mcp.exceptions import UnknownToolError
from tabelog_mcp.models import TabelogSnapshotArgs, TabelogTopArgs
from tabelog_mcp.providers import ScraperProvider
from tabelog_mcp.tools.service import (
    SNAPSHOT_TOOL_NAME,
    TOP_TOOL_NAME,
    error_result,
    handle_tabelog_snapshot,
    handle_tabelog_top,
)

logger = logging.getLogger(__name__)

ToolHandler = Callable[[ScraperProvider, Any], Awaitable[CallToolResult]]

TABELOG_TOP_TOOL = Tool(
    name=TOP_TOOL_NAME,
    description=(
        "Get top-rated restaurants from Tabelog for a specific region "
        "with optional dinner price filtering"
    ),
    inputSchema=TabelogTopArgs.model_json_schema(),
)

TABELOG_SNAPSHOT_TOOL = Tool(
    name=SNAPSHOT_TOOL_NAME,
    description="Take a snapshot of the Tabelog ranking page for a specific region",
    inputSchema=TabelogSnapshotArgs.model_json_schema(),
)

TOOL_DEFINITIONS: list[Tool] = [TABELOG_TOP_TOOL, TABELOG_SNAPSHOT_TOOL]

TOOL_HANDLERS: dict[str, ToolHandler] = {
    TOP_TOOL_NAME: handle_tabelog_top,
    SNAPSHOT_TOOL_NAME: handle_tabelog_snapshot,
}


def get_handler(name: str) -> ToolHandler:
    """Look up the handler for a tool name.

    Raises:
        UnknownToolError: If no tool has this name
    """
    try:
        return TOOL_HANDLERS[name]
    except KeyError:
        raise UnknownToolError(name) from None


async def list_tools() -> list[Tool]:
    """Return the definitions of all tools offered by this server."""
    return list(TOOL_DEFINITIONS)


async def call_tool(
    provider: ScraperProvider,
    name: str,
    arguments: dict[str, Any] | None,
) -> CallToolResult:
    """Route a tool call to its handler.

    Args:
        provider: Scraper provider the handlers delegate to
        name: Requested tool name
        arguments: Raw tool arguments

    Returns:
        The handler's CallToolResult, or an error envelope for unknown tools
    """
    try:
        handler = get_handler(name)
    except UnknownToolError as e:
        logger.warning(str(e))
        return error_result(str(e))

    logger.debug(f"Calling tool {name} with arguments {arguments}")
    return await handler(provider, arguments)


def register_tabelog_tools(server: Server, provider: ScraperProvider) -> None:
    """Register the Tabelog tools on a low-level MCP server.

    The SDK's own input schema check is turned off so that malformed
    arguments reach the argument models and come back as tool errors.

    Args:
        server: MCP server instance to register handlers on
        provider: Scraper provider the tools delegate to
    """

    @server.list_tools()
    async def _list_tools() -> list[Tool]:
        return await list_tools()

    @server.call_tool(validate_input=False)
    async def _call_tool(name: str, arguments: dict[str, Any]) -> CallToolResult:
        return await call_tool(provider, name, arguments)

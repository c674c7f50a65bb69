"""MCP Tabelog tools and business logic.

This module provides the scraping functionality exposed as MCP tools:
- tabelog_top: Top-rated restaurants for a region
- tabelog_snapshot: Full-page snapshot of a region's ranking page

The tools module follows a router -> service pattern:
- router.py: MCP tool definitions, name routing and registration
- service.py: Argument validation, defaults and result envelopes
"""

from tabelog_mcp.tools.router import (
    TOOL_DEFINITIONS,
    call_tool,
    list_tools,
    register_tabelog_tools,
)
from tabelog_mcp.tools.service import (
    error_result,
    handle_tabelog_snapshot,
    handle_tabelog_top,
    parse_arguments,
    text_result,
)

__all__ = [
    # Routing
    "TOOL_DEFINITIONS",
    "call_tool",
    "list_tools",
    "register_tabelog_tools",
    # Service functions
    "handle_tabelog_top",
    "handle_tabelog_snapshot",
    "parse_arguments",
    "text_result",
    "error_result",
]

"""MCP server for top-rated Tabelog restaurants."""

__version__ = "0.2.0"

"""Error types raised by the Tabelog MCP server."""

from __future__ import annotations


class TabelogError(Exception):
    """Base class for all Tabelog MCP errors."""


class ArgumentError(TabelogError, ValueError):
    """Tool arguments do not have the expected shape."""


class NavigationError(TabelogError):
    """A page failed to load or the restaurant list never appeared."""


class ExtractionFieldError(TabelogError):
    """A single listing entry could not be turned into a record."""


class UnknownToolError(TabelogError, LookupError):
    """A tool call named a tool this server does not offer."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")

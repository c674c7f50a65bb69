"""Core infrastructure and shared utilities.

This module provides the single source of truth for the provider instance
shared by the server shell and the tools modules.
"""

from tabelog_mcp.core.providers import (
    default_provider,
    get_provider,
)

__all__ = [
    "default_provider",
    "get_provider",
]

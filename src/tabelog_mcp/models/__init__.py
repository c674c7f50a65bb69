"""Pydantic data models for Tabelog scraping and tool calls.

This module defines the data structures used throughout the server:
- Scrape results (Restaurant, ListingResult, SnapshotResult)
- Tool arguments (TabelogTopArgs, TabelogSnapshotArgs, PriceRange)
- Defaulted requests handed to providers (ListingRequest)

All models use Pydantic v2 for validation and serialization, ensuring
data integrity across the MCP tool interface.
"""

from tabelog_mcp.models.arguments import (
    ListingRequest,
    PriceRange,
    TabelogSnapshotArgs,
    TabelogTopArgs,
)
from tabelog_mcp.models.restaurants import (
    ListingResult,
    Restaurant,
    SnapshotResult,
)

__all__ = [
    # Result models
    "Restaurant",
    "ListingResult",
    "SnapshotResult",
    # Argument models
    "PriceRange",
    "TabelogTopArgs",
    "TabelogSnapshotArgs",
    "ListingRequest",
]

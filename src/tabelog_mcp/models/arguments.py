"""Pydantic models for tool call arguments.

Validation here is structural: fields must have the right JSON types. Default
filling and clamping happen afterwards in `to_request()` / `resolved_region()`
so that the advertised input schema stays permissive about `limit`.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from tabelog_mcp.config import DEFAULT_LIMIT, DEFAULT_REGION, MAX_LIMIT


class PriceRange(BaseModel):
    """Dinner budget filter in JPY."""

    min: StrictInt | None = Field(default=None, ge=0, description="Minimum dinner price in JPY")
    max: StrictInt | None = Field(default=None, ge=0, description="Maximum dinner price in JPY")

    def overlaps(self, low: int, high: int | None) -> bool:
        """Check whether a budget bracket overlaps this range.

        Args:
            low: Lower end of the bracket
            high: Upper end of the bracket, or None when open-ended

        Returns:
            True if any price in the bracket falls inside the range
        """
        if self.max is not None and low > self.max:
            return False
        if self.min is not None and high is not None and high < self.min:
            return False
        return True


@dataclass(frozen=True)
class ListingRequest:
    """Fully defaulted arguments for a listing scrape."""

    region: str
    limit: int
    price_range: PriceRange | None = None


class TabelogTopArgs(BaseModel):
    """Arguments accepted by the tabelog_top tool."""

    model_config = ConfigDict(populate_by_name=True)

    region: StrictStr = Field(
        default=DEFAULT_REGION,
        description="Region slug (e.g., 'kyoto', 'tokyo', 'osaka')",
    )
    limit: StrictInt = Field(
        default=DEFAULT_LIMIT,
        ge=1,
        description=f"Number of restaurants to return (values above {MAX_LIMIT} are capped)",
    )
    price_range: PriceRange | None = Field(
        default=None,
        alias="priceRange",
        description="Price range filter for dinner prices (in JPY)",
    )

    def to_request(self, max_limit: int = MAX_LIMIT) -> ListingRequest:
        """Fill defaults and clamp the limit.

        Args:
            max_limit: Upper bound for the number of restaurants

        Returns:
            ListingRequest ready to hand to a provider
        """
        return ListingRequest(
            region=self.region.strip() or DEFAULT_REGION,
            limit=min(self.limit, max_limit),
            price_range=self.price_range,
        )


class TabelogSnapshotArgs(BaseModel):
    """Arguments accepted by the tabelog_snapshot tool."""

    region: StrictStr = Field(
        default=DEFAULT_REGION,
        description="Region slug (e.g., 'kyoto', 'tokyo', 'osaka')",
    )

    def resolved_region(self) -> str:
        return self.region.strip() or DEFAULT_REGION

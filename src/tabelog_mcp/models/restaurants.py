"""Pydantic models for scraped restaurant listings and page snapshots."""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field


class Restaurant(BaseModel):
    """One restaurant row from a ranked Tabelog listing."""

    name: str = Field(description="Restaurant name")
    rating: str = Field(description="Tabelog rating as displayed, e.g. '4.52'")
    url: str = Field(description="Absolute URL of the restaurant page")
    cuisine: str = Field(description="Genre text, e.g. 'Kaiseki'")
    price: str = Field(description="Budget values joined with ' / '")
    location: str = Field(description="Area or nearest station text")
    rank: int = Field(ge=1, description="1-based position within the returned list")


class ListingResult(BaseModel):
    """Response model for the top-restaurants tool."""

    region: str = Field(description="Region slug that was scraped")
    restaurants: list[Restaurant] = Field(
        default_factory=list, description="Restaurants in rank order"
    )

    @computed_field(description="Number of restaurants returned")  # type: ignore[prop-decorator]
    @property
    def count(self) -> int:
        return len(self.restaurants)


class SnapshotResult(BaseModel):
    """Response model for the page snapshot tool."""

    success: bool = Field(description="Whether the page loaded and was captured")
    message: str = Field(description="Human-readable outcome")
    url: str = Field(description="The listing URL that was requested")

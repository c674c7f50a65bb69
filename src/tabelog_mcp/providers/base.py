"""Base provider interface for Tabelog scraping."""

from __future__ import annotations

from abc import ABC, abstractmethod

from tabelog_mcp.models import ListingResult, PriceRange, SnapshotResult


class ScraperProvider(ABC):
    """Abstract base class for scraper providers.

    A provider owns whatever long-lived resources it needs (such as a browser
    session) and must tolerate concurrent calls to every method.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create the provider's shared resources if they do not exist yet."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the provider's shared resources. Safe to call repeatedly."""
        pass

    @abstractmethod
    async def scrape_restaurants(
        self,
        region: str,
        limit: int,
        price_range: PriceRange | None = None,
    ) -> ListingResult:
        """Scrape the top-rated restaurants for a region.

        Args:
            region: Region slug (e.g. 'kyoto')
            limit: Maximum number of restaurants to return
            price_range: Optional dinner budget filter

        Returns:
            ListingResult with restaurants in rank order

        Raises:
            NavigationError: If the listing page cannot be loaded
        """
        pass

    @abstractmethod
    async def take_snapshot(self, region: str) -> SnapshotResult:
        """Capture a full-page snapshot of a region's ranking page.

        Never raises; failures are reported through `SnapshotResult.success`.

        Args:
            region: Region slug (e.g. 'kyoto')

        Returns:
            SnapshotResult describing the outcome
        """
        pass

"""Scraper providers for different scraping backends."""

from tabelog_mcp.providers.base import ScraperProvider
from tabelog_mcp.providers.playwright_provider import PlaywrightProvider

__all__ = ["ScraperProvider", "PlaywrightProvider"]

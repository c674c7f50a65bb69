"""Provider initialization for the Tabelog MCP server."""

from tabelog_mcp.providers import PlaywrightProvider, ScraperProvider

# Initialize default provider
# The browser is not started until the first tool call or client handshake
default_provider: ScraperProvider = PlaywrightProvider()


def get_provider() -> ScraperProvider:
    """Get the process-wide scraper provider.

    Returns:
        The shared provider instance
    """
    return default_provider

"""Tabelog scraper provider backed by a shared headless Chromium session."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import quote

import anyio.to_thread
from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from tabelog_mcp.config import (
    BASE_URL,
    HEADLESS,
    LISTING_PATH,
    SNAPSHOT_DIR,
    USER_AGENT,
    WAIT_TIMEOUT_MS,
)
from tabelog_mcp.exceptions import NavigationError
from tabelog_mcp.extraction import LISTING_SELECTOR, extract_restaurants
from tabelog_mcp.models import ListingResult, PriceRange, SnapshotResult
from tabelog_mcp.providers.base import ScraperProvider

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_LAUNCH_ARGS = ("--no-sandbox", "--disable-dev-shm-usage")


class PlaywrightProvider(ScraperProvider):
    """Scrapes Tabelog with one Chromium browser shared by all tool calls.

    Every operation opens its own page (and with it an isolated browser
    context) and closes it when done, so concurrent calls never see each
    other's DOM. The browser itself is created lazily and at most once.
    """

    def __init__(
        self,
        base_url: str = BASE_URL,
        user_agent: str = USER_AGENT,
        wait_timeout_ms: int = WAIT_TIMEOUT_MS,
        headless: bool = HEADLESS,
        snapshot_dir: str | Path | None = SNAPSHOT_DIR,
        launch_args: tuple[str, ...] = DEFAULT_LAUNCH_ARGS,
    ) -> None:
        """Initialize the provider without starting a browser.

        Args:
            base_url: Site origin (default: https://tabelog.com)
            user_agent: User-Agent header sent with page requests
            wait_timeout_ms: How long to wait for the restaurant list (default: 10000)
            headless: Run Chromium headless (default: True)
            snapshot_dir: Directory to write snapshot PNGs to (default: discard them)
            launch_args: Extra Chromium command line flags
        """
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.wait_timeout_ms = wait_timeout_ms
        self.headless = headless
        self.snapshot_dir = Path(snapshot_dir) if snapshot_dir else None
        self.launch_args = list(launch_args)

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        # Serializes session creation and teardown
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._browser is not None

    def listing_url(self, region: str) -> str:
        """Build the rating-sorted ranking URL for a region."""
        return self.base_url + LISTING_PATH.format(region=quote(region, safe=""))

    async def initialize(self) -> None:
        """Launch the shared browser if it is not running yet.

        Concurrent callers wait on the same lock, and whoever acquires it
        second finds the browser already set and returns.
        """
        if self._browser is not None:
            return

        async with self._lock:
            if self._browser is not None:
                return

            playwright = await async_playwright().start()
            try:
                browser = await playwright.chromium.launch(
                    headless=self.headless,
                    args=self.launch_args,
                )
            except Exception:
                await playwright.stop()
                raise

            self._playwright = playwright
            self._browser = browser
            logger.info(f"Browser session started (headless={self.headless})")

    async def close(self) -> None:
        """Close the shared browser and stop the Playwright driver."""
        async with self._lock:
            browser, playwright = self._browser, self._playwright
            self._browser = None
            self._playwright = None

            if browser is None and playwright is None:
                return

            try:
                if browser is not None:
                    await browser.close()
            finally:
                if playwright is not None:
                    await playwright.stop()
            logger.info("Browser session closed")

    async def _ensure_browser(self) -> Browser:
        await self.initialize()
        browser = self._browser
        if browser is None:
            raise NavigationError("Browser session was closed")
        return browser

    @asynccontextmanager
    async def _open_page(self) -> AsyncIterator[Page]:
        """Open a fresh page in the shared browser and always close it."""
        browser = await self._ensure_browser()
        page = await browser.new_page()
        try:
            await page.set_extra_http_headers({"User-Agent": self.user_agent})
            yield page
        finally:
            await page.close()

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
            NavigationError: If the page fails to load or the list never appears
        """
        url = self.listing_url(region)

        async with self._open_page() as page:
            try:
                await page.goto(url, wait_until="domcontentloaded")
            except PlaywrightError as e:
                raise NavigationError(f"Failed to load {url}: {e}") from e

            try:
                await page.wait_for_selector(
                    LISTING_SELECTOR, state="attached", timeout=self.wait_timeout_ms
                )
            except PlaywrightTimeoutError as e:
                raise NavigationError(
                    f"Timed out after {self.wait_timeout_ms}ms waiting for restaurant list at {url}"
                ) from e
            except PlaywrightError as e:
                raise NavigationError(f"Restaurant list unavailable at {url}: {e}") from e

            html = await page.content()

        # Parsing a full ranking page is CPU-bound
        restaurants = await anyio.to_thread.run_sync(
            extract_restaurants, html, limit, self.base_url, price_range
        )
        logger.info(f"Scraped {len(restaurants)} restaurants for region {region!r}")

        return ListingResult(region=region, restaurants=restaurants)

    async def take_snapshot(self, region: str) -> SnapshotResult:
        """Capture a full-page screenshot of a region's ranking page.

        The image is written to `snapshot_dir` when one is configured and
        discarded otherwise. Errors are reported in the result, never raised.

        Args:
            region: Region slug (e.g. 'kyoto')

        Returns:
            SnapshotResult describing the outcome
        """
        url = self.listing_url(region)

        try:
            async with self._open_page() as page:
                await page.goto(url, wait_until="networkidle")
                image = await page.screenshot(full_page=True)
            await anyio.to_thread.run_sync(self._save_snapshot, region, image)
        except Exception as e:
            logger.error(f"Snapshot failed for {url}: {type(e).__name__}: {e}")
            return SnapshotResult(
                success=False,
                message=f"Error taking snapshot: {e}",
                url=url,
            )

        return SnapshotResult(
            success=True,
            message=f"Snapshot taken for {region} region. Page loaded successfully.",
            url=url,
        )

    def _save_snapshot(self, region: str, image: bytes) -> Path | None:
        if self.snapshot_dir is None:
            return None

        self.snapshot_dir.mkdir(parents=True, exist_ok=True)
        slug = re.sub(r"[^\w-]", "_", region) or "region"
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        path = self.snapshot_dir / f"{slug}-{timestamp}.png"
        path.write_bytes(image)
        logger.info(f"Snapshot saved to {path}")
        return path

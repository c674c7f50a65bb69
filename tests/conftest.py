"""Pytest configuration and fixtures for tabelog-mcp tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock, patch

import pytest

from tabelog_mcp.metrics import reset_metrics
from tabelog_mcp.models import ListingResult, Restaurant, SnapshotResult
from tabelog_mcp.providers import ScraperProvider


@pytest.fixture(autouse=True)
def fresh_metrics() -> Iterator[None]:
    """Start every test with empty global metrics."""
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture
def listing_html() -> str:
    """Ranking page with three entries of varying completeness."""
    return """
    <html>
    <head><title>Kyoto Restaurant Ranking</title></head>
    <body>
    <div class="rstlist-info">
        <div class="list-rst">
            <div class="list-rst__rst-name">
                <a class="list-rst__rst-name-target" href="/en/kyoto/A2601/A260301/26002335/">
                    Gion Sasaki
                </a>
            </div>
            <div class="list-rst__area-genre"> Gion-Shijo Sta. 250m / Kaiseki </div>
            <span class="list-rst__rating-val">4.52</span>
            <span class="c-rating-v3__val">￥30,000～￥39,999</span>
            <span class="c-rating-v3__val">-</span>
        </div>
        <div class="list-rst">
            <div class="list-rst__rst-name">
                <a href="https://tabelog.com/en/kyoto/A2601/A260202/26000795/">Tominokoji Yamagishi</a>
            </div>
            <div class="list-rst__area-genre">Kawaramachi</div>
            <span class="list-rst__rating-val"> 4.41 </span>
            <span class="c-rating-v3__val">-</span>
            <span class="c-rating-v3__val">¥3,000</span>
            <span class="c-rating-v3__val"></span>
            <span class="c-rating-v3__val">¥5,000</span>
        </div>
        <div class="list-rst">
            <div class="list-rst__area-genre"></div>
        </div>
    </div>
    </body>
    </html>
    """


@pytest.fixture
def make_listing_html() -> Callable[..., str]:
    """Build a ranking page with numbered entries and optional dinner prices."""

    def _make(count: int, dinner_prices: list[str] | None = None) -> str:
        entries = []
        for i in range(1, count + 1):
            dinner = dinner_prices[i - 1] if dinner_prices else "-"
            entries.append(
                f"""
                <div class="list-rst">
                    <div class="list-rst__rst-name"><a href="/en/kyoto/A{i:04d}/">Restaurant {i}</a></div>
                    <div class="list-rst__area-genre">Area {i} / Genre {i}</div>
                    <span class="list-rst__rating-val">4.{i:02d}</span>
                    <span class="c-rating-v3__val">{dinner}</span>
                </div>
                """
            )
        return f"<html><body>{''.join(entries)}</body></html>"

    return _make


@pytest.fixture
def sample_listing() -> ListingResult:
    """A two-restaurant listing result."""
    return ListingResult(
        region="kyoto",
        restaurants=[
            Restaurant(
                name="Gion Sasaki",
                rating="4.52",
                url="https://tabelog.com/en/kyoto/A2601/A260301/26002335/",
                cuisine="Kaiseki",
                price="￥30,000～￥39,999",
                location="Gion-Shijo Sta. 250m",
                rank=1,
            ),
            Restaurant(
                name="Tominokoji Yamagishi",
                rating="4.41",
                url="https://tabelog.com/en/kyoto/A2601/A260202/26000795/",
                cuisine="N/A",
                price="¥3,000 / ¥5,000",
                location="Kawaramachi",
                rank=2,
            ),
        ],
    )


@pytest.fixture
def mock_provider(sample_listing: ListingResult) -> Mock:
    """Scraper provider double with async methods."""
    provider = Mock(spec=ScraperProvider)
    provider.initialize = AsyncMock()
    provider.close = AsyncMock()
    provider.scrape_restaurants = AsyncMock(return_value=sample_listing)
    provider.take_snapshot = AsyncMock(
        return_value=SnapshotResult(
            success=True,
            message="Snapshot taken for kyoto region. Page loaded successfully.",
            url="https://tabelog.com/en/kyoto/rstLst/RC/?SrtT=rt",
        )
    )
    return provider


@pytest.fixture
def mock_page(listing_html: str) -> Mock:
    """Playwright page double serving the listing fixture."""
    page = Mock()
    page.goto = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.set_extra_http_headers = AsyncMock()
    page.content = AsyncMock(return_value=listing_html)
    page.screenshot = AsyncMock(return_value=b"\x89PNG\r\n\x1a\n")
    page.close = AsyncMock()
    return page


@pytest.fixture
def mock_playwright(mock_page: Mock) -> Iterator[SimpleNamespace]:
    """Patch async_playwright so no real browser is launched."""
    browser = Mock()
    browser.new_page = AsyncMock(return_value=mock_page)
    browser.close = AsyncMock()

    playwright = Mock()
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()

    manager = Mock()
    manager.start = AsyncMock(return_value=playwright)

    with patch(
        "tabelog_mcp.providers.playwright_provider.async_playwright",
        return_value=manager,
    ) as factory:
        yield SimpleNamespace(
            factory=factory,
            manager=manager,
            playwright=playwright,
            browser=browser,
            page=mock_page,
        )

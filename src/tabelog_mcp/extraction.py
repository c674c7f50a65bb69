"""Extraction of restaurant records from Tabelog listing HTML."""

from __future__ import annotations

import logging
import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from tabelog_mcp.config import BASE_URL
from tabelog_mcp.exceptions import ExtractionFieldError
from tabelog_mcp.models import PriceRange, Restaurant

logger = logging.getLogger(__name__)

# Listing page selectors
LISTING_SELECTOR = ".list-rst"
NAME_SELECTOR = ".list-rst__rst-name a"
RATING_SELECTOR = ".list-rst__rating-val"
AREA_GENRE_SELECTOR = ".list-rst__area-genre"
PRICE_SELECTOR = ".c-rating-v3__val"

MISSING = "N/A"
AREA_GENRE_SEPARATOR = " / "
PRICE_SEPARATOR = " / "
PRICE_PLACEHOLDER = "-"

_NUMBER_RE = re.compile(r"\d[\d,]*")
_OPEN_MARKERS = ("～", "~", "-")


def clean_text(text: str | None) -> str:
    """Trim surrounding whitespace; inner spacing is kept as scraped."""
    if not text:
        return ""
    return text.strip()


def _select_text(entry: Tag, selector: str) -> str:
    element = entry.select_one(selector)
    if element is None:
        return ""
    return clean_text(element.get_text())


def resolve_url(href: str | None, base_url: str = BASE_URL) -> str:
    """Make a listing link absolute.

    Args:
        href: Raw href attribute value
        base_url: Site origin used for relative links

    Returns:
        Absolute URL, or "N/A" if there is no link
    """
    href = clean_text(href)
    if not href:
        return MISSING
    if href.startswith("http"):
        return href
    return urljoin(base_url + "/", href)


def split_area_genre(text: str) -> tuple[str, str]:
    """Split the combined "area / genre" text into (location, cuisine).

    Examples:
        >>> split_area_genre("Gion / Kaiseki")
        ('Gion', 'Kaiseki')
        >>> split_area_genre("Gion")
        ('Gion', 'N/A')
        >>> split_area_genre("")
        ('N/A', 'N/A')
    """
    text = clean_text(text)
    if not text:
        return MISSING, MISSING

    parts = text.split(AREA_GENRE_SEPARATOR)
    location = parts[0].strip() or MISSING
    if len(parts) >= 2:
        return location, parts[1].strip() or MISSING
    return location, MISSING


def join_prices(fragments: list[str]) -> str:
    """Join budget fragments, dropping empty values and the "-" placeholder."""
    prices = [clean_text(fragment) for fragment in fragments]
    prices = [price for price in prices if price and price != PRICE_PLACEHOLDER]
    if not prices:
        return MISSING
    return PRICE_SEPARATOR.join(prices)


def parse_price_bracket(text: str) -> tuple[int, int | None] | None:
    """Parse a budget bracket such as "￥10,000～￥14,999".

    Returns:
        (low, high) in JPY where high is None for open-ended brackets like
        "￥30,000～", or None if the text holds no price
    """
    text = clean_text(text)
    numbers = [int(match.replace(",", "")) for match in _NUMBER_RE.findall(text)]
    if not numbers:
        return None
    if len(numbers) >= 2:
        return numbers[0], numbers[1]
    if text.startswith(_OPEN_MARKERS):
        return 0, numbers[0]
    if text.endswith(_OPEN_MARKERS):
        return numbers[0], None
    return numbers[0], numbers[0]


def matches_price_range(entry: Tag, price_range: PriceRange) -> bool:
    """Check an entry's dinner budget (the first budget value) against a range."""
    dinner = entry.select_one(PRICE_SELECTOR)
    if dinner is None:
        return False
    bracket = parse_price_bracket(dinner.get_text())
    if bracket is None:
        return False
    return price_range.overlaps(*bracket)


def parse_entry(entry: Tag, rank: int, base_url: str = BASE_URL) -> Restaurant:
    """Build a Restaurant from one listing entry.

    Raises:
        ExtractionFieldError: If the entry cannot be turned into a record
    """
    link = entry.select_one(NAME_SELECTOR)
    name = clean_text(link.get_text()) if link is not None else ""
    href = link.get("href") if link is not None else None
    if isinstance(href, list):
        href = " ".join(href)

    location, cuisine = split_area_genre(_select_text(entry, AREA_GENRE_SELECTOR))
    prices = [element.get_text() for element in entry.select(PRICE_SELECTOR)]

    try:
        return Restaurant(
            name=name or MISSING,
            rating=_select_text(entry, RATING_SELECTOR) or MISSING,
            url=resolve_url(href, base_url),
            cuisine=cuisine,
            price=join_prices(prices),
            location=location,
            rank=rank,
        )
    except ValueError as e:
        raise ExtractionFieldError(f"Invalid restaurant fields: {e}") from e


def parse_entry_safe(
    entry: Tag, index: int, rank: int, base_url: str = BASE_URL
) -> Restaurant | None:
    """Parse one entry, logging and skipping it on failure.

    Args:
        entry: The listing entry element
        index: 1-based position of the entry on the page (for logging)
        rank: Rank to assign if the entry parses
        base_url: Site origin used for relative links

    Returns:
        The parsed Restaurant, or None if the entry was skipped
    """
    try:
        return parse_entry(entry, rank, base_url)
    except (ExtractionFieldError, AttributeError, ValueError) as e:
        logger.warning(f"Error extracting restaurant {index}: {type(e).__name__}: {e}")
        return None


def extract_restaurants(
    html: str,
    limit: int,
    base_url: str = BASE_URL,
    price_range: PriceRange | None = None,
) -> list[Restaurant]:
    """Extract up to `limit` restaurants from a ranked listing page.

    Without a price range only the first `limit` entries are considered. With
    one, entries are scanned in page order and those whose dinner budget falls
    outside the range are passed over until `limit` restaurants are collected.

    Args:
        html: Listing page HTML
        limit: Maximum number of restaurants to return
        base_url: Site origin used for relative links
        price_range: Optional dinner budget filter

    Returns:
        Restaurants ranked 1..n in page order
    """
    soup = BeautifulSoup(html, "lxml")
    entries = soup.select(LISTING_SELECTOR)
    if price_range is None:
        entries = entries[:limit]

    restaurants: list[Restaurant] = []
    for index, entry in enumerate(entries, start=1):
        if len(restaurants) >= limit:
            break
        if price_range is not None and not matches_price_range(entry, price_range):
            continue

        restaurant = parse_entry_safe(entry, index, len(restaurants) + 1, base_url)
        if restaurant is not None:
            restaurants.append(restaurant)

    logger.debug(f"Extracted {len(restaurants)} of {len(entries)} listing entries")
    return restaurants

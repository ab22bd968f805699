"""
================================================================================
Catalog Listing Extractor
================================================================================
Created     : 2026-10-17
Description :
    Reads summary records (title, price, link, image) from a category or
    search results page. Each product card is resolved through a short list
    of selectors; cards without both a title and a price are discarded, and
    repeated titles are collapsed (first occurrence wins).

    Two card layouts are known. The product anchor layout is tried first;
    the tile layout is used when the anchors yield nothing.

Usage:
    records = list_candidates(html, limit=20, base_url="https://store.playstation.com/en-rs/category/games")
"""

from colorama import Style  # For coloring the terminal
from dataclasses import dataclass  # For card layout definitions
from extraction import parse_html  # For parsing HTML content
from records import ListingRecord  # For listing output records
from terminal import BackgroundColors, verbose_output  # For terminal output
from text_utils import UNKNOWN, element_text, is_meaningful, normalize_text  # For text cleaning
from typing import Any, List  # For type hints
from urllib.parse import urljoin  # For resolving relative links


DEFAULT_LISTING_LIMIT = 20  # Cards read per listing pass


@dataclass(frozen=True)
class CardLayout:
    """
    Selectors describing one product card layout.
    """

    name: str
    card_selector: str
    title_selector: str
    price_selector: str
    image_selector: str = "img"


PRODUCT_ANCHOR_LAYOUT = CardLayout(
    name="product-anchor",
    card_selector='a[href*="/product/"]',  # Anchors pointing at detail pages
    title_selector='span[data-qa*="title"], h3, .product-title, [class*="title"]',
    price_selector='span[data-qa*="price"], .price, [class*="price"]',
)  # Layout of the regular category and search grids

TILE_LAYOUT = CardLayout(
    name="tile",
    card_selector='[class*="product-tile"], [class*="game-tile"], a[href*="/product/"]',  # Tiles, then plain anchors
    title_selector='span, h3, [class*="title"]',
    price_selector='[class*="price"], span[data-qa*="price"]',
)  # Layout of the curated category pages

CARD_LAYOUTS = (PRODUCT_ANCHOR_LAYOUT, TILE_LAYOUT)  # Layouts in the order they are tried


def _card_link(card: Any, base_url: str) -> str:
    anchor = card if card.name == "a" else card.find_parent("a") or card.find("a")  # The card itself or its closest anchor
    href = normalize_text(anchor.get("href")) if anchor is not None else ""  # Raw link
    return urljoin(base_url, href) if href else UNKNOWN  # Absolute link or the sentinel


def _card_image(card: Any, layout: CardLayout, base_url: str) -> str:
    image = card.select_one(layout.image_selector)  # First image inside the card
    src = normalize_text(image.get("src")) if image is not None else ""  # Raw source
    return urljoin(base_url, src) if src else UNKNOWN  # Absolute source or the sentinel


def read_cards(soup: Any, layout: CardLayout, base_url: str) -> List[ListingRecord]:
    """
    Reads every usable card of one layout.

    :param soup: BeautifulSoup object of the catalog page
    :param layout: CardLayout to apply
    :param base_url: Page address used to resolve relative links
    :return: ListingRecords in page order (not deduplicated)
    """

    records = []  # Usable cards in page order
    for card in soup.select(layout.card_selector):  # Every product card
        title = element_text(card.select_one(layout.title_selector)) or UNKNOWN  # Card title
        price = element_text(card.select_one(layout.price_selector)) or UNKNOWN  # Card price
        if not is_meaningful(title) and not is_meaningful(price):  # Nothing to report
            continue  # Discard the card
        records.append(ListingRecord(title=title, price=price, link=_card_link(card, base_url), image=_card_image(card, layout, base_url)))
    return records  # Return the usable cards


def dedupe_by_title(records: List[ListingRecord]) -> List[ListingRecord]:
    """
    Collapses records with identical titles, keeping the first one.

    Untitled cards are compared by link instead, so distinct price-only games
    are not merged under the "N/A" title.

    :param records: Records in page order
    :return: Records with distinct titles in page order
    """

    seen = set()  # Titles already kept
    unique = []  # Records with distinct titles
    for record in records:  # Walk in page order
        key = record.title if is_meaningful(record.title) else (UNKNOWN, record.link)  # Untitled cards are identified by their link
        if key in seen:  # Same game listed again
            continue  # Keep the first occurrence
        seen.add(key)  # Remember the game
        unique.append(record)  # Keep the record
    return unique  # Return the distinct records


def list_candidates(html: str, limit: int = DEFAULT_LISTING_LIMIT, base_url: str = "") -> List[ListingRecord]:
    """
    Reads up to `limit` distinct product cards from a catalog page.

    :param html: Rendered HTML snapshot of the catalog page
    :param limit: Maximum number of records returned
    :param base_url: Page address used to resolve relative links
    :return: ListingRecords in page order, deduplicated by title and capped at limit
    """

    if limit <= 0:  # Nothing requested
        return []  # Return an empty listing

    soup = parse_html(html)  # Parse the catalog page once
    for layout in CARD_LAYOUTS:  # Try each known layout in order
        records = dedupe_by_title(read_cards(soup, layout, base_url))  # Usable, distinct cards
        if records:  # This layout matched the page
            verbose_output(f"{BackgroundColors.GREEN}Read {BackgroundColors.CYAN}{len(records)}{BackgroundColors.GREEN} cards with the {BackgroundColors.CYAN}{layout.name}{BackgroundColors.GREEN} layout{Style.RESET_ALL}")
            return records[:limit]  # Cap after filtering and deduplication
    return []  # No layout matched

"""
================================================================================
Structured Extraction Engine
================================================================================
Created     : 2026-10-17
Description :
    Reads the facts of a game detail page from a rendered HTML snapshot.

    Every scalar field is described by a declarative `FieldSpec` and resolved
    by a single function, `resolve_field`, through explicit tiers:

        1. CSS selectors, in priority order (first element per selector,
           first non-empty text that is not "N/A").
        2. Meta tags (`name=` or `property=`).
        3. The first JSON-LD block of the page.
        4. None.

    Prices go through the dedicated pipeline in price_resolver.py. Genres and
    the hero image have their own small readers.

    Extraction never raises: missing data becomes None (or "N/A" for title,
    price, description and rating), never an exception.

Usage:
    details = extract_game_details(html, "https://store.playstation.com/en-rs/product/...")
    print(details.title, details.price)

Dependencies:
    - beautifulsoup4
    - lxml
"""

import json  # For parsing JSON-LD blocks
from bs4 import BeautifulSoup  # For parsing HTML content
from colorama import Style  # For coloring the terminal
from dataclasses import dataclass, field  # For field specs and extraction results
from price_resolver import PriceResolution, resolve_price  # For the price pipeline
from terminal import BackgroundColors, verbose_output  # For terminal output
from text_utils import UNKNOWN, element_text, is_meaningful, normalize_text, truncate_text  # For text cleaning
from typing import Any, Dict, List, Optional, Sequence  # For type hints
from urllib.parse import urljoin  # For resolving relative image addresses


# Extraction Constants:
DESCRIPTION_MAX_LENGTH = 1000  # Maximum number of description characters kept
JSON_LD_SELECTOR = 'script[type="application/ld+json"]'  # Structured data blocks
GENRE_SELECTOR = '[data-qa*="genre"], [class*="genre"]'  # Genre labels
IMAGE_SELECTOR = 'img[data-qa="game-overview#hero-image"], img[class*="hero"], img[class*="product-image"]'  # Hero or product image
IMAGE_META_NAMES = ("og:image", "twitter:image")  # Meta tags carrying the share image


@dataclass(frozen=True)
class FieldSpec:
    """
    Declarative lookup for one scalar field.

    :param name: Field name in the extracted details
    :param selectors: CSS selectors in priority order
    :param meta_names: Meta tag names or properties, in priority order
    :param json_ld_keys: Keys read from the JSON-LD block, in priority order
    :param max_length: Optional character cap applied to the resolved text
    """

    name: str
    selectors: Sequence[str] = ()
    meta_names: Sequence[str] = ()
    json_ld_keys: Sequence[str] = ()
    max_length: Optional[int] = None


# Field Specs Dictionary:
FIELD_SPECS = {
    "title": FieldSpec(
        name="title",
        selectors=(
            'h1[data-qa="mfe-game-title#name"]',  # Store game title heading
            "h1.pdp-product-name",  # Legacy detail page heading
            'h1[class*="product-name"]',  # Product name heading by partial class
            'h1[data-qa*="product-name"]',  # Product name heading by partial marker
            "h1",  # Any primary heading
            '[data-qa="product-name"]',  # Product name marker on any element
            ".product-title",  # Generic product title
        ),
        meta_names=("og:title", "twitter:title", "title"),
        json_ld_keys=("name", "headline"),
    ),
    "original_price": FieldSpec(
        name="original_price",
        selectors=(
            '[data-qa="mfeCtaMain#offer0#originalPrice"]',  # Struck-through price of the main offer
            ".price-display__strikethrough",  # Price display strikethrough
            '[class*="original-price"]',  # Original price by partial class
            '[class*="was-price"]',  # "Was" price by partial class
            '[class*="strikethrough"]',  # Any strikethrough price
        ),
    ),
    "discount": FieldSpec(
        name="discount",
        selectors=(
            '[data-qa="mfeCtaMain#offer0#discountBadge"]',  # Discount badge of the main offer
            '[class*="discount-badge"]',  # Discount badge by partial class
            '[class*="discount"]',  # Any discount element
            '[class*="sale-badge"]',  # Sale badge
            '[class*="save"]',  # "Save x%" label
        ),
    ),
    "description": FieldSpec(
        name="description",
        selectors=(
            '[data-qa="mfe-game-overview#description"]',  # Game overview description
            '[data-qa*="description"]',  # Any description marker
            ".pdp-product-description",  # Legacy detail page description
            '[class*="product-description"]',  # Product description by partial class
            '[class*="description"] p',  # Paragraph inside a description block
            'p[class*="description"]',  # Description paragraph
        ),
        meta_names=("description", "og:description"),
        json_ld_keys=("description",),
        max_length=DESCRIPTION_MAX_LENGTH,
    ),
    "rating": FieldSpec(
        name="rating",
        selectors=(
            '[data-qa="mfe-star-rating#overall-rating"]',  # Overall star rating
            '[data-qa*="rating"]',  # Any rating marker
            '[class*="rating"]',  # Rating by partial class
            '[class*="star-rating"]',  # Star rating by partial class
            '[aria-label*="rating" i]',  # Accessible rating label
        ),
    ),
    "platform": FieldSpec(
        name="platform",
        selectors=(
            '[data-qa="mfe-game-title#platform"]',  # Platform tags under the title
            '[data-qa*="platform"]',  # Any platform marker
            '[class*="platform"]',  # Platform by partial class
        ),
    ),
    "publisher": FieldSpec(
        name="publisher",
        selectors=(
            '[data-qa="mfe-game-title#publisher"]',  # Publisher under the title
            '[data-qa*="publisher"]',  # Any publisher marker
            '[class*="publisher"]',  # Publisher by partial class
        ),
        json_ld_keys=("publisher", "brand"),
    ),
    "release_date": FieldSpec(
        name="release_date",
        selectors=(
            '[data-qa="mfe-game-title#release-date"]',  # Release date under the title
            '[data-qa*="release"]',  # Any release marker
            '[class*="release-date"]',  # Release date by partial class
        ),
        json_ld_keys=("releaseDate", "datePublished"),
    ),
}  # Field specs evaluated by resolve_field, keyed by field name

SENTINEL_FIELDS = ("title", "description", "rating")  # Fields reported as "N/A" instead of None


@dataclass(frozen=True)
class ExtractedDetails:
    """
    Domain fields read from one detail page.
    """

    title: str = UNKNOWN
    price: str = UNKNOWN
    all_prices: List[str] = field(default_factory=list)
    original_price: Optional[str] = None
    discount: Optional[str] = None
    description: str = UNKNOWN
    rating: str = UNKNOWN
    platform: Optional[str] = None
    publisher: Optional[str] = None
    release_date: Optional[str] = None
    genres: Optional[List[str]] = None
    image: Optional[str] = None
    price_resolution: Optional[PriceResolution] = None


# Functions Definitions:


def parse_html(html: str) -> BeautifulSoup:
    """
    Parses an HTML snapshot with the lxml parser.

    :param html: Rendered HTML content
    :return: BeautifulSoup object
    """

    return BeautifulSoup(html or "", "lxml")  # lxml is fast and tolerant of broken markup


def find_text(soup: Any, selectors: Sequence[str]) -> Optional[str]:
    """
    Returns the first meaningful text among the first elements matched by each selector.

    :param soup: BeautifulSoup object
    :param selectors: CSS selectors in priority order
    :return: Normalized text or None
    """

    for selector in selectors:  # Try each selector in order
        text = element_text(soup.select_one(selector))  # Text of the first match, empty when nothing matched
        if is_meaningful(text):  # Skip empty texts and the sentinel
            return text  # First meaningful text wins
    return None  # No selector produced text


def get_meta(soup: Any, names: Sequence[str]) -> Optional[str]:
    """
    Reads the content of the first meta tag matching one of the names.

    :param soup: BeautifulSoup object
    :param names: Values of the name or property attribute, in priority order
    :return: Normalized content or None
    """

    for name in names:  # Try each name in order
        element = soup.find("meta", attrs={"name": name}) or soup.find("meta", attrs={"property": name})  # Both attribute styles are used
        content = normalize_text(element.get("content")) if element else ""  # Meta content text
        if is_meaningful(content):  # Skip empty contents
            return content  # First meaningful content wins
    return None  # No meta tag matched


def read_json_ld(soup: Any) -> Optional[Dict[str, Any]]:
    """
    Reads the first JSON-LD block of the page.

    :param soup: BeautifulSoup object
    :return: Parsed dictionary (first dict item for list payloads), or None when missing or unparseable
    """

    script = soup.select_one(JSON_LD_SELECTOR)  # First structured data block
    if script is None:  # The page has no structured data
        return None  # Nothing to read

    try:  # Pages sometimes ship malformed JSON-LD
        payload = json.loads(script.string or script.get_text() or "")
    except ValueError as e:  # json.JSONDecodeError is a ValueError
        verbose_output(f"{BackgroundColors.YELLOW}Ignoring unparseable JSON-LD block: {e}{Style.RESET_ALL}")
        return None  # Treat as missing

    if isinstance(payload, list):  # Some pages wrap the object in a list
        payload = next((item for item in payload if isinstance(item, dict)), None)
    return payload if isinstance(payload, dict) else None  # Only objects carry fields


def json_ld_text(value: Any) -> Optional[str]:
    """
    Converts a JSON-LD value to text. Objects contribute their "name".

    :param value: Raw JSON-LD value
    :return: Normalized text or None
    """

    if isinstance(value, dict):  # Organizations and brands are objects
        value = value.get("name")
    elif isinstance(value, list):  # Take the first usable entry
        value = next((json_ld_text(item) for item in value if json_ld_text(item)), None)
    if value is None or isinstance(value, (dict, list)):  # Nothing textual left
        return None
    text = normalize_text(value)  # Numbers and strings become clean text
    return text if is_meaningful(text) else None  # Skip empty values


def resolve_field(soup: Any, spec: FieldSpec, json_ld: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """
    Resolves one scalar field through the selector, meta and JSON-LD tiers.

    :param soup: BeautifulSoup object
    :param spec: FieldSpec describing the lookups
    :param json_ld: Parsed JSON-LD block, when present
    :return: Normalized (and capped) text or None
    """

    value = find_text(soup, spec.selectors)  # Tier 1: selectors
    if value is None and spec.meta_names:  # Tier 2: meta tags
        value = get_meta(soup, spec.meta_names)
    if value is None and json_ld and spec.json_ld_keys:  # Tier 3: structured data
        value = next((json_ld_text(json_ld.get(key)) for key in spec.json_ld_keys if json_ld_text(json_ld.get(key))), None)

    if value is not None and spec.max_length is not None:  # Apply the character cap
        value = truncate_text(value, spec.max_length)
    return value  # None when every tier failed


def extract_genres(soup: Any) -> Optional[List[str]]:
    """
    Reads the distinct genre labels of the page.

    :param soup: BeautifulSoup object
    :return: Genre texts in page order, or None when there are none
    """

    genres = []  # Distinct genre texts
    for element in soup.select(GENRE_SELECTOR):  # Every genre-looking element
        text = element_text(element)  # Visible text of the element
        if text and text not in genres:  # Skip empty and repeated labels
            genres.append(text)
    return genres or None  # None instead of an empty list


def extract_image(soup: Any, base_url: str, json_ld: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """
    Reads the hero image address, falling back to the share image and JSON-LD.

    :param soup: BeautifulSoup object
    :param base_url: Page address used to resolve relative sources
    :param json_ld: Parsed JSON-LD block, when present
    :return: Absolute image address or None
    """

    image = None  # Resolved image address
    element = soup.select_one(IMAGE_SELECTOR)  # Hero or product image
    if element is not None:  # Prefer the rendered image
        image = normalize_text(element.get("src")) or None
    if image is None:  # Share image from the meta tags
        image = get_meta(soup, IMAGE_META_NAMES)
    if image is None and json_ld:  # Structured data image (string, list or object)
        raw_image = json_ld.get("image")
        if isinstance(raw_image, dict):  # ImageObject
            raw_image = raw_image.get("url")
        if isinstance(raw_image, list):  # Several images, take the first one
            raw_image = raw_image[0] if raw_image else None
        if isinstance(raw_image, str):  # Only plain addresses are usable
            image = normalize_text(raw_image) or None
    return urljoin(base_url, image) if image else None  # Relative sources are resolved against the page


def extract_game_details(html: str, url: str) -> ExtractedDetails:
    """
    Extracts every domain field of a detail page.

    :param html: Rendered HTML snapshot of the page
    :param url: Address of the page
    :return: ExtractedDetails
    """

    soup = parse_html(html)  # Parse once for every field
    json_ld = read_json_ld(soup)  # Structured data shared by every tier 3 lookup

    values = {name: resolve_field(soup, spec, json_ld) for name, spec in FIELD_SPECS.items()}  # Scalar fields
    for name in SENTINEL_FIELDS:  # Fields reported as "N/A" when missing
        values[name] = values[name] or UNKNOWN

    resolution = resolve_price(soup, json_ld)  # Multi-candidate price pipeline
    verbose_output(f"{BackgroundColors.GREEN}Resolved {BackgroundColors.CYAN}{values['title']}{BackgroundColors.GREEN} price {BackgroundColors.CYAN}{resolution.price}{BackgroundColors.GREEN} from {resolution.source}{Style.RESET_ALL}")

    return ExtractedDetails(
        price=resolution.price,
        all_prices=list(resolution.all_prices),
        genres=extract_genres(soup),
        image=extract_image(soup, url, json_ld),
        price_resolution=resolution,
        **values,
    )

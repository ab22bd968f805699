"""
================================================================================
Price Resolver
================================================================================
Created     : 2026-10-17
Description :
    Picks "the" price of a game from the many price-shaped texts a store page
    contains. Taking the first match usually returns the wrong value (an
    edition or add-on price, a "Free" banner, a currency label), so prices go
    through a dedicated pipeline:

        1. Collection   : targeted selectors (broad to narrow), then the
                          edition offer cards, then every text element when
                          nothing targeted matched.
        2. Noise filter : texts containing call-to-action words are dropped.
        3. Deduplication: distinct raw strings in discovery order.
        4. Value parsing: face value with "." or "," as decimal separator.
        5. Selection    : highest paid candidate, else the first candidate,
                          else the meta price, else the JSON-LD offer price,
                          else "N/A".
        6. Rescan       : when the result is "N/A" or free, a narrower scan
                          of the offer labels may override it.

    Every distinct candidate is kept in `all_prices` so the choice can be
    audited.

Usage:
    resolution = resolve_price(soup, json_ld)
    if needs_rescan(resolution.price):
        resolution = apply_rescan(resolution, rescan_offer_labels(new_soup))
"""

import re  # For price pattern matching
from dataclasses import dataclass, field  # For candidate and resolution records
from text_utils import UNKNOWN, element_text, normalize_text  # For text cleaning and the unknown sentinel
from typing import Any, Dict, Iterable, List, Optional  # For type hints


# Price Pattern Constants:
CURRENCY_SYMBOLS = "₺$€£¥₹"  # Symbols written before or after the amount
CURRENCY_CODES = ("TL", "RSD", "USD", "EUR", "GBP", "JPY", "INR", "PLN", "CHF", "HUF", "CZK", "SEK", "NOK", "DKK", "RON", "BGN", "AUD", "CAD")  # Codes written before or after the amount
AMOUNT = r"\d+(?:[.,]\d+)*"  # Amount with optional thousands and decimal separators
CODE_GROUP = "|".join(CURRENCY_CODES)  # Alternation of currency codes
PRICE_PATTERN = re.compile(
    rf"[{CURRENCY_SYMBOLS}]\s*{AMOUNT}"  # Symbol before the amount
    rf"|{AMOUNT}\s*[{CURRENCY_SYMBOLS}]"  # Symbol after the amount
    rf"|\b(?:{CODE_GROUP})\s*{AMOUNT}"  # Code before the amount
    rf"|{AMOUNT}\s*(?:{CODE_GROUP})\b"  # Code after the amount
)  # Shape of a price text
DECIMAL_PATTERN = re.compile(r"\d+[.,]\d+")  # Any decimal number, accepted by the targeted selectors
AMOUNT_PATTERN = re.compile(AMOUNT)  # First amount inside a candidate
CURRENCY_PATTERN = re.compile(rf"[{CURRENCY_SYMBOLS}]|\b(?:{CODE_GROUP})\b")  # Currency marker inside a candidate
MAX_CANDIDATE_LENGTH = 50  # Longer texts are containers, not prices

# Keyword Constants:
FREE_KEYWORDS = ("free", "ücretsiz", "bedava")  # Free-equivalent labels in English and Turkish
SELECTOR_NOISE_KEYWORDS = ("confirm", "select", "choose")  # Call-to-action words near targeted price elements
CARD_NOISE_KEYWORDS = ("confirm", "select")  # Call-to-action words inside edition offer cards
BROAD_NOISE_KEYWORDS = ("confirm", "rating", "download", "size")  # Non-price texts matched by the whole-page scan
RESCAN_NOISE_KEYWORDS = ("confirm",)  # Call-to-action words inside offer labels

# Selector Constants:
PRICE_SELECTORS = [
    "div.psw-pdp-card-anchor label div.psw-l-anchor.psw-l-stack-left span span span span",  # Edition label price, deepest span
    "div.psw-pdp-card-anchor label div.psw-l-anchor span span span",  # Edition label price
    "label div.psw-l-anchor.psw-l-stack-left.psw-fill-x span span span",  # Full-width edition label price
    'label[class*="psw"] div[class*="psw-l-anchor"] span span span',  # Edition label price by partial class
    "label > div.psw-l-anchor > span > span > span",  # Direct edition label price
    "div.psw-pdp-card-anchor label span span span",  # Any nested span inside an edition label
    "label span span span",  # Any nested label span
    'label span[class*="psw"] span span',  # Styled nested label span
    '[data-qa="mfeCtaMain#offer0#finalPrice"]',  # Main call-to-action final price
    '[data-qa="mfeCtaMain#offer0#finalPrice"] span',  # Main call-to-action final price inner span
    '[data-qa*="finalPrice"]',  # Any final price marker
    '[data-qa*="price"]',  # Any price marker
    ".price-display__price",  # Price display component
    '[class*="price-display"]',  # Price display by partial class
    '[class*="final-price"]',  # Final price by partial class
    'span[class*="price"]',  # Generic price span
    '[aria-label*="price" i]',  # Accessible price label
    'button[class*="price"]',  # Price button
    '[class*="cta"] [class*="price"]',  # Price inside a call-to-action block
    'label div[class*="psw-l-anchor"] span',  # Anchor span inside a label
    'label[class*="psw"] span span',  # Styled label spans
    ".psw-pdp-card-anchor label span",  # Offer card label span
    'div[class*="psw-pdp"] label span span span',  # Detail page label spans
]  # Targeted price selectors, broad to narrow
OFFER_CARD_SELECTOR = 'div.psw-pdp-card-anchor, div[class*="pdp-card"]'  # Containers hosting several edition offers
OFFER_CARD_PRICE_SELECTOR = "span span span"  # Nested label text inside an offer card
BROAD_SCAN_SELECTOR = "span, div, button, p, label"  # Every textual element, used when nothing targeted matched
OFFER_LABEL_SELECTOR = 'div.psw-pdp-card-anchor label, label[class*="psw"]'  # Offer labels read by the rescan
META_PRICE_NAME = "product:price:amount"  # Meta tag carrying a price amount


@dataclass(frozen=True)
class PriceCandidate:
    """
    One price-shaped text found on the page.

    value is the face value with a single "." decimal separator, or None when
    no amount could be parsed.
    """

    raw: str
    value: Optional[float] = None
    currency: Optional[str] = None
    is_free: bool = False
    is_noise: bool = False
    strategy: str = "selector"

    @property
    def sort_value(self) -> float:
        return self.value if self.value is not None else 0.0  # Unparseable candidates rank as zero

    @property
    def is_paid(self) -> bool:
        return not self.is_free and not self.is_noise and self.sort_value > 0  # Real, positive, non-free price


@dataclass(frozen=True)
class PriceResolution:
    """
    Outcome of price resolution: the chosen price and every candidate seen.
    """

    price: str
    all_prices: List[str] = field(default_factory=list)
    candidates: List[PriceCandidate] = field(default_factory=list)
    source: str = "none"


def contains_keyword(text: str, keywords: Iterable[str]) -> bool:
    """
    Verifies if the text contains any of the keywords (case-insensitive).

    :param text: Text to inspect
    :param keywords: Lowercase keywords
    :return: True when at least one keyword appears
    """

    lowered = text.lower()  # Compare case-insensitively
    return any(keyword in lowered for keyword in keywords)  # Any keyword is enough


def is_free_text(text: str) -> bool:
    return contains_keyword(text, FREE_KEYWORDS)  # Free-equivalent label in any supported language


def is_free_label(text: str) -> bool:
    return normalize_text(text).lower() in FREE_KEYWORDS  # The whole text is a free label


def parse_price_value(text: str) -> Optional[float]:
    """
    Parses the first amount of a price text into its face value.

    The last "." or "," followed by one or two digits is the decimal
    separator; every other separator groups thousands.

    :param text: Price text such as "$59.99", "RSD 6.999,00" or "₺1,249"
    :return: Float value, or None when the text has no amount
    """

    match = AMOUNT_PATTERN.search(text or "")  # First amount in the text
    if not match:  # No digits at all
        return None  # Nothing to parse

    groups = re.split(r"[.,]", match.group(0))  # Digit groups between separators
    if len(groups) > 1 and len(groups[-1]) <= 2:  # Last group is a fraction
        return float(f"{''.join(groups[:-1])}.{groups[-1]}")  # Integer groups joined, fraction after the point
    return float("".join(groups))  # Whole number with thousands separators removed


def parse_currency(text: str) -> Optional[str]:
    match = CURRENCY_PATTERN.search(text or "")  # First currency marker
    return match.group(0) if match else None  # Symbol or code, when present


def make_candidate(raw: str, noise_keywords: Iterable[str] = SELECTOR_NOISE_KEYWORDS, strategy: str = "selector") -> PriceCandidate:
    """
    Builds a PriceCandidate from a raw text.

    :param raw: Raw candidate text
    :param noise_keywords: Call-to-action words that mark the text as noise
    :param strategy: Name of the collection step that found the text
    :return: PriceCandidate with parsed value and flags
    """

    text = normalize_text(raw)  # Clean whitespace before parsing
    return PriceCandidate(
        raw=text,
        value=parse_price_value(text),
        currency=parse_currency(text),
        is_free=is_free_text(text),
        is_noise=contains_keyword(text, noise_keywords),
        strategy=strategy,
    )


def dedupe_candidates(candidates: Iterable[PriceCandidate]) -> List[PriceCandidate]:
    """
    Keeps the first candidate for every distinct raw text.

    :param candidates: Candidates in discovery order
    :return: Distinct candidates in discovery order
    """

    seen = set()  # Raw texts already kept
    distinct = []  # Candidates in discovery order
    for candidate in candidates:  # Walk in discovery order
        if candidate.raw in seen:  # Duplicate text
            continue  # Keep the first occurrence only
        seen.add(candidate.raw)  # Remember the text
        distinct.append(candidate)  # Keep the candidate
    return distinct  # Return the distinct candidates


def _is_price_shaped(text: str, allow_decimal: bool = False) -> bool:
    if not text or len(text) >= MAX_CANDIDATE_LENGTH:  # Empty texts and containers are not prices
        return False  # Reject
    if PRICE_PATTERN.search(text):  # Currency and amount
        return True  # Accept
    return allow_decimal and bool(DECIMAL_PATTERN.search(text))  # Targeted selectors also accept bare decimals


def collect_price_candidates(soup: Any) -> List[PriceCandidate]:
    """
    Collects distinct, noise-free price candidates from a parsed page.

    :param soup: BeautifulSoup object containing the rendered page
    :return: Candidates in discovery order
    """

    collected: List[PriceCandidate] = []  # Every candidate, noise included

    for selector in PRICE_SELECTORS:  # Targeted selectors first
        for element in soup.select(selector):  # Every matching element
            text = element_text(element)  # Rendered text of the element
            if _is_price_shaped(text, allow_decimal=True) or is_free_label(text):  # Prices, decimals and free labels
                collected.append(make_candidate(text, SELECTOR_NOISE_KEYWORDS, "selector"))

    for card in soup.select(OFFER_CARD_SELECTOR):  # Edition offer containers
        for label in card.select("label"):  # Every offer label inside the card
            for span in label.select(OFFER_CARD_PRICE_SELECTOR):  # Nested label text
                text = element_text(span)  # Rendered text of the span
                if _is_price_shaped(text):  # Currency and amount only
                    collected.append(make_candidate(text, CARD_NOISE_KEYWORDS, "offer-card"))

    if not [candidate for candidate in collected if not candidate.is_noise]:  # Nothing targeted survived
        for element in soup.select(BROAD_SCAN_SELECTOR):  # Every textual element
            text = element_text(element)  # Rendered text of the element
            if _is_price_shaped(text):  # Currency and amount only
                collected.append(make_candidate(text, BROAD_NOISE_KEYWORDS, "page-scan"))

    return dedupe_candidates(candidate for candidate in collected if not candidate.is_noise)  # Drop noise, then duplicates


def read_meta_price(soup: Any) -> Optional[str]:
    element = soup.find("meta", attrs={"property": META_PRICE_NAME}) or soup.find("meta", attrs={"name": META_PRICE_NAME})  # Open Graph product price
    content = normalize_text(element.get("content")) if element else ""  # Price amount text
    return content or None  # None when absent or blank


def read_json_ld_price(json_ld: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    Reads the offer price of a JSON-LD block.

    :param json_ld: Parsed JSON-LD object or None
    :return: "CUR price" or "price", None when the block carries no offer price
    """

    if not isinstance(json_ld, dict):  # No structured data
        return None  # Nothing to read
    offers = json_ld.get("offers")  # Offer or list of offers
    if isinstance(offers, list):  # Several offers, use the first one
        offers = next((offer for offer in offers if isinstance(offer, dict)), None)
    if not isinstance(offers, dict):  # No usable offer
        return None  # Nothing to read
    price = offers.get("price")  # Offer price (string or number)
    if price is None or normalize_text(price) == "":  # Missing price
        return None  # Nothing to read
    currency = offers.get("priceCurrency")  # Optional ISO currency code
    return f"{currency} {price}" if currency else str(price)  # Prefix the currency when known


def select_price(candidates: List[PriceCandidate], meta_price: Optional[str] = None, json_ld_price: Optional[str] = None) -> PriceResolution:
    """
    Chooses the price among collected candidates and the fallbacks.

    Several editions are usually listed together and the most expensive is
    the standard price; cheaper entries are bundle parts or add-ons.

    :param candidates: Distinct, noise-free candidates in discovery order
    :param meta_price: Price from the product meta tag
    :param json_ld_price: Price from the JSON-LD offer
    :return: PriceResolution with the chosen price and the audit list
    """

    all_prices = [candidate.raw for candidate in candidates]  # Audit list in discovery order
    paid = [candidate for candidate in candidates if candidate.is_paid]  # Positive, non-free candidates

    if paid:  # Highest paid candidate wins, ties keep discovery order
        best = sorted(paid, key=lambda candidate: candidate.sort_value, reverse=True)[0]
        return PriceResolution(best.raw, all_prices, list(candidates), "highest-paid")
    if candidates:  # No paid candidate, keep the first one found (for example "Free")
        return PriceResolution(candidates[0].raw, all_prices, list(candidates), "first-candidate")
    if meta_price:  # Product meta tag
        return PriceResolution(meta_price, all_prices, [], "meta")
    if json_ld_price:  # Structured data offer
        return PriceResolution(json_ld_price, all_prices, [], "json-ld")
    return PriceResolution(UNKNOWN, all_prices, [], "none")  # Nothing found


def resolve_price(soup: Any, json_ld: Optional[Dict[str, Any]] = None) -> PriceResolution:
    """
    Collects candidates from the page and selects the price.

    :param soup: BeautifulSoup object containing the rendered page
    :param json_ld: Parsed JSON-LD block, when present
    :return: PriceResolution
    """

    candidates = collect_price_candidates(soup)  # Steps 1 to 4
    return select_price(candidates, read_meta_price(soup), read_json_ld_price(json_ld))  # Step 5


def needs_rescan(price: Optional[str]) -> bool:
    return not price or price == UNKNOWN or is_free_text(price)  # Missing or free prices get a second pass


def rescan_offer_labels(soup: Any) -> List[PriceCandidate]:
    """
    Second, narrower pass over the offer labels of a re-settled page.

    Every price-shaped match inside the offer labels is taken; when the labels
    hold none, the visible text of the whole body is scanned instead.

    :param soup: BeautifulSoup object containing the re-rendered page
    :return: Distinct, non-free candidates in discovery order
    """

    found: List[PriceCandidate] = []  # Candidates from the rescan

    for label in soup.select(OFFER_LABEL_SELECTOR):  # Offer labels only
        for match in PRICE_PATTERN.finditer(element_text(label)):  # Every price inside the label
            candidate = make_candidate(match.group(0), RESCAN_NOISE_KEYWORDS, "rescan-label")
            if not candidate.is_free and not candidate.is_noise:  # Skip free and call-to-action texts
                found.append(candidate)

    if not found:  # Nothing in the labels, read the whole body
        body = soup.body if soup.body is not None else soup  # Fragments may have no body element
        for match in PRICE_PATTERN.finditer(element_text(body)):  # Every price on the page
            candidate = make_candidate(match.group(0), (), "rescan-body")
            if not candidate.is_free and candidate.value is not None:  # Needs an amount
                found.append(candidate)

    return dedupe_candidates(found)  # Distinct candidates in discovery order


def apply_rescan(resolution: PriceResolution, rescanned: List[PriceCandidate]) -> PriceResolution:
    """
    Overrides a missing or free price with the best rescan result.

    :param resolution: Result of the first pass
    :param rescanned: Candidates from rescan_offer_labels
    :return: A new PriceResolution when the rescan found a non-free price, otherwise the original one
    """

    fresh = [candidate for candidate in rescanned if not candidate.is_free and not candidate.is_noise]  # Usable rescan results
    if not fresh:  # The rescan found nothing better
        return resolution  # Keep the first-pass result

    pool = [candidate for candidate in resolution.candidates if candidate.is_paid] + fresh  # Combined pool
    best = sorted(pool, key=lambda candidate: candidate.sort_value, reverse=True)[0]  # Highest value wins
    merged = list(resolution.all_prices)  # Keep the first-pass audit list
    for candidate in fresh:  # Append new texts in discovery order
        if candidate.raw not in merged:  # Skip texts already listed
            merged.append(candidate.raw)
    return PriceResolution(best.raw, merged, list(resolution.candidates) + fresh, "rescan")

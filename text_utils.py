"""
text_utils.py — Text normalization utilities for scraped page content

Created     : 2026-10-17
Description :
    Small utility module that provides a single source-of-truth for cleaning
    text read from rendered store pages. The exports are:

    - `normalize_text`, which normalizes non-breaking spaces to regular
      spaces, collapses consecutive whitespace and trims the result.
    - `truncate_text`, which enforces a deterministic maximum length after
      normalization.
    - `is_meaningful`, which rejects empty strings and the "N/A" sentinel.
    - `element_text`, which reads the rendered text of a parsed element
      (similar to a browser's innerText, without script and style payloads).
    - `UNKNOWN`, the sentinel written for fields that could not be read.

Usage:
    from text_utils import normalize_text, truncate_text, UNKNOWN
    title = normalize_text(raw_title) or UNKNOWN

Dependencies:
    - Python standard library: `re`
    - `beautifulsoup4`: element types used when walking parsed pages

Notes:
    - Truncation happens after normalization so the same input always yields
      the same output length.
"""


import re  # Used for regex-based whitespace normalization
from bs4 import Comment, NavigableString, Tag  # For walking parsed elements


# Sentinel Constants:
UNKNOWN = "N/A"  # Written for fields that could not be extracted
INVISIBLE_TAGS = frozenset({"script", "style", "noscript", "template"})  # Tags whose text is never rendered
BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "br", "dd", "details", "div", "dl", "dt", "fieldset",
    "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr",
    "li", "main", "nav", "ol", "p", "section", "summary", "table", "td", "th", "tr", "ul",
})  # Tags rendered on their own line or cell, so their text never touches the neighbours


# Functions Definitions:


def normalize_text(raw_text) -> str:
    """
    Normalize whitespace in a piece of page text.

    :param raw_text: Raw text string (may contain NBSP, newlines, repeated spaces) or None
    :return: Normalized string, empty when the input was None or blank
    """

    if raw_text is None:  # Handle None input gracefully by treating it as an empty string
        return ""  # This ensures the function always returns a string, even if the input is None

    text = str(raw_text).replace("\u00A0", " ")  # Normalize NBSP (non-breaking space) to regular space
    text = re.sub(r"\s+", " ", text).strip()  # Collapse multiple spaces and trim leading/trailing whitespace
    return text  # Return the normalized text


def truncate_text(raw_text, max_length: int) -> str:
    """
    Normalize and truncate a piece of page text.

    :param raw_text: Raw text string or None
    :param max_length: Maximum number of characters to keep
    :return: Normalized string of at most max_length characters
    """

    text = normalize_text(raw_text)  # Normalize before measuring the length

    if len(text) > max_length:  # Enforce the limit after all normalization steps
        text = text[:max_length]  # Truncate to the first max_length characters

    return text  # Return the truncated text


def is_meaningful(text) -> bool:
    """
    Verify that a text value carries information.

    :param text: Text value to verify
    :return: False for None, blank strings and the UNKNOWN sentinel
    """

    normalized = normalize_text(text)  # Normalize before comparing
    return normalized != "" and normalized != UNKNOWN  # Reject blanks and the sentinel


def element_text(element) -> str:
    """
    Reads the visible text of a parsed HTML element.

    Text inside script, style, noscript and template tags is skipped. Inline
    fragments are joined as written (so "€59<span>.99</span>" reads "€59.99"),
    block-level elements are separated by a space, and the result is normalized.

    :param element: BeautifulSoup Tag (None is accepted)
    :return: Normalized text, empty when the element is None or has no visible text
    """

    if element is None:  # Guard against None to avoid attribute access on None
        return ""  # No element, no text

    parts = []  # Visible string fragments in document order
    _collect_visible_text(element, parts)  # Walk the element tree
    return normalize_text("".join(parts))  # Inline fragments touch, real whitespace collapses


def _collect_visible_text(element, parts: list) -> None:
    """
    Appends the visible text fragments of an element to parts.

    Inline children are concatenated as written; block-level children and
    line breaks are surrounded by a space.

    :param element: BeautifulSoup Tag
    :param parts: List receiving the fragments
    :return: None
    """

    for child in element.children:  # Direct children in document order
        if isinstance(child, Tag):  # Nested element
            if child.name in INVISIBLE_TAGS:  # Code and template payloads are never rendered
                continue  # Skip the whole subtree
            is_block = child.name in BLOCK_TAGS  # Block boundaries separate words
            if is_block:
                parts.append(" ")
            _collect_visible_text(child, parts)  # Recurse into the child
            if is_block:
                parts.append(" ")
        elif isinstance(child, NavigableString) and not isinstance(child, Comment):  # Rendered text node
            parts.append(str(child))

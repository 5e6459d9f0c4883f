"""Selector-cascade extraction of product cards from HTML.

Both extractors run this on HTML: the browser extractor on a snapshot of
the rendered DOM, the bypass-proxy extractor on the proxied response.
"""

from typing import Iterable, List, Optional

import structlog
from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from gameprice.scrapers.base import ScrapedItem, SiteProfile
from gameprice.scrapers.utils.normalizer import (
    INLINE_PRICE_PATTERN,
    collapse_whitespace,
    detect_region,
    extract_domain,
    extract_game_category,
    is_valid_price,
    parse_price,
    sanitize_text,
)


logger = structlog.get_logger(__name__)

MAX_ITEMS_PER_PAGE = 50
MIN_TITLE_LENGTH = 4
FALLBACK_TITLE_LENGTH = 100
_TITLE_ATTRIBUTES = ("title", "alt", "data-title")


def _safe_select(root: Tag, selector: str) -> List[Tag]:
    try:
        return root.select(selector)
    except (SelectorSyntaxError, NotImplementedError, ValueError) as e:
        logger.debug("invalid_selector", selector=selector, error=str(e))
        return []


def _first_text(element: Tag, selectors: Iterable[str]) -> str:
    """Text of the first selector match with non-empty text."""
    for selector in selectors:
        for match in _safe_select(element, selector)[:1]:
            text = collapse_whitespace(match.get_text(" ", strip=True))
            if text:
                return text
    return ""


def _attribute_title(element: Tag) -> str:
    for attr in _TITLE_ATTRIBUTES:
        value = element.get(attr)
        if value:
            return collapse_whitespace(str(value))
    return ""


def find_containers(soup: Tag, selectors: Iterable[str], limit: int) -> List[Tag]:
    """Elements of the first container selector that matches anything."""
    for selector in selectors:
        elements = _safe_select(soup, selector)
        if elements:
            logger.debug("container_selector_matched", selector=selector, count=len(elements))
            return elements[:limit]
    return []


def extract_item(element: Tag, profile: SiteProfile, url: str) -> Optional[ScrapedItem]:
    """Build a ScrapedItem from one container element, or None to skip it."""
    selectors = profile.selectors

    title = _first_text(element, selectors.title) or _attribute_title(element)
    price_text = _first_text(element, selectors.price)
    original_price = _first_text(element, selectors.original_price) or None

    if not title or not price_text:
        full_text = collapse_whitespace(element.get_text(" ", strip=True))
        match = INLINE_PRICE_PATTERN.search(full_text)
        if match:
            if not price_text:
                price_text = match.group(0)
            if not title:
                title = full_text[: match.start()].strip()[:FALLBACK_TITLE_LENGTH]

    title = sanitize_text(title)
    if len(title) < MIN_TITLE_LENGTH or not price_text:
        return None

    parsed = parse_price(price_text)
    if not is_valid_price(parsed.value):
        return None

    return ScrapedItem(
        title=title,
        raw_price_text=price_text,
        source_url=url,
        site_domain=extract_domain(url),
        currency=parsed.currency,
        region=detect_region(url, title),
        game_category=extract_game_category(url, title),
        original_price_text=original_price,
    )


def extract_items(
    html: str,
    profile: SiteProfile,
    url: str,
    limit: int = MAX_ITEMS_PER_PAGE,
) -> List[ScrapedItem]:
    """Run the selector cascade over a page and return the valid items.

    Args:
        html: Page markup
        profile: Site profile supplying the selectors
        url: Page URL, recorded on every item
        limit: Maximum number of container elements to inspect

    Returns:
        Items in document order; elements that fail to parse are skipped
    """
    soup = BeautifulSoup(html or "", "html.parser")
    items: List[ScrapedItem] = []

    for element in find_containers(soup, profile.selectors.container, limit):
        try:
            item = extract_item(element, profile, url)
        except Exception as e:
            logger.debug("item_extraction_failed", domain=profile.domain, error=str(e))
            continue
        if item is not None:
            items.append(item)

    return items

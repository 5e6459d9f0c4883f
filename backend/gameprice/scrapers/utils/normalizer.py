"""Text normalization utilities for price parsing and keyword classification."""

import math
import re
import secrets
import time
from enum import Enum
from typing import Dict, List, NamedTuple, Tuple
from urllib.parse import urlparse


class Currency(str, Enum):
    TRY = "TRY"
    USD = "USD"
    EUR = "EUR"


class Region(str, Enum):
    TR = "TR"
    EU = "EU"
    US = "US"
    GLOBAL = "GLOBAL"


class ParsedPrice(NamedTuple):
    value: float
    currency: Currency


MAX_VALID_PRICE = 1_000_000
MAX_TEXT_LENGTH = 200
UNKNOWN_CATEGORY = "unknown"

# Thousands-grouped numbers first so "1.299,90" is read as one number
_NUMBER = r"(\d{1,3}(?:[.,]\d{3})+(?:[.,]\d+)?|\d+(?:[.,]\d+)?)"

# Tried in order, first match wins
_PRICE_PATTERNS: List[Tuple[re.Pattern, Currency]] = [
    (re.compile(_NUMBER + r"\s*₺"), Currency.TRY),
    (re.compile(r"₺\s*" + _NUMBER), Currency.TRY),
    (re.compile(_NUMBER + r"\s*(?:TL|TRY)\b", re.IGNORECASE), Currency.TRY),
    (re.compile(r"\b(?:TL|TRY)\s*" + _NUMBER, re.IGNORECASE), Currency.TRY),
    (re.compile(_NUMBER + r"\s*\$"), Currency.USD),
    (re.compile(r"\$\s*" + _NUMBER), Currency.USD),
    (re.compile(_NUMBER + r"\s*USD\b", re.IGNORECASE), Currency.USD),
    (re.compile(r"\bUSD\s*" + _NUMBER, re.IGNORECASE), Currency.USD),
    (re.compile(_NUMBER + r"\s*€"), Currency.EUR),
    (re.compile(r"€\s*" + _NUMBER), Currency.EUR),
    (re.compile(_NUMBER + r"\s*EUR\b", re.IGNORECASE), Currency.EUR),
    (re.compile(r"\bEUR\s*" + _NUMBER, re.IGNORECASE), Currency.EUR),
    (re.compile(_NUMBER), Currency.TRY),
]

# Used when title/price selectors miss: "<number><space?><currency token>"
INLINE_PRICE_PATTERN = re.compile(
    r"\d+(?:[.,]\d+)*\s*(?:tl\b|₺|try\b|usd\b|eur\b|\$|€)", re.IGNORECASE
)

_SANITIZE_PATTERN = re.compile(r"[^\w\s\-_.₺$€]")
_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^\w]+")


# Checked in priority order; the default is TR
REGION_KEYWORDS: List[Tuple[Region, List[str]]] = [
    (Region.GLOBAL, ["global", "worldwide", "dünya", "dunya"]),
    (Region.EU, ["eu", "europe", "avrupa", "west", "euw", "eune"]),
    (Region.US, ["na", "north america", "america", "usa", "us"]),
    (Region.TR, ["tr", "turkey", "turkiye", "türkiye"]),
]

# First matching category wins, so more specific entries come first
GAME_CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "pubg": ["pubg", "pubg mobile", "uc"],
    "mobile-legends": ["mobile legends", "mlbb", "bang bang", "elmas"],
    "valorant": ["valorant", "vp", "valorant points"],
    "lol": ["lol", "league of legends", "riot points", "rp", "riot"],
    "free-fire": ["free fire", "freefire", "garena"],
    "genshin-impact": ["genshin", "genshin impact", "genesis crystal", "genesis"],
    "honor-of-kings": ["honor of kings", "hok", "jeton"],
    "roblox": ["roblox", "robux"],
    "steam": ["steam", "steam wallet", "cuzdan", "cüzdan"],
    "razer-gold": ["razer gold", "razer"],
}


def _keyword_text(*parts: str) -> str:
    """Lowercase and reduce to space-separated word tokens with padding."""
    joined = " ".join(p for p in parts if p).lower()
    return f" {_NON_ALNUM.sub(' ', joined).strip()} "


def _contains_keyword(text: str, keyword: str) -> bool:
    return f" {keyword} " in text


def extract_domain(url: str) -> str:
    """Return the URL hostname without a leading "www.".

    Returns an empty string instead of raising on malformed input.
    """
    try:
        hostname = urlparse(url).hostname
    except (ValueError, TypeError, AttributeError):
        return ""
    if not hostname:
        return ""
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname


def _to_float(number: str) -> float:
    """Normalize a matched number string into a float.

    "149,90" -> 149.9, "1.299,90" -> 1299.9, "1,299.90" -> 1299.9,
    "1.299.000" -> 1299000.
    """
    has_dot = "." in number
    has_comma = "," in number
    if has_dot and has_comma:
        decimal_sep = "." if number.rfind(".") > number.rfind(",") else ","
        thousands_sep = "," if decimal_sep == "." else "."
        number = number.replace(thousands_sep, "").replace(decimal_sep, ".")
    elif has_comma:
        if number.count(",") > 1:
            number = number.replace(",", "")
        else:
            number = number.replace(",", ".")
    elif number.count(".") > 1:
        number = number.replace(".", "")
    return float(number)


def parse_price(text: str) -> ParsedPrice:
    """Parse a price string into a numeric value and currency.

    Handles various formats:
    - "₺149,90" -> (149.9, TRY)
    - "149.90 TL" -> (149.9, TRY)
    - "$19.99" -> (19.99, USD)
    - "12,50 €" -> (12.5, EUR)
    - "250" -> (250.0, TRY)

    Args:
        text: Raw price text

    Returns:
        ParsedPrice, (0.0, TRY) when the text holds no digits
    """
    if not text:
        return ParsedPrice(0.0, Currency.TRY)

    cleaned = _WHITESPACE.sub(" ", text).strip()

    for pattern, currency in _PRICE_PATTERNS:
        match = pattern.search(cleaned)
        if match:
            try:
                return ParsedPrice(_to_float(match.group(1)), currency)
            except ValueError:
                continue

    return ParsedPrice(0.0, Currency.TRY)


def is_valid_price(value) -> bool:
    """True for a real number strictly between 0 and 1,000,000."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if math.isnan(value) or math.isinf(value):
        return False
    return 0 < value < MAX_VALID_PRICE


def detect_region(url: str, title: str) -> Region:
    """Classify the sales region from keywords in the URL and title."""
    text = _keyword_text(url, title)
    for region, keywords in REGION_KEYWORDS:
        if any(_contains_keyword(text, kw) for kw in keywords):
            return region
    return Region.TR


def extract_game_category(url: str, title: str) -> str:
    """Return the game category slug for a product, or "unknown"."""
    text = _keyword_text(url, title)
    for slug, keywords in GAME_CATEGORY_KEYWORDS.items():
        if any(_contains_keyword(text, kw) for kw in keywords):
            return slug
    return UNKNOWN_CATEGORY


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()


def sanitize_text(text: str) -> str:
    """Collapse whitespace, drop unexpected symbols and cap the length."""
    if not text:
        return ""
    text = _WHITESPACE.sub(" ", text)
    text = _SANITIZE_PATTERN.sub("", text)
    return text.strip()[:MAX_TEXT_LENGTH]


def generate_batch_id() -> str:
    """Build a batch id from the current epoch milliseconds and a random suffix."""
    return f"batch_{int(time.time() * 1000)}_{secrets.token_hex(5)}"

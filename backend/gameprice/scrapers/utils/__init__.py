"""Scraper utilities for browser control, pacing, retries, and text normalization."""

from .rate_limiter import DomainThrottle
from .user_agents import BROWSER_HEADERS, get_user_agent
from .normalizer import (
    Currency,
    Region,
    ParsedPrice,
    extract_domain,
    parse_price,
    is_valid_price,
    detect_region,
    extract_game_category,
    sanitize_text,
    generate_batch_id,
)
from .retry import proxy_retrying, delivery_retrying


__all__ = [
    # Pacing
    "DomainThrottle",
    # Headers
    "BROWSER_HEADERS",
    "get_user_agent",
    # Normalization
    "Currency",
    "Region",
    "ParsedPrice",
    "extract_domain",
    "parse_price",
    "is_valid_price",
    "detect_region",
    "extract_game_category",
    "sanitize_text",
    "generate_batch_id",
    # Retry policies
    "proxy_retrying",
    "delivery_retrying",
]

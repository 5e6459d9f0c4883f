"""Scraper system for fetching game-currency prices from Turkish e-pin shops.

This package provides:
- Data model and the extractor protocol shared by both strategies
- Static site profiles and the registry that resolves them
- Headless-browser and bypass-proxy extractors
- The batch orchestrator
"""

from .base import (
    SelectorSet,
    SiteProfile,
    ScrapedItem,
    ScrapeOutcome,
    BatchReport,
    Extractor,
)
from .registry import (
    ExtractionStrategy,
    SiteProfileRegistry,
    get_site_registry,
)

__all__ = [
    # Data structures
    "SelectorSet",
    "SiteProfile",
    "ScrapedItem",
    "ScrapeOutcome",
    "BatchReport",
    "Extractor",
    # Registry
    "ExtractionStrategy",
    "SiteProfileRegistry",
    "get_site_registry",
]

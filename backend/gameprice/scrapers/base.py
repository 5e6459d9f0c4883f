"""Scraping data model and the extractor contract.

Both extraction strategies (headless browser and bypass proxy) satisfy the
Extractor protocol and return one ScrapeOutcome per URL.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Tuple

from gameprice.scrapers.utils.normalizer import (
    Currency,
    Region,
    UNKNOWN_CATEGORY,
    extract_domain,
)


@dataclass(frozen=True)
class SelectorSet:
    """Ordered selector candidates for each field of a product card."""

    container: Tuple[str, ...]
    title: Tuple[str, ...]
    price: Tuple[str, ...]
    original_price: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SiteProfile:
    """Per-domain scraping configuration."""

    domain: str
    display_name: str
    selectors: SelectorSet
    wait_condition: Optional[str] = None
    inter_request_delay_ms: int = 1000
    max_retries: int = 2
    requires_rendering: bool = True

    def __post_init__(self):
        if not self.domain:
            raise ValueError("domain is required")
        if not self.selectors.container:
            raise ValueError(f"{self.domain}: at least one container selector is required")


@dataclass(frozen=True)
class ScrapedItem:
    """A single product card extracted from a page."""

    title: str
    raw_price_text: str
    source_url: str
    site_domain: str
    currency: Currency = Currency.TRY
    region: Region = Region.TR
    game_category: str = UNKNOWN_CATEGORY
    original_price_text: Optional[str] = None

    def __post_init__(self):
        if not self.title:
            raise ValueError("title is required")
        if not self.raw_price_text:
            raise ValueError("raw_price_text is required")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "price": self.raw_price_text,
            "originalPrice": self.original_price_text,
            "currency": self.currency.value,
            "region": self.region.value,
            "url": self.source_url,
            "siteName": self.site_domain,
            "gameSlug": self.game_category,
        }


@dataclass(frozen=True)
class ScrapeOutcome:
    """Result of scraping one requested URL."""

    url: str
    succeeded: bool
    site_domain: str
    items: Tuple[ScrapedItem, ...] = ()
    error_message: Optional[str] = None
    elapsed_ms: int = 0

    @classmethod
    def failure(cls, url: str, error_message: str, elapsed_ms: int = 0) -> "ScrapeOutcome":
        return cls(
            url=url,
            succeeded=False,
            site_domain=extract_domain(url),
            error_message=error_message,
            elapsed_ms=elapsed_ms,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "success": self.succeeded,
            "siteName": self.site_domain,
            "items": [item.to_dict() for item in self.items],
            "error": self.error_message,
            "responseTime": self.elapsed_ms,
        }


@dataclass(frozen=True)
class BatchReport:
    """Aggregate result of one orchestrator invocation."""

    batch_id: str
    started_at: datetime
    requested_url_count: int
    succeeded_count: int
    failed_count: int
    outcomes: Tuple[ScrapeOutcome, ...] = ()
    total_item_count: int = 0
    error_messages: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_outcomes(
        cls,
        batch_id: str,
        started_at: datetime,
        requested_url_count: int,
        outcomes: List[ScrapeOutcome],
    ) -> "BatchReport":
        succeeded = [o for o in outcomes if o.succeeded]
        return cls(
            batch_id=batch_id,
            started_at=started_at,
            requested_url_count=requested_url_count,
            succeeded_count=len(succeeded),
            failed_count=len(outcomes) - len(succeeded),
            outcomes=tuple(outcomes),
            total_item_count=sum(len(o.items) for o in succeeded),
            error_messages=tuple(
                o.error_message or "Unknown error" for o in outcomes if not o.succeeded
            ),
        )

    @property
    def items(self) -> List[ScrapedItem]:
        """All items of succeeded outcomes, in outcome order."""
        return [item for o in self.outcomes if o.succeeded for item in o.items]

    @property
    def failed_outcomes(self) -> List[ScrapeOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batchId": self.batch_id,
            "timestamp": self.started_at.isoformat(),
            "totalUrls": self.requested_url_count,
            "successCount": self.succeeded_count,
            "failedCount": self.failed_count,
            "totalItems": self.total_item_count,
            "results": [o.to_dict() for o in self.outcomes],
            "errors": list(self.error_messages),
        }


class Extractor(Protocol):
    """Contract shared by every scraping strategy.

    Implementations never raise for per-URL problems; failures are
    reported through ScrapeOutcome.
    """

    async def scrape(self, url: str, profile: Optional[SiteProfile] = None) -> ScrapeOutcome:
        ...

    async def close(self) -> None:
        ...

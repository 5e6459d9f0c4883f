"""Pytest configuration and shared fixtures."""

from typing import Dict, List, Optional, Union
from unittest.mock import AsyncMock, MagicMock

import pytest

from gameprice.scrapers.base import ScrapedItem, ScrapeOutcome, SiteProfile
from gameprice.scrapers.orchestrator import BatchOrchestrator
from gameprice.scrapers.utils.normalizer import extract_domain


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


# ============================================================================
# FAKES
# ============================================================================

async def no_sleep(seconds: float) -> None:
    """Stand-in for asyncio.sleep that returns immediately."""
    return None


def make_item(url: str, title: str = "PUBG Mobile 60 UC", price: str = "₺29,90") -> ScrapedItem:
    return ScrapedItem(
        title=title,
        raw_price_text=price,
        source_url=url,
        site_domain=extract_domain(url),
    )


class FakeExtractor:
    """Extractor double that records calls.

    Unless configured otherwise, every URL succeeds with one item.
    """

    def __init__(self, name: str):
        self.name = name
        self.calls: List[str] = []
        self.profiles: List[Optional[SiteProfile]] = []
        self.behaviors: Dict[str, Union[ScrapeOutcome, BaseException]] = {}
        self.closed = False

    def fail_with(self, url: str, exc: BaseException) -> None:
        self.behaviors[url] = exc

    def return_outcome(self, url: str, outcome: ScrapeOutcome) -> None:
        self.behaviors[url] = outcome

    async def scrape(self, url: str, profile: Optional[SiteProfile] = None) -> ScrapeOutcome:
        self.calls.append(url)
        self.profiles.append(profile)
        behavior = self.behaviors.get(url)
        if isinstance(behavior, BaseException):
            raise behavior
        if behavior is not None:
            return behavior
        return ScrapeOutcome(
            url=url,
            succeeded=True,
            site_domain=extract_domain(url),
            items=(make_item(url),),
            elapsed_ms=5,
        )

    async def close(self) -> None:
        self.closed = True


def make_fake_page(html: str = "<html></html>") -> MagicMock:
    """Playwright Page double; every wait returns immediately."""
    page = MagicMock()
    page.goto = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.evaluate = AsyncMock()
    page.content = AsyncMock(return_value=html)
    return page


def make_fake_browser_manager(page: MagicMock) -> MagicMock:
    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()

    manager = MagicMock()
    manager.new_context = AsyncMock(return_value=context)
    manager.stop = AsyncMock()
    manager.context = context
    return manager


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def fake_browser() -> FakeExtractor:
    return FakeExtractor("browser")


@pytest.fixture
def fake_proxy() -> FakeExtractor:
    return FakeExtractor("proxy")


@pytest.fixture
def orchestrator(fake_browser: FakeExtractor, fake_proxy: FakeExtractor) -> BatchOrchestrator:
    """Orchestrator wired to fake extractors with every delay disabled."""
    return BatchOrchestrator(
        browser_extractor=fake_browser,
        proxy_extractor=fake_proxy,
        deliver=False,
        concurrency=1,
        request_delay=0,
        domain_delay=0,
        batch_delay=0,
        max_execution_time=0,
        inter_url_delay=0,
        sleep=no_sleep,
    )


@pytest.fixture
def product_page_html() -> str:
    """Three product cards: two complete, one with an empty price."""
    return """
    <html><body>
      <div class="product-item">
        <h3 class="product-name d-block">PUBG Mobile 60 UC</h3>
        <div class="product-price">₺29,90</div>
      </div>
      <div class="product-item">
        <h3 class="product-name d-block">Valorant 475 VP</h3>
        <div class="product-price">149,90 TL</div>
        <div class="old-price">179,90 TL</div>
      </div>
      <div class="product-item">
        <h3 class="product-name d-block">Tukendi Paket</h3>
        <div class="product-price"></div>
      </div>
    </body></html>
    """

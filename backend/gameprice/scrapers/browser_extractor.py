"""Headless-browser extractor.

Renders each page in an isolated Playwright context, waits for the
product grid, then runs the selector cascade on the rendered DOM.
"""

import time
from typing import Optional

import structlog
from playwright.async_api import Error as PlaywrightError

from gameprice.config import settings
from gameprice.core.exceptions import RenderingEngineError
from gameprice.scrapers.base import ScrapeOutcome, SiteProfile
from gameprice.scrapers.extraction import extract_items
from gameprice.scrapers.registry import get_site_registry
from gameprice.scrapers.site_profiles import FULL_ASSET_DOMAINS
from gameprice.scrapers.utils.browser_manager import BrowserManager
from gameprice.scrapers.utils.normalizer import extract_domain


logger = structlog.get_logger(__name__)

NAVIGATION_TIMEOUT_MS = 20_000
FULL_ASSET_NAVIGATION_TIMEOUT_MS = 30_000
FALLBACK_NAVIGATION_TIMEOUT_MS = 15_000
WAIT_CONDITION_TIMEOUT_MS = 10_000
FULL_ASSET_RENDER_WAIT_MS = 8_000
FULL_ASSET_SCROLL_WAIT_MS = 3_000

NO_ITEMS_MESSAGE = "No items found with headless browser"


class BrowserExtractor:
    """Extractor backed by a long-lived headless Chromium."""

    def __init__(
        self,
        browser_manager: Optional[BrowserManager] = None,
        settle_ms: Optional[int] = None,
    ):
        self.browser_manager = browser_manager or BrowserManager()
        self.settle_ms = settings.RENDER_SETTLE_MS if settle_ms is None else settle_ms

    async def scrape(self, url: str, profile: Optional[SiteProfile] = None) -> ScrapeOutcome:
        started = time.monotonic()
        domain = extract_domain(url)
        profile = profile or get_site_registry().resolve(domain)
        log = logger.bind(extractor="browser", domain=domain)
        full_assets = domain in FULL_ASSET_DOMAINS

        def elapsed_ms() -> int:
            return int((time.monotonic() - started) * 1000)

        context = None
        try:
            context = await self.browser_manager.new_context(block_resources=not full_assets)
            page = await context.new_page()

            await self._navigate(page, url, full_assets, log)

            if full_assets:
                await page.wait_for_timeout(FULL_ASSET_RENDER_WAIT_MS)
                await page.evaluate("window.scrollTo(0, document.body.scrollHeight)")
                await page.wait_for_timeout(FULL_ASSET_SCROLL_WAIT_MS)

            await self._wait_for_content(page, profile, log)

            html = await page.content()
            items = extract_items(html, profile, url)
        except RenderingEngineError:
            raise
        except Exception as e:
            log.warning("browser_scrape_failed", url=url, error=str(e))
            return ScrapeOutcome.failure(url, str(e) or type(e).__name__, elapsed_ms())
        finally:
            if context is not None:
                try:
                    await context.close()
                except Exception as e:
                    log.debug("browser_context_close_failed", error=str(e))

        if not items:
            log.info("browser_scrape_empty", url=url)
            return ScrapeOutcome.failure(url, NO_ITEMS_MESSAGE, elapsed_ms())

        log.info("browser_scrape_completed", url=url, items=len(items))
        return ScrapeOutcome(
            url=url,
            succeeded=True,
            site_domain=domain,
            items=tuple(items),
            elapsed_ms=elapsed_ms(),
        )

    async def _navigate(self, page, url: str, full_assets: bool, log) -> None:
        """Go to url, falling back to domcontentloaded when the first try fails."""
        try:
            if full_assets:
                await page.goto(url, wait_until="load", timeout=FULL_ASSET_NAVIGATION_TIMEOUT_MS)
            else:
                await page.goto(url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
        except PlaywrightError as e:
            log.warning("primary_navigation_failed", url=url, error=str(e))
            await page.goto(
                url, wait_until="domcontentloaded", timeout=FALLBACK_NAVIGATION_TIMEOUT_MS
            )

    async def _wait_for_content(self, page, profile: SiteProfile, log) -> None:
        if not profile.wait_condition:
            await page.wait_for_timeout(self.settle_ms)
            return
        try:
            await page.wait_for_selector(
                profile.wait_condition, timeout=WAIT_CONDITION_TIMEOUT_MS
            )
        except PlaywrightError:
            log.info("wait_condition_not_found", selector=profile.wait_condition)
            await page.wait_for_timeout(self.settle_ms)

    async def close(self) -> None:
        await self.browser_manager.stop()

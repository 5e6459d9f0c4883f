"""Playwright browser lifecycle manager with anti-detection.

Owns one long-lived Chromium instance and hands out a fresh, isolated
context for every scrape.
"""

import asyncio
from typing import Optional

import structlog
from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright

from gameprice.config import settings
from gameprice.core.exceptions import RenderingEngineError
from gameprice.scrapers.utils.user_agents import BROWSER_HEADERS, get_user_agent

logger = structlog.get_logger(__name__)


LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--no-first-run",
    "--disable-gpu",
]

VIEWPORT = {"width": 1920, "height": 1080}
BLOCKED_RESOURCE_TYPES = frozenset({"image", "stylesheet"})


class BrowserManager:
    """Manages the Playwright browser lifecycle.

    The browser is launched lazily on the first call to new_context() and
    released by stop(). A launch failure raises RenderingEngineError.
    """

    def __init__(self, headless: Optional[bool] = None, user_agent: Optional[str] = None):
        self._headless = settings.BROWSER_HEADLESS if headless is None else headless
        self._user_agent = user_agent or get_user_agent()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    async def start(self) -> None:
        """Launch the browser if it is not running yet."""
        async with self._lock:
            if self._browser:
                return
            try:
                self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=self._headless,
                    args=LAUNCH_ARGS,
                )
            except Exception as e:
                logger.error("browser_launch_failed", error=str(e))
                await self._shutdown()
                raise RenderingEngineError(f"Failed to launch browser: {e}") from e
            logger.info("browser_started", headless=self._headless)

    async def stop(self) -> None:
        """Close the browser and the Playwright driver."""
        async with self._lock:
            if self._browser or self._playwright:
                await self._shutdown()
                logger.info("browser_stopped")

    async def _shutdown(self) -> None:
        if self._browser:
            try:
                await self._browser.close()
            except Exception as e:
                logger.warning("browser_close_failed", error=str(e))
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    async def new_context(self, block_resources: bool = True) -> BrowserContext:
        """Create an isolated context with Turkish locale and stealth patches.

        The caller owns the context and must close it.
        """
        if not self._browser:
            await self.start()

        context = await self._browser.new_context(
            user_agent=self._user_agent,
            viewport=VIEWPORT,
            locale="tr-TR",
            timezone_id="Europe/Istanbul",
            extra_http_headers=BROWSER_HEADERS,
            java_script_enabled=True,
            bypass_csp=True,
        )

        # Inject stealth script to avoid detection
        await context.add_init_script(STEALTH_JS)

        if block_resources:
            await context.route("**/*", _block_heavy_resources)

        return context


async def _block_heavy_resources(route) -> None:
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


# Minimal stealth JS to mask automation signals
STEALTH_JS = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'languages', { get: () => ['tr-TR', 'tr', 'en-US', 'en'] });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
window.chrome = { runtime: {} };
"""

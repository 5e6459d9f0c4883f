"""Bypass-proxy extractor.

Fetches Cloudflare-protected pages through a FlareSolverr instance and
parses the returned HTML with the selector cascade.
"""

import time
from typing import Any, Dict, Optional

import httpx
import structlog
from tenacity.wait import wait_base

from gameprice.config import settings
from gameprice.core.exceptions import ProxyServiceError
from gameprice.scrapers.base import ScrapeOutcome, SiteProfile
from gameprice.scrapers.extraction import extract_items
from gameprice.scrapers.registry import get_site_registry
from gameprice.scrapers.utils.normalizer import extract_domain
from gameprice.scrapers.utils.retry import proxy_retrying
from gameprice.scrapers.utils.user_agents import get_user_agent


logger = structlog.get_logger(__name__)

SESSION_CREATE_TIMEOUT = 30.0
# Cloudflare challenges can take minutes; the HTTP timeout outlives maxTimeout
SOLVER_MAX_TIMEOUT_MS = 180_000
REQUEST_TIMEOUT = 190.0

NO_ITEMS_MESSAGE = "No items found with bypass proxy"


class ProxyExtractor:
    """Extractor that delegates page fetches to FlareSolverr."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_wait: Optional[wait_base] = None,
    ):
        self.base_url = (base_url or settings.FLARESOLVERR_URL).rstrip("/")
        self.user_agent = user_agent or get_user_agent()
        self._transport = transport
        self._retry_wait = retry_wait
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/v1"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=self._transport,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def _create_session(self, session_id: str, log) -> None:
        """Best effort; FlareSolverr rejects ids that already exist."""
        try:
            await self._get_client().post(
                self.endpoint,
                json={"cmd": "sessions.create", "session": session_id},
                timeout=SESSION_CREATE_TIMEOUT,
            )
        except httpx.HTTPError as e:
            log.debug("proxy_session_create_skipped", session=session_id, error=str(e))

    async def _request_get(self, url: str, session_id: str) -> Dict[str, Any]:
        response = await self._get_client().post(
            self.endpoint,
            json={
                "cmd": "request.get",
                "url": url,
                "session": session_id,
                "maxTimeout": SOLVER_MAX_TIMEOUT_MS,
                "userAgent": self.user_agent,
            },
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        return response.json()

    async def fetch_html(self, url: str, profile: SiteProfile) -> str:
        """Return the solved page HTML.

        Raises:
            ProxyServiceError: FlareSolverr answered with a non-ok status
            httpx.HTTPError: Transport failure after retries, or non-2xx
        """
        domain = extract_domain(url)
        session_id = f"session_{domain or 'default'}"
        log = logger.bind(extractor="proxy", domain=domain, session=session_id)

        await self._create_session(session_id, log)

        async for attempt in proxy_retrying(profile.max_retries, wait=self._retry_wait):
            with attempt:
                data = await self._request_get(url, session_id)

        if data.get("status") != "ok":
            raise ProxyServiceError(domain, data.get("message") or "unknown error")

        solution = data.get("solution") or {}
        return solution.get("response") or ""

    async def scrape(self, url: str, profile: Optional[SiteProfile] = None) -> ScrapeOutcome:
        started = time.monotonic()
        domain = extract_domain(url)
        profile = profile or get_site_registry().resolve(domain)
        log = logger.bind(extractor="proxy", domain=domain)

        def elapsed_ms() -> int:
            return int((time.monotonic() - started) * 1000)

        try:
            html = await self.fetch_html(url, profile)
            items = extract_items(html, profile, url)
        except Exception as e:
            log.warning("proxy_scrape_failed", url=url, error=str(e))
            return ScrapeOutcome.failure(url, str(e) or type(e).__name__, elapsed_ms())

        if not items:
            log.info("proxy_scrape_empty", url=url)
            return ScrapeOutcome.failure(url, NO_ITEMS_MESSAGE, elapsed_ms())

        log.info("proxy_scrape_completed", url=url, items=len(items), elapsed_ms=elapsed_ms())
        return ScrapeOutcome(
            url=url,
            succeeded=True,
            site_domain=domain,
            items=tuple(items),
            elapsed_ms=elapsed_ms(),
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

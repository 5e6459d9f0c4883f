"""Batch orchestration: strategy dispatch, pacing, reporting, and delivery."""

import asyncio
import time
from collections import Counter
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Set

import structlog

from gameprice.config import settings
from gameprice.core.exceptions import RenderingEngineError
from gameprice.scrapers.base import BatchReport, Extractor, ScrapeOutcome
from gameprice.scrapers.browser_extractor import BrowserExtractor
from gameprice.scrapers.proxy_extractor import ProxyExtractor
from gameprice.scrapers.registry import (
    ExtractionStrategy,
    SiteProfileRegistry,
    get_site_registry,
)
from gameprice.scrapers.utils.normalizer import extract_domain, generate_batch_id
from gameprice.scrapers.utils.rate_limiter import DomainThrottle
from gameprice.services.delivery import DeliveryClient


logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[int, int], None]

MIN_CONCURRENCY = 1
MAX_CONCURRENCY = 8
MIN_BATCH_DELAY = 0.5
INTER_URL_DELAY = 1.0
SKIPPED_MESSAGE = "Skipped: max execution time exceeded"
ERROR_KEY_LENGTH = 50


class OrchestratorState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


def load_urls(path: str) -> List[str]:
    """Read newline-delimited URLs, keeping only lines that start with http.

    Raises:
        OSError: The file cannot be read
    """
    with open(path, encoding="utf-8") as f:
        lines = [line.strip() for line in f]
    return [line for line in lines if line and line.startswith("http")]


class BatchOrchestrator:
    """Runs batches of URLs through the matching extractor.

    Per-URL failures are reported as failed outcomes; only a browser
    launch failure (RenderingEngineError) aborts a batch.
    """

    def __init__(
        self,
        browser_extractor: Optional[Extractor] = None,
        proxy_extractor: Optional[Extractor] = None,
        delivery: Optional[DeliveryClient] = None,
        registry: Optional[SiteProfileRegistry] = None,
        deliver: bool = True,
        concurrency: Optional[int] = None,
        request_delay: Optional[float] = None,
        domain_delay: Optional[float] = None,
        batch_delay: Optional[float] = None,
        max_execution_time: Optional[float] = None,
        inter_url_delay: float = INTER_URL_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize orchestrator.

        Delays and time limits are in seconds; unset values come from the
        millisecond settings.
        """
        self.registry = registry or get_site_registry()
        self._extractors: Dict[ExtractionStrategy, Extractor] = {
            ExtractionStrategy.RENDERING: browser_extractor or BrowserExtractor(),
            ExtractionStrategy.BYPASS_PROXY: proxy_extractor or ProxyExtractor(),
        }
        self.delivery = (delivery or DeliveryClient()) if deliver else None

        self.concurrency = _clamp_concurrency(
            settings.SCRAPER_CONCURRENCY if concurrency is None else concurrency
        )
        self.batch_delay = max(
            MIN_BATCH_DELAY,
            settings.SCRAPER_BATCH_DELAY / 1000 if batch_delay is None else batch_delay,
        )
        self.max_execution_time = (
            settings.MAX_EXECUTION_TIME / 1000 if max_execution_time is None else max_execution_time
        )
        self.inter_url_delay = inter_url_delay
        self._sleep = sleep
        self.throttle = DomainThrottle(
            request_delay=settings.SCRAPER_REQUEST_DELAY / 1000 if request_delay is None else request_delay,
            domain_delay=settings.SCRAPER_DOMAIN_DELAY / 1000 if domain_delay is None else domain_delay,
            sleep=sleep,
        )

        self.state = OrchestratorState.IDLE
        self.last_report: Optional[BatchReport] = None
        self._started_at: Optional[float] = None
        self._last_batch_finished: Optional[float] = None
        self._pending_deliveries: Set[asyncio.Task] = set()
        self.logger = logger.bind(component="orchestrator")

    # ================================================================
    # Lifecycle
    # ================================================================

    async def initialize(self) -> None:
        """Start the execution clock and probe the webhook."""
        self._started_at = time.monotonic()
        self.logger.info(
            "orchestrator_initialized",
            concurrency=self.concurrency,
            batch_delay_s=self.batch_delay,
            request_delay_s=self.throttle.request_delay,
            domain_delay_s=self.throttle.domain_delay,
            max_execution_time_s=self.max_execution_time,
        )
        if self.delivery is not None:
            connected = await self.delivery.test_connection()
            if not connected:
                self.logger.warning("webhook_unreachable_continuing", url=self.delivery.webhook_url)

    async def close(self) -> None:
        """Wait for pending deliveries, then release extractor resources."""
        if self._pending_deliveries:
            await asyncio.gather(*self._pending_deliveries, return_exceptions=True)
        for extractor in self._extractors.values():
            await extractor.close()
        self.logger.info("orchestrator_closed")

    # ================================================================
    # Configuration
    # ================================================================

    def set_resume_url(self, url: str) -> None:
        """Deliver this orchestrator's batches to url instead of the default webhook."""
        if self.delivery is not None:
            self.delivery.set_webhook_url(url)

    def set_concurrency(self, concurrency: int) -> None:
        self.concurrency = _clamp_concurrency(concurrency)
        self.logger.info("concurrency_set", concurrency=self.concurrency)

    def set_batch_delay(self, seconds: float) -> None:
        self.batch_delay = max(MIN_BATCH_DELAY, seconds)
        self.logger.info("batch_delay_set", seconds=self.batch_delay)

    def set_request_delay(self, seconds: float) -> None:
        self.throttle.request_delay = max(0.0, seconds)
        self.logger.info("request_delay_set", seconds=self.throttle.request_delay)

    def set_domain_delay(self, seconds: float) -> None:
        self.throttle.domain_delay = max(0.0, seconds)
        self.logger.info("domain_delay_set", seconds=self.throttle.domain_delay)

    def get_domain_status(self) -> Dict[str, Dict[str, float]]:
        return self.throttle.get_domain_status()

    # ================================================================
    # Scraping
    # ================================================================

    def _time_exceeded(self) -> bool:
        if self._started_at is None or self.max_execution_time <= 0:
            return False
        return time.monotonic() - self._started_at > self.max_execution_time

    async def scrape_url(self, url: str) -> ScrapeOutcome:
        """Scrape one URL with the extractor its domain requires.

        Raises:
            RenderingEngineError: The headless browser could not be started
        """
        domain = extract_domain(url)
        profile = self.registry.resolve(domain)
        strategy = self.registry.strategy_for(domain)
        extractor = self._extractors[strategy]

        await self.throttle.acquire(domain, profile.inter_request_delay_ms / 1000)
        self.logger.debug("dispatching_url", url=url, domain=domain, strategy=strategy.value)
        try:
            return await extractor.scrape(url, profile)
        except RenderingEngineError:
            raise
        except Exception as e:
            self.logger.error("url_dispatch_failed", url=url, error=str(e), exc_info=True)
            return ScrapeOutcome.failure(url, str(e) or "Unknown error")

    async def _wait_batch_cooldown(self) -> None:
        if self._last_batch_finished is None:
            return
        remaining = self.batch_delay - (time.monotonic() - self._last_batch_finished)
        if remaining > 0:
            self.logger.info("batch_cooldown", seconds=round(remaining, 2))
            await self._sleep(remaining)

    async def scrape_urls(
        self,
        urls: Sequence[str],
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchReport:
        """Scrape every URL and build the batch report.

        Outcomes keep the input order. At most `concurrency` URLs are in
        flight at once.

        Raises:
            RenderingEngineError: The headless browser could not be started
        """
        urls = list(urls)
        total = len(urls)
        batch_id = generate_batch_id()
        started_at = datetime.now(timezone.utc)
        log = self.logger.bind(batch_id=batch_id)

        await self._wait_batch_cooldown()
        if self._started_at is None:
            self._started_at = time.monotonic()

        self.state = OrchestratorState.RUNNING
        log.info("batch_started", total_urls=total, concurrency=self.concurrency)

        outcomes: List[Optional[ScrapeOutcome]] = [None] * total
        semaphore = asyncio.Semaphore(self.concurrency)
        processed = 0

        async def worker(index: int, url: str) -> None:
            nonlocal processed
            async with semaphore:
                dispatched = not self._time_exceeded()
                if not dispatched:
                    outcome = ScrapeOutcome.failure(url, SKIPPED_MESSAGE)
                else:
                    outcome = await self.scrape_url(url)
                    log.info(
                        "url_processed",
                        url=url,
                        success=outcome.succeeded,
                        items=len(outcome.items),
                        elapsed_ms=outcome.elapsed_ms,
                        error=outcome.error_message,
                    )
                outcomes[index] = outcome
                processed += 1
                if on_progress is not None:
                    on_progress(processed, total)
                if dispatched and self.inter_url_delay > 0 and processed < total:
                    await self._sleep(self.inter_url_delay)

        tasks = [asyncio.create_task(worker(i, url)) for i, url in enumerate(urls)]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            self.state = OrchestratorState.FAILED
            self._last_batch_finished = time.monotonic()
            log.error("batch_aborted", processed=processed, total_urls=total)
            raise

        report = BatchReport.from_outcomes(batch_id, started_at, total, outcomes)
        self.last_report = report
        self.state = OrchestratorState.COMPLETED
        self._last_batch_finished = time.monotonic()

        self._log_summary(report, log)
        self._schedule_delivery(report, log)
        return report

    async def scrape_from_file(
        self,
        path: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchReport:
        """Scrape the URLs listed in a file.

        Raises:
            OSError: The file cannot be read
        """
        try:
            urls = load_urls(path)
        except OSError as e:
            self.logger.error("url_file_read_failed", path=path, error=str(e))
            raise
        self.logger.info("urls_loaded", path=path, count=len(urls))
        return await self.scrape_urls(urls, on_progress)

    # ================================================================
    # Reporting and delivery
    # ================================================================

    def _log_summary(self, report: BatchReport, log) -> None:
        total = report.requested_url_count or 1
        log.info(
            "batch_summary",
            total_urls=report.requested_url_count,
            succeeded=report.succeeded_count,
            failed=report.failed_count,
            success_rate=round(report.succeeded_count / total * 100),
            total_items=report.total_item_count,
        )

        domain_stats: Dict[str, Dict[str, int]] = {}
        for outcome in report.outcomes:
            stats = domain_stats.setdefault(outcome.site_domain, {"items": 0, "success": 0, "total": 0})
            stats["total"] += 1
            stats["items"] += len(outcome.items)
            if outcome.succeeded:
                stats["success"] += 1

        ranked = sorted(domain_stats.items(), key=lambda kv: kv[1]["items"], reverse=True)
        for domain, stats in ranked[:10]:
            log.info(
                "domain_performance",
                domain=domain,
                items=stats["items"],
                success_rate=round(stats["success"] / stats["total"] * 100),
                succeeded=stats["success"],
                total=stats["total"],
            )

        error_counts = Counter(msg[:ERROR_KEY_LENGTH] for msg in report.error_messages)
        for message, count in error_counts.most_common(5):
            log.info("common_error", error=message, count=count)

    def _schedule_delivery(self, report: BatchReport, log) -> None:
        if self.delivery is None:
            return
        if report.total_item_count == 0:
            log.info("delivery_skipped_no_items")
            return
        task = asyncio.create_task(self._deliver(report))
        self._pending_deliveries.add(task)
        task.add_done_callback(self._pending_deliveries.discard)

    async def _deliver(self, report: BatchReport) -> bool:
        delivered = await self.delivery.send_batch_data(report)
        if not delivered:
            self.logger.error("batch_delivery_failed", batch_id=report.batch_id)
        return delivered


def _clamp_concurrency(value: int) -> int:
    return max(MIN_CONCURRENCY, min(MAX_CONCURRENCY, int(value)))
